import math
from abc import ABC, abstractmethod
from typing import TypeVar, Generic, Iterable

from budget_tracker.domain import (
    Frequency,
    RecurringDraft,
    RecurringTransaction,
    Transaction,
    TransactionDraft,
    TransactionType,
    optional_frequency,
    try_parse_date,
)
from budget_tracker.errors import ValidationError

T = TypeVar('T')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):
    """Validation result: Right holds the accepted value, Left the error."""

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def unwrap(result: Either[ValidationError, T]) -> T:
    """Return the Right value or raise the Left error."""
    if result.is_left():
        raise result.get_error()
    return result.get_or_else(None)


def safe_transaction(trans: Iterable[Transaction], tx_id: str) -> Maybe[Transaction]:
    for t in trans:
        if t.id == tx_id:
            return Some(t)
    return Nothing()


def safe_recurring(
    recurring: Iterable[RecurringTransaction], rt_id: str
) -> Maybe[RecurringTransaction]:
    for rt in recurring:
        if rt.id == rt_id:
            return Some(rt)
    return Nothing()


def _check_type(value) -> Either[ValidationError, TransactionType]:
    try:
        return Right(TransactionType(value))
    except ValueError:
        return Left(ValidationError("type", f"Unknown transaction type: {value!r}"))


def _check_frequency(field: str, value) -> Either[ValidationError, Frequency]:
    try:
        return Right(Frequency(value))
    except ValueError:
        return Left(ValidationError(field, f"Unknown frequency: {value!r}"))


def _check_amount(value) -> Either[ValidationError, float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return Left(ValidationError("amount", f"Amount must be a number, got {value!r}"))
    if not math.isfinite(value) or value <= 0:
        return Left(ValidationError("amount", "Amount must be greater than zero"))
    return Right(float(value))


def _check_category(value) -> Either[ValidationError, str]:
    if not isinstance(value, str) or not value.strip():
        return Left(ValidationError("category", "Category is required"))
    return Right(value.strip())


def _check_date(field: str, value) -> Either[ValidationError, str]:
    if try_parse_date(value) is None:
        return Left(ValidationError(field, f"Invalid date {value!r}, expected YYYY-MM-DD"))
    return Right(value)


def validate_transaction_draft(
    draft: TransactionDraft,
) -> Either[ValidationError, TransactionDraft]:
    checks = (
        _check_type(draft.type),
        _check_amount(draft.amount),
        _check_category(draft.category),
        _check_date("date", draft.date),
    )
    for check in checks:
        if check.is_left():
            return Left(check.get_error())

    # optional fields are informational: malformed values count as absent
    return Right(TransactionDraft(
        type=TransactionType(draft.type),
        amount=float(draft.amount),
        category=draft.category.strip(),
        date=draft.date,
        description=draft.description if isinstance(draft.description, str) else "",
        is_recurring=draft.is_recurring is True,
        recurring_frequency=optional_frequency(draft.recurring_frequency),
    ))


def validate_recurring_draft(
    draft: RecurringDraft,
) -> Either[ValidationError, RecurringDraft]:
    checks = (
        _check_type(draft.type),
        _check_amount(draft.amount),
        _check_category(draft.category),
        _check_frequency("frequency", draft.frequency),
        _check_date("start_date", draft.start_date),
    )
    for check in checks:
        if check.is_left():
            return Left(check.get_error())

    return Right(RecurringDraft(
        type=TransactionType(draft.type),
        amount=float(draft.amount),
        category=draft.category.strip(),
        frequency=Frequency(draft.frequency),
        start_date=draft.start_date,
        description=draft.description or "",
    ))


def validate_budget(proposed) -> Either[ValidationError, float]:
    if isinstance(proposed, bool) or not isinstance(proposed, (int, float)):
        return Left(ValidationError("monthly_budget", f"Budget must be a number, got {proposed!r}"))
    if not math.isfinite(proposed) or proposed <= 0:
        return Left(ValidationError("monthly_budget", "Budget must be greater than zero"))
    return Right(float(proposed))
