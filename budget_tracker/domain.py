from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


@dataclass(frozen=True)
class Transaction:
    id: str
    type: TransactionType
    amount: float                                  # always > 0, direction is in `type`
    category: str
    date: str                                      # calendar date, "YYYY-MM-DD"
    description: str = ""
    is_recurring: bool = False                     # informational only
    recurring_frequency: Optional[Frequency] = None


@dataclass(frozen=True)
class RecurringTransaction:
    id: str
    type: TransactionType
    amount: float
    category: str
    frequency: Frequency
    start_date: str
    description: str = ""
    is_active: bool = True


# Drafts are what the forms submit; ids are assigned by the mutation layer.
@dataclass(frozen=True)
class TransactionDraft:
    type: TransactionType
    amount: float
    category: str
    date: str
    description: str = ""
    is_recurring: bool = False
    recurring_frequency: Optional[Frequency] = None


@dataclass(frozen=True)
class RecurringDraft:
    type: TransactionType
    amount: float
    category: str
    frequency: Frequency
    start_date: str
    description: str = ""


@dataclass(frozen=True)
class AppState:
    transactions: tuple[Transaction, ...] = ()
    recurring: tuple[RecurringTransaction, ...] = ()
    monthly_budget: float = 3000.0


def parse_date(value: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` calendar date.

    Dates are plain calendar dates; no timezone is ever applied, so the
    month and weekday of a transaction are those written in its date string.
    Raises ValueError for anything else.
    """
    if not isinstance(value, str) or len(value) != 10:
        raise ValueError(f"Invalid date: {value!r}")
    return datetime.strptime(value, "%Y-%m-%d").date()


def optional_frequency(value) -> Optional[Frequency]:
    """Optional frequency tag; anything unrecognised counts as absent."""
    try:
        return Frequency(value)
    except (TypeError, ValueError):
        return None


def try_parse_date(value: str) -> Optional[date]:
    try:
        return parse_date(value)
    except ValueError:
        return None
