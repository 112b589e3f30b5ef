import logging
from dataclasses import replace
from typing import Callable, Tuple
from uuid import uuid4

from budget_tracker.domain import (
    AppState,
    RecurringDraft,
    RecurringTransaction,
    Transaction,
    TransactionDraft,
)
from budget_tracker.functional import (
    unwrap,
    validate_budget,
    validate_recurring_draft,
    validate_transaction_draft,
)

logger = logging.getLogger(__name__)


def new_id() -> str:
    return uuid4().hex


def add_transaction(
    trans: Tuple[Transaction, ...],
    draft: TransactionDraft,
    id_factory: Callable[[], str] = new_id,
) -> Tuple[Transaction, ...]:
    """Validate ``draft`` and prepend it as a new transaction (newest first).

    Raises ValidationError when the draft is rejected.
    """
    valid = unwrap(validate_transaction_draft(draft))
    t = Transaction(
        id=id_factory(),
        type=valid.type,
        amount=valid.amount,
        category=valid.category,
        date=valid.date,
        description=valid.description,
        is_recurring=valid.is_recurring,
        recurring_frequency=valid.recurring_frequency,
    )
    return (t,) + tuple(trans)


def delete_transaction(trans: Tuple[Transaction, ...], tx_id: str) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.id != tx_id, trans))


def add_recurring_transaction(
    recurring: Tuple[RecurringTransaction, ...],
    draft: RecurringDraft,
    id_factory: Callable[[], str] = new_id,
) -> Tuple[RecurringTransaction, ...]:
    """Validate ``draft`` and append it as an active recurring template."""
    valid = unwrap(validate_recurring_draft(draft))
    rt = RecurringTransaction(
        id=id_factory(),
        type=valid.type,
        amount=valid.amount,
        category=valid.category,
        frequency=valid.frequency,
        start_date=valid.start_date,
        description=valid.description,
        is_active=True,
    )
    return tuple(recurring) + (rt,)


def toggle_recurring_active(
    recurring: Tuple[RecurringTransaction, ...], rt_id: str
) -> Tuple[RecurringTransaction, ...]:
    return tuple(
        replace(rt, is_active=not rt.is_active) if rt.id == rt_id else rt
        for rt in recurring
    )


def delete_recurring_transaction(
    recurring: Tuple[RecurringTransaction, ...], rt_id: str
) -> Tuple[RecurringTransaction, ...]:
    return tuple(filter(lambda rt: rt.id != rt_id, recurring))


def set_monthly_budget(current: float, proposed: float) -> float:
    """Return the new budget, or raise ValidationError leaving ``current`` in place."""
    result = validate_budget(proposed)
    if result.is_left():
        logger.warning("Rejected budget %r, keeping %r", proposed, current)
    return unwrap(result)


# --- AppState helpers

def with_transactions(state: AppState, trans: Tuple[Transaction, ...]) -> AppState:
    return replace(state, transactions=trans)


def with_recurring(state: AppState, recurring: Tuple[RecurringTransaction, ...]) -> AppState:
    return replace(state, recurring=recurring)


def with_budget(state: AppState, monthly_budget: float) -> AppState:
    return replace(state, monthly_budget=monthly_budget)
