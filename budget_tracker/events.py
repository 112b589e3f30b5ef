import logging
from datetime import date, datetime
from typing import Callable, Dict, List, NamedTuple

from budget_tracker.aggregations import current_month_window, sum_by_type
from budget_tracker.domain import AppState, TransactionType
from budget_tracker.storage import (
    KeyValueStorage,
    save_budget,
    save_recurring,
    save_transactions,
)

__all__ = [
    'TRANSACTIONS_CHANGED', 'RECURRING_CHANGED', 'BUDGET_CHANGED', 'BUDGET_ALERT',
    'Event', 'EventBus', 'persist_handler', 'check_budget_handler', 'register_default_handlers',
]

logger = logging.getLogger(__name__)

TRANSACTIONS_CHANGED = "TRANSACTIONS_CHANGED"
RECURRING_CHANGED = "RECURRING_CHANGED"
BUDGET_CHANGED = "BUDGET_CHANGED"
BUDGET_ALERT = "BUDGET_ALERT"


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        if name not in self._subscribers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event, payload) for handler in self._subscribers[name]]

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)


def persist_handler(storage: KeyValueStorage) -> Handler:
    """Build a handler that writes the slot named by the event to ``storage``."""
    def _persist(event: Event, payload: dict) -> dict:
        state: AppState = payload["state"]
        if event.name == TRANSACTIONS_CHANGED:
            ok = save_transactions(storage, state.transactions)
        elif event.name == RECURRING_CHANGED:
            ok = save_recurring(storage, state.recurring)
        elif event.name == BUDGET_CHANGED:
            ok = save_budget(storage, state.monthly_budget)
        else:
            return {}
        if not ok:
            logger.warning("Storage write failed for %s", event.name)
        return {"persisted": ok}

    return _persist


def check_budget_handler(event: Event, payload: dict) -> dict:
    state: AppState = payload["state"]
    today: date = payload.get("today") or date.today()

    spent = sum_by_type(current_month_window(state.transactions, today), TransactionType.EXPENSE)
    limit = state.monthly_budget
    if limit > 0 and spent > limit:
        return {
            "alert": f"Over budget: spent {spent:,.2f} of {limit:,.2f} this month",
            "spent": spent,
            "limit": limit,
        }
    return {}


def register_default_handlers(bus: EventBus, storage: KeyValueStorage) -> EventBus:
    persist = persist_handler(storage)
    for name in (TRANSACTIONS_CHANGED, RECURRING_CHANGED, BUDGET_CHANGED):
        bus.subscribe(name, persist)
    bus.subscribe(TRANSACTIONS_CHANGED, check_budget_handler)
    bus.subscribe(BUDGET_CHANGED, check_budget_handler)
    return bus
