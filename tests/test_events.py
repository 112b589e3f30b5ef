from datetime import date

from budget_tracker.domain import AppState, Transaction, TransactionType
from budget_tracker.events import (
    BUDGET_CHANGED,
    RECURRING_CHANGED,
    TRANSACTIONS_CHANGED,
    Event,
    EventBus,
    check_budget_handler,
    persist_handler,
    register_default_handlers,
)
from budget_tracker.storage import BUDGET_KEY, RECURRING_KEY, TRANSACTIONS_KEY, MemoryStorage

TODAY = date(2024, 1, 20)


def make_state(spent: float, budget: float = 100.0) -> AppState:
    return AppState(
        transactions=(Transaction("t1", TransactionType.EXPENSE, spent, "Food", "2024-01-05"),),
        monthly_budget=budget,
    )


def make_event(name: str, payload: dict) -> Event:
    return Event(name=name, ts="2024-01-20T10:00:00", payload=payload)


def test_event_bus_subscribe_and_publish():
    bus = EventBus()
    seen = []

    def handler(event: Event, payload: dict) -> dict:
        seen.append(event.name)
        return {"processed": True}

    bus.subscribe(TRANSACTIONS_CHANGED, handler)
    results = bus.publish(TRANSACTIONS_CHANGED, {"state": AppState()})

    assert results == [{"processed": True}]
    assert seen == [TRANSACTIONS_CHANGED]
    assert bus.publish(BUDGET_CHANGED, {}) == []


def test_event_bus_unsubscribe():
    bus = EventBus()
    handler = lambda event, payload: {"n": 1}  # noqa: E731
    bus.subscribe(RECURRING_CHANGED, handler)
    bus.unsubscribe(RECURRING_CHANGED, handler)
    bus.unsubscribe(RECURRING_CHANGED, handler)
    assert bus.publish(RECURRING_CHANGED, {}) == []


def test_persist_handler_writes_only_the_changed_slot():
    storage = MemoryStorage()
    persist = persist_handler(storage)
    payload = {"state": make_state(10)}

    assert persist(make_event(TRANSACTIONS_CHANGED, payload), payload) == {"persisted": True}
    assert storage.get(TRANSACTIONS_KEY) is not None
    assert storage.get(RECURRING_KEY) is None
    assert storage.get(BUDGET_KEY) is None

    persist(make_event(BUDGET_CHANGED, payload), payload)
    assert storage.get(BUDGET_KEY) == "100"


def test_check_budget_handler_alerts_when_over():
    payload = {"state": make_state(150), "today": TODAY}
    result = check_budget_handler(make_event(TRANSACTIONS_CHANGED, payload), payload)
    assert "Over budget" in result["alert"]
    assert result["spent"] == 150
    assert result["limit"] == 100


def test_check_budget_handler_quiet_within_budget_or_other_month():
    payload = {"state": make_state(80), "today": TODAY}
    assert check_budget_handler(make_event(TRANSACTIONS_CHANGED, payload), payload) == {}

    payload = {"state": make_state(500), "today": date(2024, 2, 1)}
    assert check_budget_handler(make_event(TRANSACTIONS_CHANGED, payload), payload) == {}


def test_register_default_handlers():
    storage = MemoryStorage()
    bus = register_default_handlers(EventBus(), storage)
    results = bus.publish(TRANSACTIONS_CHANGED, {"state": make_state(500), "today": TODAY})
    assert results[0] == {"persisted": True}
    assert "alert" in results[1]
