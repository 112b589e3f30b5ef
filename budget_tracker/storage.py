"""Key-value persistence for the tracker state.

Three independent slots are kept: ``transactions`` and
``recurringTransactions`` (JSON arrays) and ``monthlyBudget`` (a decimal
string). Loading never fails: a missing or corrupt slot falls back to an
empty collection or the default budget. Every save rewrites one slot in full.
"""
from __future__ import annotations

import json
import logging
import math
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Tuple

from budget_tracker.domain import (
    AppState,
    Frequency,
    RecurringTransaction,
    Transaction,
    TransactionType,
    optional_frequency,
)

logger = logging.getLogger(__name__)

TRANSACTIONS_KEY = "transactions"
RECURRING_KEY = "recurringTransactions"
BUDGET_KEY = "monthlyBudget"

DEFAULT_MONTHLY_BUDGET = 3000.0


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> bool:
        ...


class MemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> bool:
        self._data[key] = value
        return True


class JsonFileStorage:
    """All slots in one JSON object on disk, rewritten on every ``set``.

    Writes go to a temporary file in the same directory which then replaces
    the original, so a crash mid-write leaves the previous file intact.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not read %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring %s: expected a JSON object", self.path)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> bool:
        data = self._read_all()
        data[key] = value
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2, sort_keys=True)
            Path(tmp_name).replace(self.path)
        except OSError as e:
            logger.warning("Could not write %r to %s: %s", key, self.path, e)
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            return False
        return True


# --- records

def transaction_to_dict(t: Transaction) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": t.id,
        "type": TransactionType(t.type).value,
        "amount": t.amount,
        "category": t.category,
        "description": t.description,
        "date": t.date,
    }
    if t.is_recurring:
        data["isRecurring"] = True
    if t.recurring_frequency is not None:
        data["recurringFrequency"] = Frequency(t.recurring_frequency).value
    return data


def transaction_from_dict(data: Dict[str, Any]) -> Transaction:
    return Transaction(
        id=str(data["id"]),
        type=TransactionType(data["type"]),
        amount=_positive_amount(data["amount"]),
        category=str(data["category"]),
        date=str(data["date"]),
        description=str(data.get("description") or ""),
        is_recurring=data.get("isRecurring") is True,
        recurring_frequency=optional_frequency(data.get("recurringFrequency")),
    )


def recurring_to_dict(rt: RecurringTransaction) -> Dict[str, Any]:
    return {
        "id": rt.id,
        "type": TransactionType(rt.type).value,
        "amount": rt.amount,
        "category": rt.category,
        "description": rt.description,
        "frequency": Frequency(rt.frequency).value,
        "startDate": rt.start_date,
        "isActive": rt.is_active,
    }


def recurring_from_dict(data: Dict[str, Any]) -> RecurringTransaction:
    return RecurringTransaction(
        id=str(data["id"]),
        type=TransactionType(data["type"]),
        amount=_positive_amount(data["amount"]),
        category=str(data["category"]),
        frequency=Frequency(data["frequency"]),
        start_date=str(data["startDate"]),
        description=str(data.get("description") or ""),
        is_active=bool(data.get("isActive", True)),
    )


def _positive_amount(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError("amount must be a number")
    amount = float(value)
    if not math.isfinite(amount) or amount <= 0:
        raise ValueError(f"amount must be positive, got {value!r}")
    return amount


# --- slots

def dump_transactions(trans: Tuple[Transaction, ...]) -> str:
    return json.dumps([transaction_to_dict(t) for t in trans])


def dump_recurring(recurring: Tuple[RecurringTransaction, ...]) -> str:
    return json.dumps([recurring_to_dict(rt) for rt in recurring])


def dump_budget(monthly_budget: float) -> str:
    if float(monthly_budget).is_integer():
        return str(int(monthly_budget))
    return repr(float(monthly_budget))


def _load_records(raw: Optional[str], key: str, parse) -> tuple:
    if raw is None:
        return ()
    try:
        items = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Slot %r is corrupt, starting empty: %s", key, e)
        return ()
    if not isinstance(items, list):
        logger.warning("Slot %r is not a list, starting empty", key)
        return ()

    records = []
    for index, item in enumerate(items):
        try:
            records.append(parse(item))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed %s record #%d: %s", key, index, e)
    return tuple(records)


def load_transactions(raw: Optional[str]) -> Tuple[Transaction, ...]:
    return _load_records(raw, TRANSACTIONS_KEY, transaction_from_dict)


def load_recurring(raw: Optional[str]) -> Tuple[RecurringTransaction, ...]:
    return _load_records(raw, RECURRING_KEY, recurring_from_dict)


def load_budget(raw: Optional[str], default: float = DEFAULT_MONTHLY_BUDGET) -> float:
    if raw is None:
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        logger.warning("Slot %r holds %r, using default budget %s", BUDGET_KEY, raw, default)
        return default
    if not math.isfinite(value) or value <= 0:
        logger.warning("Slot %r holds %r, using default budget %s", BUDGET_KEY, raw, default)
        return default
    return value


def load_state(storage: KeyValueStorage, default_budget: float = DEFAULT_MONTHLY_BUDGET) -> AppState:
    state = AppState(
        transactions=load_transactions(storage.get(TRANSACTIONS_KEY)),
        recurring=load_recurring(storage.get(RECURRING_KEY)),
        monthly_budget=load_budget(storage.get(BUDGET_KEY), default_budget),
    )
    logger.info(
        "Loaded %d transactions, %d recurring, budget %s",
        len(state.transactions), len(state.recurring), state.monthly_budget,
    )
    return state


def save_transactions(storage: KeyValueStorage, trans: Tuple[Transaction, ...]) -> bool:
    logger.debug("Writing %d transactions", len(trans))
    return storage.set(TRANSACTIONS_KEY, dump_transactions(trans))


def save_recurring(storage: KeyValueStorage, recurring: Tuple[RecurringTransaction, ...]) -> bool:
    logger.debug("Writing %d recurring transactions", len(recurring))
    return storage.set(RECURRING_KEY, dump_recurring(recurring))


def save_budget(storage: KeyValueStorage, monthly_budget: float) -> bool:
    logger.debug("Writing budget %s", monthly_budget)
    return storage.set(BUDGET_KEY, dump_budget(monthly_budget))
