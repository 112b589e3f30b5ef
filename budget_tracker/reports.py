"""Display-side helpers: rounding, formatting and pandas frames.

Values are rounded here, once per displayed number, never inside the
aggregation functions.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping, Optional

import pandas as pd

from budget_tracker.aggregations import MonthlyTotals
from budget_tracker.domain import RecurringTransaction, Transaction, TransactionType

TRANSACTION_COLUMNS = ["id", "date", "type", "category", "description", "amount", "signed_amount"]
RECURRING_COLUMNS = ["id", "start_date", "type", "category", "description", "frequency", "amount", "active"]


def round_money(value: float) -> float:
    # Decimal avoids float artefacts like round(2.675, 2) == 2.67
    return float(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_money(value: float, symbol: str = "$") -> str:
    rounded = round_money(value)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{abs(rounded):,.2f}"


def format_percent(value: Optional[float], digits: int = 0) -> str:
    if value is None:
        return "n/a"
    return f"{value:.{digits}f}%"


def transactions_frame(trans: Iterable[Transaction]) -> pd.DataFrame:
    rows = [
        {
            "id": t.id,
            "date": t.date,
            "type": TransactionType(t.type).value,
            "category": t.category,
            "description": t.description,
            "amount": t.amount,
            "signed_amount": t.amount if t.type == TransactionType.INCOME else -t.amount,
        }
        for t in trans
    ]
    return pd.DataFrame(rows, columns=TRANSACTION_COLUMNS)


def recurring_frame(recurring: Iterable[RecurringTransaction]) -> pd.DataFrame:
    rows = [
        {
            "id": rt.id,
            "start_date": rt.start_date,
            "type": TransactionType(rt.type).value,
            "category": rt.category,
            "description": rt.description,
            "frequency": rt.frequency.value,
            "amount": rt.amount,
            "active": rt.is_active,
        }
        for rt in recurring
    ]
    return pd.DataFrame(rows, columns=RECURRING_COLUMNS)


def trend_frame(trend: Iterable[MonthlyTotals]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "month": m.label,
                "income": round_money(m.income),
                "expenses": round_money(m.expenses),
            }
            for m in trend
        ],
        columns=["month", "income", "expenses"],
    )


def weekday_frame(buckets: Mapping[str, float]) -> pd.DataFrame:
    return pd.DataFrame(
        [{"day": day, "amount": round_money(amount)} for day, amount in buckets.items()],
        columns=["day", "amount"],
    )


def shares_frame(shares: Iterable[tuple[str, float, float]]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"category": name, "amount": round_money(value), "percent": round(percent, 1)}
            for name, value, percent in shares
        ],
        columns=["category", "amount", "percent"],
    )
