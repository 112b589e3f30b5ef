"""Derived statistics over transaction snapshots.

Every function here is pure: it takes any iterable of records, never mutates
it, and returns full-precision floats. Rounding belongs to the display layer
(see ``budget_tracker.reports``). Records whose date cannot be parsed are
skipped by the date-based functions.
"""
from collections import defaultdict
from datetime import date, timedelta
from functools import reduce
from typing import Callable, Iterable, Iterator, NamedTuple, Optional

from budget_tracker.domain import (
    Frequency,
    RecurringTransaction,
    Transaction,
    TransactionType,
    try_parse_date,
)

WEEKDAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

MONTH_FACTORS = {
    Frequency.DAILY: 30.0,
    Frequency.WEEKLY: 4.33,
    Frequency.MONTHLY: 1.0,
    Frequency.YEARLY: 1 / 12,
}


class BudgetStatus(NamedTuple):
    budget: float
    expenses: float
    utilization: Optional[float]  # percent; None when the budget is not positive
    remaining: float

    @property
    def progress(self) -> float:
        """Utilization clamped to [0, 100] for a progress bar."""
        if self.utilization is None:
            return 100.0 if self.expenses > 0 else 0.0
        return min(100.0, max(0.0, self.utilization))

    @property
    def over_budget(self) -> bool:
        return self.remaining < 0


class MonthlyTotals(NamedTuple):
    year: int
    month: int
    income: float
    expenses: float

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def label(self) -> str:
        return date(self.year, self.month, 1).strftime("%b %Y")

    @property
    def net(self) -> float:
        return self.income - self.expenses


# --- filters

def by_type(tx_type: TransactionType):
    def _filter(t: Transaction) -> bool:
        return t.type == tx_type

    return _filter


def by_month(year: int, month: int):
    def _filter(t: Transaction) -> bool:
        d = try_parse_date(t.date)
        return d is not None and d.year == year and d.month == month

    return _filter


def by_date_range(start: date, end: date):
    def _filter(t: Transaction) -> bool:
        d = try_parse_date(t.date)
        return d is not None and start <= d <= end

    return _filter


def iter_transactions(
    trans: Iterable[Transaction], pred: Callable[[Transaction], bool]
) -> Iterator[Transaction]:
    for t in trans:
        if pred(t):
            yield t


# --- totals

def current_month_window(
    trans: Iterable[Transaction], reference_date: date
) -> tuple[Transaction, ...]:
    return tuple(iter_transactions(trans, by_month(reference_date.year, reference_date.month)))


def sum_by_type(trans: Iterable[Transaction], tx_type: TransactionType) -> float:
    return reduce(
        lambda acc, t: acc + t.amount, iter_transactions(trans, by_type(tx_type)), 0.0
    )


def count_by_type(trans: Iterable[Transaction], tx_type: TransactionType) -> int:
    return sum(1 for _ in iter_transactions(trans, by_type(tx_type)))


def balance(trans: Iterable[Transaction]) -> float:
    trans = tuple(trans)
    return sum_by_type(trans, TransactionType.INCOME) - sum_by_type(trans, TransactionType.EXPENSE)


def current_month_balance(trans: Iterable[Transaction], reference_date: date) -> float:
    return balance(current_month_window(trans, reference_date))


def budget_utilization(monthly_budget: float, current_month_expenses: float) -> BudgetStatus:
    utilization = None
    if monthly_budget > 0:
        utilization = current_month_expenses / monthly_budget * 100
    return BudgetStatus(
        budget=monthly_budget,
        expenses=current_month_expenses,
        utilization=utilization,
        remaining=monthly_budget - current_month_expenses,
    )


def totals_comparison(trans: Iterable[Transaction]) -> dict[str, float]:
    trans = tuple(trans)
    return {
        "Income": sum_by_type(trans, TransactionType.INCOME),
        "Expenses": sum_by_type(trans, TransactionType.EXPENSE),
    }


# --- categories

def sum_by_category(trans: Iterable[Transaction], tx_type: TransactionType) -> dict[str, float]:
    totals: dict[str, float] = {}
    for t in iter_transactions(trans, by_type(tx_type)):
        totals[t.category] = totals.get(t.category, 0.0) + t.amount
    return totals


def top_categories(
    trans: Iterable[Transaction], tx_type: TransactionType, n: int = 5
) -> list[tuple[str, float]]:
    # sorted() is stable, so ties keep first-encountered order
    ordered = sorted(
        sum_by_category(trans, tx_type).items(),
        key=lambda item: item[1],
        reverse=True,
    )
    return ordered[: max(0, n)]


def category_shares(
    trans: Iterable[Transaction], tx_type: TransactionType
) -> list[tuple[str, float, float]]:
    """Category sums with their percentage of the type total."""
    totals = sum_by_category(trans, tx_type)
    grand_total = sum(totals.values())
    if grand_total <= 0:
        return []
    return [(name, value, value / grand_total * 100) for name, value in totals.items()]


# --- time series

def monthly_trend(trans: Iterable[Transaction], months_back: int = 6) -> list[MonthlyTotals]:
    if months_back <= 0:
        return []

    groups: dict[tuple[int, int], list[float]] = defaultdict(lambda: [0.0, 0.0])
    for t in trans:
        d = try_parse_date(t.date)
        if d is None:
            continue
        bucket = groups[(d.year, d.month)]
        if t.type == TransactionType.INCOME:
            bucket[0] += t.amount
        else:
            bucket[1] += t.amount

    keys = sorted(groups)[-months_back:]
    return [MonthlyTotals(y, m, groups[(y, m)][0], groups[(y, m)][1]) for y, m in keys]


def average_per_transaction(trans: Iterable[Transaction], tx_type: TransactionType) -> float:
    trans = tuple(trans)
    count = count_by_type(trans, tx_type)
    if count == 0:
        return 0.0
    return sum_by_type(trans, tx_type) / count


def daily_average(
    trans: Iterable[Transaction], window_days: int = 30, reference_date: Optional[date] = None
) -> float:
    """Average daily spend over the trailing window.

    Sums expenses dated in ``[reference_date - window_days, reference_date]``
    and divides by ``window_days``, not by the number of matching days.
    """
    if window_days <= 0:
        return 0.0
    end = reference_date or date.today()
    start = end - timedelta(days=window_days)
    in_window = iter_transactions(trans, by_date_range(start, end))
    return sum_by_type(in_window, TransactionType.EXPENSE) / window_days


def spending_by_weekday(trans: Iterable[Transaction]) -> dict[str, float]:
    buckets = {label: 0.0 for label in WEEKDAY_LABELS}
    for t in iter_transactions(trans, by_type(TransactionType.EXPENSE)):
        d = try_parse_date(t.date)
        if d is None:
            continue
        # isoweekday(): Mon=1 .. Sun=7
        buckets[WEEKDAY_LABELS[d.isoweekday() % 7]] += t.amount
    return buckets


# --- recurring

def monthly_equivalent(rt: RecurringTransaction) -> float:
    return rt.amount * MONTH_FACTORS[Frequency(rt.frequency)]


def projected_monthly_recurring_cost(recurring: Iterable[RecurringTransaction]) -> float:
    """Net monthly cash flow of the active recurring templates.

    Income adds, expenses subtract; inactive templates are ignored.
    """
    total = 0.0
    for rt in recurring:
        if not rt.is_active:
            continue
        amount = monthly_equivalent(rt)
        total += amount if rt.type == TransactionType.INCOME else -amount
    return total
