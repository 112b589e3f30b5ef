from datetime import date

import pytest

from budget_tracker.aggregations import (
    average_per_transaction,
    balance,
    budget_utilization,
    category_shares,
    count_by_type,
    current_month_balance,
    current_month_window,
    daily_average,
    monthly_equivalent,
    monthly_trend,
    projected_monthly_recurring_cost,
    spending_by_weekday,
    sum_by_category,
    sum_by_type,
    top_categories,
    totals_comparison,
)
from budget_tracker.domain import Frequency, RecurringTransaction, Transaction, TransactionType

INCOME = TransactionType.INCOME
EXPENSE = TransactionType.EXPENSE


def make_sample():
    return (
        Transaction("t1", EXPENSE, 300, "Food", "2025-01-01", "Groceries"),
        Transaction("t2", EXPENSE, 200, "Transport", "2025-01-02", "Bus"),
        Transaction("t3", INCOME, 5000, "Salary", "2025-01-03", "Salary"),
        Transaction("t4", EXPENSE, 700, "Food", "2025-01-04", "Restaurant"),
        Transaction("t5", EXPENSE, 100, "Transport", "2025-02-05", "Taxi"),
        Transaction("t6", INCOME, 250, "Gift", "2024-12-24", "Birthday"),
    )


def make_recurring(tx_type, amount, frequency, active=True, rt_id="r1"):
    return RecurringTransaction(rt_id, tx_type, amount, "Bills", frequency, "2024-01-01", "", active)


def test_current_month_window_filters_by_year_and_month():
    trans = make_sample() + (Transaction("t7", EXPENSE, 10, "Food", "2024-01-15"),)
    window = current_month_window(trans, date(2025, 1, 20))
    assert [t.id for t in window] == ["t1", "t2", "t3", "t4"]


def test_current_month_window_skips_unparsable_dates():
    trans = (Transaction("bad", EXPENSE, 10, "Food", "not-a-date"),)
    assert current_month_window(trans, date(2025, 1, 1)) == ()


def test_sum_by_type():
    trans = make_sample()
    assert sum_by_type(trans, EXPENSE) == 1300
    assert sum_by_type(trans, INCOME) == 5250
    assert sum_by_type((), EXPENSE) == 0


def test_count_by_type():
    trans = make_sample()
    assert count_by_type(trans, EXPENSE) == 4
    assert count_by_type(trans, INCOME) == 2


def test_balance_is_income_minus_expenses():
    trans = make_sample()
    assert balance(trans) == sum_by_type(trans, INCOME) - sum_by_type(trans, EXPENSE)
    assert balance(trans) == 3950


def test_aggregations_accept_generators():
    trans = make_sample()
    assert balance(t for t in trans) == 3950


def test_budget_overview_scenario():
    trans = (
        Transaction("a", EXPENSE, 50, "Food", "2024-01-05"),
        Transaction("b", INCOME, 1000, "Salary", "2024-01-01"),
    )
    today = date(2024, 1, 20)
    month = current_month_window(trans, today)

    assert current_month_balance(trans, today) == 950
    status = budget_utilization(3000, sum_by_type(month, EXPENSE))
    assert status.utilization == pytest.approx(1.6667, abs=1e-3)
    assert status.remaining == 2950
    assert not status.over_budget


def test_budget_utilization_over_budget_clamps_progress():
    status = budget_utilization(100, 250)
    assert status.utilization == 250
    assert status.progress == 100
    assert status.remaining == -150
    assert status.over_budget


def test_budget_utilization_zero_budget_is_undefined():
    status = budget_utilization(0, 40)
    assert status.utilization is None
    assert status.progress == 100
    assert budget_utilization(0, 0).progress == 0


def test_sum_by_category_only_contains_matching_type():
    result = sum_by_category(make_sample(), EXPENSE)
    assert result == {"Food": 1000, "Transport": 300}
    assert "Salary" not in result
    assert "Gift" not in result


def test_top_categories_descending_and_limited():
    trans = make_sample() + (
        Transaction("t8", EXPENSE, 50, "Fun", "2025-01-06"),
        Transaction("t9", EXPENSE, 40, "Health", "2025-01-06"),
        Transaction("t10", EXPENSE, 30, "Books", "2025-01-06"),
        Transaction("t11", EXPENSE, 20, "Gym", "2025-01-06"),
    )
    result = top_categories(trans, EXPENSE)
    assert len(result) == 5
    values = [v for _, v in result]
    assert values == sorted(values, reverse=True)
    assert result[0] == ("Food", 1000)


def test_top_categories_ties_keep_encounter_order():
    trans = (
        Transaction("1", EXPENSE, 10, "B", "2025-01-01"),
        Transaction("2", EXPENSE, 10, "A", "2025-01-01"),
        Transaction("3", EXPENSE, 20, "C", "2025-01-01"),
    )
    assert top_categories(trans, EXPENSE, 3) == [("C", 20), ("B", 10), ("A", 10)]
    assert top_categories(trans, EXPENSE, 0) == []


def test_category_shares_use_full_precision():
    trans = (
        Transaction("1", EXPENSE, 1, "A", "2025-01-01"),
        Transaction("2", EXPENSE, 1, "B", "2025-01-01"),
        Transaction("3", EXPENSE, 1, "C", "2025-01-01"),
    )
    shares = category_shares(trans, EXPENSE)
    assert [name for name, _, _ in shares] == ["A", "B", "C"]
    assert sum(p for _, _, p in shares) == pytest.approx(100)
    assert category_shares((), EXPENSE) == []


def test_monthly_trend_chronological_and_sparse():
    trend = monthly_trend(make_sample())
    assert [m.key for m in trend] == ["2024-12", "2025-01", "2025-02"]
    assert trend[0].income == 250
    assert trend[1].income == 5000
    assert trend[1].expenses == 1200
    assert trend[1].label == "Jan 2025"
    assert trend[2].net == -100


def test_monthly_trend_keeps_last_months_only():
    trans = tuple(
        Transaction(str(m), EXPENSE, m, "Food", f"2024-{m:02d}-10") for m in range(1, 13)
    )
    trend = monthly_trend(trans, 6)
    assert len(trend) == 6
    assert trend[0].key == "2024-07"
    assert trend[-1].key == "2024-12"
    assert monthly_trend(trans, 0) == []


def test_average_per_transaction():
    trans = make_sample()
    assert average_per_transaction(trans, EXPENSE) == 325
    assert average_per_transaction((), EXPENSE) == 0


def test_daily_average_divides_by_window():
    trans = (
        Transaction("1", EXPENSE, 30, "Food", "2025-03-01"),
        Transaction("2", EXPENSE, 60, "Food", "2025-03-31"),
        Transaction("3", EXPENSE, 1000, "Food", "2025-01-15"),
        Transaction("4", INCOME, 900, "Salary", "2025-03-20"),
    )
    # window is 2025-03-01 .. 2025-03-31 inclusive
    assert daily_average(trans, 30, date(2025, 3, 31)) == pytest.approx(3.0)
    assert daily_average(trans, 0, date(2025, 3, 31)) == 0


def test_monthly_equivalent_factors():
    assert monthly_equivalent(make_recurring(EXPENSE, 10, Frequency.DAILY)) == 300
    assert monthly_equivalent(make_recurring(EXPENSE, 100, Frequency.WEEKLY)) == pytest.approx(433)
    assert monthly_equivalent(make_recurring(EXPENSE, 80, Frequency.MONTHLY)) == 80
    assert monthly_equivalent(make_recurring(EXPENSE, 1200, Frequency.YEARLY)) == pytest.approx(100)


def test_projected_monthly_recurring_cost_nets_income_and_expenses():
    recurring = (
        make_recurring(EXPENSE, 100, Frequency.WEEKLY, rt_id="r1"),
        make_recurring(INCOME, 500, Frequency.MONTHLY, rt_id="r2"),
        make_recurring(EXPENSE, 9999, Frequency.DAILY, active=False, rt_id="r3"),
    )
    assert projected_monthly_recurring_cost(recurring) == pytest.approx(67)
    assert projected_monthly_recurring_cost(()) == 0


def test_spending_by_weekday_has_seven_buckets():
    trans = (
        Transaction("1", EXPENSE, 10, "Food", "2024-01-07"),  # Sunday
        Transaction("2", EXPENSE, 5, "Food", "2024-01-08"),   # Monday
        Transaction("3", EXPENSE, 7, "Food", "2024-01-14"),   # Sunday
        Transaction("4", INCOME, 99, "Salary", "2024-01-13"),
    )
    buckets = spending_by_weekday(trans)
    assert list(buckets) == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
    assert buckets["Sun"] == 17
    assert buckets["Mon"] == 5
    assert buckets["Sat"] == 0


def test_totals_comparison():
    assert totals_comparison(make_sample()) == {"Income": 5250, "Expenses": 1300}


def test_aggregations_do_not_mutate_input():
    trans = list(make_sample())
    snapshot = list(trans)
    monthly_trend(trans)
    top_categories(trans, EXPENSE)
    spending_by_weekday(trans)
    assert trans == snapshot
