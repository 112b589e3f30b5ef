import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Optional

from budget_tracker import aggregations as agg
from budget_tracker import transforms
from budget_tracker.aggregations import BudgetStatus, MonthlyTotals
from budget_tracker.config import Settings
from budget_tracker.domain import AppState, RecurringDraft, TransactionDraft, TransactionType
from budget_tracker.events import (
    BUDGET_ALERT,
    BUDGET_CHANGED,
    RECURRING_CHANGED,
    TRANSACTIONS_CHANGED,
    EventBus,
    register_default_handlers,
)
from budget_tracker.functional import safe_recurring, safe_transaction
from budget_tracker.storage import KeyValueStorage, load_state

logger = logging.getLogger(__name__)


class BudgetTracker:
    """Owns the application state and applies mutations to it.

    Each mutation runs the pure transform, swaps in the new state and
    publishes an event; the default handlers write the affected storage slot
    and check the monthly budget. A rejected mutation raises ValidationError
    and leaves both the state and the storage untouched.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        settings: Optional[Settings] = None,
        bus: Optional[EventBus] = None,
        clock: Callable[[], date] = date.today,
    ):
        self.storage = storage
        self.settings = settings or Settings()
        self.bus = bus or register_default_handlers(EventBus(), storage)
        self.clock = clock
        self.alerts: List[str] = []
        self._state = AppState(monthly_budget=self.settings.default_monthly_budget)

    @property
    def state(self) -> AppState:
        return self._state

    def load(self) -> AppState:
        self._state = load_state(self.storage, self.settings.default_monthly_budget)
        return self._state

    def _commit(self, name: str, state: AppState) -> AppState:
        self._state = state
        results = self.bus.publish(name, {"state": state, "today": self.clock()})
        for result in results:
            if "alert" in result:
                self.alerts.append(result["alert"])
                self.bus.publish(BUDGET_ALERT, result)
        return state

    def add_transaction(self, draft: TransactionDraft) -> AppState:
        trans = transforms.add_transaction(self._state.transactions, draft)
        logger.info("Added %s of %.2f in %r", trans[0].type.value, trans[0].amount, trans[0].category)
        return self._commit(TRANSACTIONS_CHANGED, transforms.with_transactions(self._state, trans))

    def delete_transaction(self, tx_id: str) -> AppState:
        if safe_transaction(self._state.transactions, tx_id).is_none():
            logger.info("Delete ignored, no transaction %r", tx_id)
            return self._state
        trans = transforms.delete_transaction(self._state.transactions, tx_id)
        return self._commit(TRANSACTIONS_CHANGED, transforms.with_transactions(self._state, trans))

    def add_recurring(self, draft: RecurringDraft) -> AppState:
        recurring = transforms.add_recurring_transaction(self._state.recurring, draft)
        logger.info("Added %s recurring %r", recurring[-1].frequency.value, recurring[-1].category)
        return self._commit(RECURRING_CHANGED, transforms.with_recurring(self._state, recurring))

    def toggle_recurring(self, rt_id: str) -> AppState:
        if safe_recurring(self._state.recurring, rt_id).is_none():
            logger.info("Toggle ignored, no recurring transaction %r", rt_id)
            return self._state
        recurring = transforms.toggle_recurring_active(self._state.recurring, rt_id)
        return self._commit(RECURRING_CHANGED, transforms.with_recurring(self._state, recurring))

    def delete_recurring(self, rt_id: str) -> AppState:
        if safe_recurring(self._state.recurring, rt_id).is_none():
            logger.info("Delete ignored, no recurring transaction %r", rt_id)
            return self._state
        recurring = transforms.delete_recurring_transaction(self._state.recurring, rt_id)
        return self._commit(RECURRING_CHANGED, transforms.with_recurring(self._state, recurring))

    def set_monthly_budget(self, proposed: float) -> AppState:
        budget = transforms.set_monthly_budget(self._state.monthly_budget, proposed)
        logger.info("Monthly budget set to %s", budget)
        return self._commit(BUDGET_CHANGED, transforms.with_budget(self._state, budget))


@dataclass(frozen=True)
class BudgetOverview:
    income: float
    expenses: float
    balance: float
    income_count: int
    expense_count: int
    status: BudgetStatus


@dataclass(frozen=True)
class StatisticsReport:
    has_data: bool
    average_income: float
    average_expense: float
    daily_average: float
    projected_recurring: float
    totals: dict = field(default_factory=dict)
    top_categories: list = field(default_factory=list)
    expense_shares: list = field(default_factory=list)
    income_shares: list = field(default_factory=list)
    monthly_trend: List[MonthlyTotals] = field(default_factory=list)
    weekday_spending: dict = field(default_factory=dict)


class StatisticsService:
    """Builds the dashboard figures from a state snapshot."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()

    def overview(self, state: AppState, reference_date: date) -> BudgetOverview:
        month = agg.current_month_window(state.transactions, reference_date)
        income = agg.sum_by_type(month, TransactionType.INCOME)
        expenses = agg.sum_by_type(month, TransactionType.EXPENSE)
        return BudgetOverview(
            income=income,
            expenses=expenses,
            balance=income - expenses,
            income_count=agg.count_by_type(month, TransactionType.INCOME),
            expense_count=agg.count_by_type(month, TransactionType.EXPENSE),
            status=agg.budget_utilization(state.monthly_budget, expenses),
        )

    def statistics(self, state: AppState, reference_date: date) -> StatisticsReport:
        trans = state.transactions
        return StatisticsReport(
            has_data=bool(trans),
            average_income=agg.average_per_transaction(trans, TransactionType.INCOME),
            average_expense=agg.average_per_transaction(trans, TransactionType.EXPENSE),
            daily_average=agg.daily_average(trans, self.settings.daily_window_days, reference_date),
            projected_recurring=agg.projected_monthly_recurring_cost(state.recurring),
            totals=agg.totals_comparison(trans),
            top_categories=agg.top_categories(trans, TransactionType.EXPENSE, self.settings.top_categories),
            expense_shares=agg.category_shares(trans, TransactionType.EXPENSE),
            income_shares=agg.category_shares(trans, TransactionType.INCOME),
            monthly_trend=agg.monthly_trend(trans, self.settings.trend_months),
            weekday_spending=agg.spending_by_weekday(trans),
        )
