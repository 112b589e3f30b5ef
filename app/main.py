import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date

import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from budget_tracker.config import configure_logging, get_settings
from budget_tracker.domain import Frequency, RecurringDraft, TransactionDraft, TransactionType
from budget_tracker.errors import ValidationError
from budget_tracker.reports import (
    format_money,
    format_percent,
    recurring_frame,
    shares_frame,
    transactions_frame,
    trend_frame,
    weekday_frame,
)
from budget_tracker.services import BudgetTracker, StatisticsService
from budget_tracker.storage import JsonFileStorage

EXPENSE_CATEGORIES = [
    "Food & Dining",
    "Transportation",
    "Shopping",
    "Entertainment",
    "Bills & Utilities",
    "Healthcare",
    "Education",
    "Travel",
    "Other",
]
INCOME_CATEGORIES = ["Salary", "Freelance", "Investment", "Gift", "Other"]

FREQUENCY_EMOJI = {
    Frequency.DAILY: "📅",
    Frequency.WEEKLY: "📆",
    Frequency.MONTHLY: "🗓️",
    Frequency.YEARLY: "📋",
}

st.set_page_config(page_title="Budget Tracker", layout="wide")

settings = get_settings()

# One tracker per browser session; it is the only owner of the state.
if "tracker" not in st.session_state:
    configure_logging(settings.log_level)
    tracker = BudgetTracker(JsonFileStorage(settings.data_file), settings)
    tracker.load()
    st.session_state.tracker = tracker

tracker: BudgetTracker = st.session_state.tracker
stats = StatisticsService(settings)
today = date.today()
money = lambda v: format_money(v, settings.currency_symbol)  # noqa: E731

st.title("💰 Budget Tracker")
st.caption("✨ Manage your finances with style")

# --- overview
overview = stats.overview(tracker.state, today)
k1, k2, k3, k4 = st.columns(4)
with k1:
    st.metric("Balance (this month)", money(overview.balance))
with k2:
    st.metric("Income", money(overview.income), f"{overview.income_count} transactions", delta_color="off")
with k3:
    st.metric("Expenses", money(overview.expenses), f"{overview.expense_count} transactions", delta_color="off")
with k4:
    st.metric(
        "Monthly Budget",
        money(overview.status.budget),
        f"{money(overview.status.remaining)} remaining",
    )

st.progress(overview.status.progress / 100)
used = format_percent(overview.status.utilization)
st.caption(f"{used} used" + (" ⚠️ Over budget!" if overview.status.over_budget else ""))

with st.sidebar.form("budget_form"):
    st.markdown("### ⚙️ Monthly Budget")
    proposed = st.number_input(
        "Budget Amount",
        value=float(tracker.state.monthly_budget),
        step=100.0,
        format="%.2f",
    )
    if st.form_submit_button("Save Budget"):
        try:
            tracker.set_monthly_budget(proposed)
            st.rerun()
        except ValidationError as e:
            st.error(e.message)

for alert in tracker.alerts[-3:]:
    st.sidebar.warning(alert)

tab_tx, tab_rec, tab_stats = st.tabs(["💰 Transactions", "🔄 Recurring", "📊 Statistics"])

# --- transactions
with tab_tx:
    st.subheader("➕ Add Transaction")
    tx_type = st.radio("Type", ["expense", "income"], horizontal=True, key="tx_type")
    with st.form("transaction_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            amount = st.number_input("Amount", min_value=0.0, step=0.01, format="%.2f")
            tx_date = st.date_input("Date", value=today)
        with col2:
            options = EXPENSE_CATEGORIES if tx_type == "expense" else INCOME_CATEGORIES
            category = st.selectbox("Category", options)
            description = st.text_input("Description (optional)")
        if st.form_submit_button("Add Transaction"):
            draft = TransactionDraft(
                type=TransactionType(tx_type),
                amount=amount,
                category=category,
                date=tx_date.strftime("%Y-%m-%d"),
                description=description,
            )
            try:
                tracker.add_transaction(draft)
                st.rerun()
            except ValidationError as e:
                st.error(e.message)

    st.subheader("🧾 Recent Transactions")
    if not tracker.state.transactions:
        st.info("No transactions yet. Add your first transaction above!")
    for t in tracker.state.transactions:
        c1, c2, c3 = st.columns([5, 2, 1])
        sign = "+" if t.type == TransactionType.INCOME else "-"
        badge = " 🔄 recurring" if t.is_recurring else ""
        c1.markdown(f"**{t.category}** · {t.type.value}{badge}  \n{t.description or ''} _{t.date}_")
        c2.markdown(f"**{sign}{money(t.amount)}**")
        if c3.button("🗑️", key=f"del_tx_{t.id}"):
            tracker.delete_transaction(t.id)
            st.rerun()

    if tracker.state.transactions:
        csv = transactions_frame(tracker.state.transactions).to_csv(index=False)
        st.download_button("⬇ Download CSV", csv, file_name="transactions.csv", mime="text/csv")

# --- recurring
with tab_rec:
    st.subheader("➕ Add Recurring Transaction")
    rt_type = st.radio("Type", ["expense", "income"], horizontal=True, key="rt_type")
    with st.form("recurring_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            amount = st.number_input("Amount", min_value=0.0, step=0.01, format="%.2f", key="rt_amount")
            frequency = st.selectbox(
                "Frequency", [f.value for f in Frequency], index=2, key="rt_frequency"
            )
            start_date = st.date_input("Start Date", value=today, key="rt_start")
        with col2:
            options = EXPENSE_CATEGORIES if rt_type == "expense" else INCOME_CATEGORIES
            category = st.selectbox("Category", options, key="rt_category")
            description = st.text_input("Description (optional)", key="rt_description")
        if st.form_submit_button("Add Recurring"):
            draft = RecurringDraft(
                type=TransactionType(rt_type),
                amount=amount,
                category=category,
                frequency=Frequency(frequency),
                start_date=start_date.strftime("%Y-%m-%d"),
                description=description,
            )
            try:
                tracker.add_recurring(draft)
                st.rerun()
            except ValidationError as e:
                st.error(e.message)

    st.subheader("🔁 Recurring Transactions")
    if not tracker.state.recurring:
        st.info("No recurring transactions yet. Add one above to automate your budget tracking! 🔄")
    for rt in tracker.state.recurring:
        c1, c2, c3, c4 = st.columns([5, 2, 1, 1])
        sign = "+" if rt.type == TransactionType.INCOME else "-"
        c1.markdown(
            f"**{rt.category}** · {FREQUENCY_EMOJI[rt.frequency]} {rt.frequency.value}  \n"
            f"{rt.description or ''} _Started: {rt.start_date}_"
        )
        c2.markdown(f"**{sign}{money(rt.amount)}**")
        active = c3.toggle("Active", value=rt.is_active, key=f"tog_{rt.id}")
        if active != rt.is_active:
            tracker.toggle_recurring(rt.id)
            st.rerun()
        if c4.button("🗑️", key=f"del_rt_{rt.id}"):
            tracker.delete_recurring(rt.id)
            st.rerun()

    if tracker.state.recurring:
        st.dataframe(recurring_frame(tracker.state.recurring), use_container_width=True, hide_index=True)

# --- statistics
with tab_stats:
    report = stats.statistics(tracker.state, today)
    if not report.has_data:
        st.info("No data to display. Add some transactions to see statistics! 📊")
    else:
        m1, m2, m3, m4 = st.columns(4)
        m1.metric("Avg. Income", money(report.average_income))
        m2.metric("Avg. Expense", money(report.average_expense))
        m3.metric("Daily Average", money(report.daily_average))
        m4.metric("Recurring/Month", money(report.projected_recurring))

        fig_cmp = px.bar(
            x=list(report.totals.keys()),
            y=list(report.totals.values()),
            labels={"x": "", "y": f"Amount ({settings.currency_symbol})"},
            title="💰 Income vs Expenses",
            template="plotly_dark",
        )
        st.plotly_chart(fig_cmp, use_container_width=True)

        if report.monthly_trend:
            df_trend = trend_frame(report.monthly_trend)
            fig_ts = go.Figure()
            fig_ts.add_trace(go.Scatter(x=df_trend["month"], y=df_trend["income"], mode="lines+markers", name="Income", fill="tozeroy"))
            fig_ts.add_trace(go.Scatter(x=df_trend["month"], y=df_trend["expenses"], mode="lines+markers", name="Expenses", fill="tozeroy"))
            fig_ts.update_layout(title="📈 Monthly Trend", template="plotly_dark", margin=dict(t=40, b=10, l=10, r=10))
            st.plotly_chart(fig_ts, use_container_width=True)

        col_top, col_day = st.columns(2)
        with col_top:
            if report.top_categories:
                names = [name for name, _ in report.top_categories]
                values = [value for _, value in report.top_categories]
                fig_top = px.bar(
                    x=values, y=names, orientation="h",
                    labels={"x": "Spent", "y": "Category"},
                    title="🏆 Top Spending Categories",
                    template="plotly_dark",
                )
                fig_top.update_yaxes(autorange="reversed")
                st.plotly_chart(fig_top, use_container_width=True)
        with col_day:
            df_day = weekday_frame(report.weekday_spending)
            fig_day = px.bar(df_day, x="day", y="amount", title="📅 Spending by Day", template="plotly_dark")
            st.plotly_chart(fig_day, use_container_width=True)

        col_exp, col_inc = st.columns(2)
        for col, shares, title in (
            (col_exp, report.expense_shares, "🥧 Expenses Distribution"),
            (col_inc, report.income_shares, "💵 Income Sources"),
        ):
            with col:
                if shares:
                    df_share = shares_frame(shares)
                    fig_pie = px.pie(df_share, values="amount", names="category", title=title)
                    fig_pie.update_traces(
                        text=[f"{p}%" for p in df_share["percent"]], textinfo="label+text"
                    )
                    st.plotly_chart(fig_pie, use_container_width=True)
