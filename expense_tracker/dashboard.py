"""Streamlit app for the expense tracker.

Four tabs mirror the everyday flow: Home (this month at a glance, quick
add, recent expenses), Analytics (any past month with charts and
insights), Budget (set budgets and see their status) and Settings
(currency, preferences, backup).

All reads and writes go through one :class:`ExpenseStore`; every figure
on screen comes from :mod:`expense_tracker.analytics` applied to a
snapshot of the store.

To run the dashboard from the command line::

    streamlit run expense_tracker/dashboard.py

or use ``run_dashboard.py`` at the project root.
"""

from __future__ import annotations

import os
import sys
from datetime import date

import pandas as pd
import streamlit as st

# Support both ``streamlit run expense_tracker/dashboard.py`` (no package
# context) and imports as ``expense_tracker.dashboard``.
if __package__:
    from . import config
    from . import visualization as viz
    from .analytics import SpendingAnalytics, month_reference, overall_budget_status, previous_month
    from .formatting import format_currency, format_percentage, month_label
    from .models import CURRENCIES, OVERALL, BudgetState, Expense, ForCategory, StoreSnapshot, lookup_category
    from .storage import ExpenseStore
else:
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from expense_tracker import config  # type: ignore
    from expense_tracker import visualization as viz  # type: ignore
    from expense_tracker.analytics import SpendingAnalytics, month_reference, overall_budget_status, previous_month  # type: ignore
    from expense_tracker.formatting import format_currency, format_percentage, month_label  # type: ignore
    from expense_tracker.models import CURRENCIES, OVERALL, BudgetState, Expense, ForCategory, StoreSnapshot, lookup_category  # type: ignore
    from expense_tracker.storage import ExpenseStore  # type: ignore

THEMES = ["light", "dark", "system"]
STATE_ICONS = {
    BudgetState.SAFE: "🟢",
    BudgetState.WARNING: "🟡",
    BudgetState.DANGER: "🟠",
    BudgetState.EXCEEDED: "🔴",
}


@st.cache_resource
def get_store() -> ExpenseStore:
    config.configure_logging()
    return ExpenseStore()


def _rerun() -> None:
    if hasattr(st, "rerun"):
        st.rerun()
    else:  # pragma: no cover - older Streamlit
        st.experimental_rerun()


def render_home(store: ExpenseStore, snapshot: StoreSnapshot, today: date) -> None:
    symbol = snapshot.settings.currency_symbol
    analytics = SpendingAnalytics(snapshot.expenses)
    comparison = analytics.compare_months(today)

    delta = None
    if comparison.change_percent != 0:
        delta = format_percentage(comparison.change_percent)
    st.metric(
        f"Spent in {month_label(today)}",
        format_currency(analytics.monthly_total(today), symbol),
        delta=delta,
        delta_color="inverse",
    )

    weekly_col, average_col = st.columns(2)
    weekly_col.metric("Weekly", format_currency(analytics.weekly_total(today), symbol))
    average_col.metric("Daily Avg", format_currency(analytics.daily_average(today), symbol))

    st.plotly_chart(
        viz.create_daily_spending_chart(analytics.daily_breakdown(today), symbol, f"{month_label(today)} expenses"),
        use_container_width=True,
    )

    st.caption("Quick add")
    for column, amount in zip(st.columns(len(config.QUICK_ADD_AMOUNTS)), config.QUICK_ADD_AMOUNTS):
        if column.button(format_currency(amount, symbol), key=f"quick_add_{amount}"):
            store.quick_add(amount)
            _rerun()

    with st.expander("Add expense"):
        with st.form("add_expense", clear_on_submit=True):
            amount = st.number_input("Amount", min_value=0.0, step=1.0)
            names = [category.name for category in snapshot.categories] or [config.QUICK_ADD_CATEGORY]
            category = st.selectbox("Category", names)
            spent_on = st.date_input("Date", value=today)
            note = st.text_input("Note")
            if st.form_submit_button("Save"):
                if amount <= 0:
                    st.warning("Enter an amount greater than zero.")
                else:
                    store.add_expense(amount, category, spent_on, note or None)
                    _rerun()

    st.subheader("Recent")
    if not snapshot.expenses:
        st.info("No expenses yet. Use quick add or the form above.")
    for expense in snapshot.expenses[:10]:
        info = lookup_category(snapshot.categories, expense.category)
        label_col, amount_col, edit_col, delete_col = st.columns([6, 3, 1, 1])
        label_col.write(f"{info.icon} **{info.name}** · {expense.date:%d %b}" + (f" · {expense.note}" if expense.note else ""))
        amount_col.write(format_currency(expense.amount, symbol))
        if edit_col.button("✏️", key=f"edit_{expense.id}"):
            st.session_state["editing_expense"] = expense.id
        if delete_col.button("🗑", key=f"delete_{expense.id}"):
            store.delete_expense(expense.id)
            _rerun()
        if st.session_state.get("editing_expense") == expense.id:
            render_expense_editor(store, snapshot, expense)


def render_expense_editor(store: ExpenseStore, snapshot: StoreSnapshot, expense: Expense) -> None:
    names = [category.name for category in snapshot.categories]
    if expense.category not in names:
        names.append(expense.category)
    with st.form(f"edit_expense_{expense.id}"):
        amount = st.number_input("Amount", min_value=0.0, step=1.0, value=float(expense.amount))
        category = st.selectbox("Category", names, index=names.index(expense.category))
        spent_on = st.date_input("Date", value=expense.date)
        note = st.text_input("Note", value=expense.note or "")
        save_col, cancel_col = st.columns(2)
        save = save_col.form_submit_button("Save")
        cancel = cancel_col.form_submit_button("Cancel")
    if cancel:
        st.session_state.pop("editing_expense", None)
        _rerun()
    if save:
        if amount <= 0:
            st.warning("Enter an amount greater than zero.")
            return
        store.update_expense(expense.id, amount=amount, category=category, date=spent_on, note=note or None)
        st.session_state.pop("editing_expense", None)
        _rerun()


def render_analytics(snapshot: StoreSnapshot, today: date) -> None:
    symbol = snapshot.settings.currency_symbol
    analytics = SpendingAnalytics(snapshot.expenses)

    months = [today]
    for _ in range(11):
        months.append(previous_month(months[-1]))
    selected = st.selectbox("Month", months, format_func=month_label)

    breakdown = analytics.category_breakdown(selected)
    st.plotly_chart(viz.create_category_pie_chart(breakdown, snapshot.categories), use_container_width=True)
    if breakdown:
        st.dataframe(
            pd.DataFrame([
                {
                    'Category': f"{lookup_category(snapshot.categories, share.category).icon} {share.category}",
                    'Amount': format_currency(share.amount, symbol),
                    'Share': format_percentage(share.percentage),
                }
                for share in breakdown
            ]),
            hide_index=True,
        )

    ref = month_reference(selected, today)
    comparison = analytics.compare_months(ref)
    this_col, last_col, projection_col = st.columns(3)
    this_col.metric("This month", format_currency(comparison.current, symbol))
    last_col.metric("Last month", format_currency(comparison.previous, symbol))
    projection_col.metric("Projected", format_currency(analytics.monthly_projection(ref), symbol))

    st.plotly_chart(viz.create_daily_spending_chart(analytics.daily_breakdown(selected), symbol), use_container_width=True)

    insights = analytics.generate_insights(snapshot.budgets, ref, symbol)
    if insights:
        st.subheader("Insights")
        for insight in insights:
            st.markdown(f"- {insight}")


def render_budget(store: ExpenseStore, snapshot: StoreSnapshot, today: date) -> None:
    symbol = snapshot.settings.currency_symbol
    statuses = SpendingAnalytics(snapshot.expenses).budget_status(snapshot.budgets, today)

    with st.expander("Set budget"):
        with st.form("set_budget", clear_on_submit=True):
            options = ["Overall"] + [category.name for category in snapshot.categories]
            target = st.selectbox("Applies to", options)
            amount = st.number_input("Monthly amount", min_value=0.0, step=100.0)
            if st.form_submit_button("Save"):
                if amount <= 0:
                    st.warning("Enter an amount greater than zero.")
                else:
                    scope = OVERALL if target == "Overall" else ForCategory(target)
                    store.set_budget(scope, amount)
                    _rerun()

    if not statuses:
        st.info("No monthly budgets yet.")
        return

    overall = overall_budget_status(statuses)
    if overall is not None:
        st.metric(
            "Overall budget",
            f"{format_currency(overall.spent, symbol)} / {format_currency(overall.budget, symbol)}",
            delta=f"{format_currency(overall.remaining, symbol)} left",
        )
        st.progress(min(overall.percentage, 100.0) / 100)
        if overall.state in (BudgetState.DANGER, BudgetState.EXCEEDED) and snapshot.settings.budget_alerts:
            st.warning(f"{STATE_ICONS[overall.state]} You have used {format_percentage(overall.percentage)} of your budget.")

    st.plotly_chart(viz.create_budget_progress_chart(statuses), use_container_width=True)
    for status in statuses:
        label_col, delete_col = st.columns([9, 1])
        label_col.write(
            f"{STATE_ICONS[status.state]} **{status.scope.label}**: "
            f"{format_currency(status.spent, symbol)} of {format_currency(status.budget, symbol)} "
            f"({format_percentage(status.percentage)})"
        )
        if delete_col.button("🗑", key=f"delete_budget_{status.budget_id}"):
            store.delete_budget(status.budget_id)
            _rerun()


def render_category_manager(store: ExpenseStore, snapshot: StoreSnapshot) -> None:
    """Add, rename, recolour and delete categories.

    Deleting a category leaves its expenses alone; they show with the
    fallback icon until a category of that name exists again.
    """
    for category in snapshot.categories:
        with st.form(f"category_{category.id}"):
            icon_col, name_col, color_col = st.columns([1, 4, 3])
            icon = icon_col.text_input("Icon", value=category.icon)
            name = name_col.text_input("Name", value=category.name)
            color = color_col.text_input("Colour", value=category.color)
            save_col, delete_col = st.columns(2)
            save = save_col.form_submit_button("Save")
            delete = delete_col.form_submit_button("Delete")
        if delete:
            store.delete_category(category.id)
            _rerun()
        if save:
            try:
                store.update_category(category.id, name=name, icon=icon, color=color)
            except ValueError as e:
                st.warning(str(e))
            else:
                _rerun()

    with st.form("add_category", clear_on_submit=True):
        st.caption("New category")
        icon_col, name_col, color_col = st.columns([1, 4, 3])
        icon = icon_col.text_input("Icon", value="📦")
        name = name_col.text_input("Name")
        color = color_col.color_picker("Colour", value="#808080")
        if st.form_submit_button("Add"):
            try:
                store.add_category(name, icon, color)
            except ValueError as e:
                st.warning(str(e))
            else:
                _rerun()


def render_settings(store: ExpenseStore, snapshot: StoreSnapshot) -> None:
    settings = snapshot.settings
    codes = [currency.code for currency in CURRENCIES]
    code = st.selectbox(
        "Currency",
        codes,
        index=codes.index(settings.currency) if settings.currency in codes else 0,
        format_func=lambda c: next(f"{x.symbol} - {x.name}" for x in CURRENCIES if x.code == c),
    )
    if code != settings.currency:
        store.set_currency(code)
        _rerun()

    theme = st.radio(
        "Theme", THEMES, index=THEMES.index(settings.theme) if settings.theme in THEMES else 1, horizontal=True
    )
    daily_reminder = st.toggle("Daily reminder", value=settings.daily_reminder)
    budget_alerts = st.toggle("Budget alerts", value=settings.budget_alerts)
    if (theme, daily_reminder, budget_alerts) != (settings.theme, settings.daily_reminder, settings.budget_alerts):
        store.update_settings(theme=theme, daily_reminder=daily_reminder, budget_alerts=budget_alerts)

    with st.expander("Categories"):
        render_category_manager(store, snapshot)

    st.subheader("Data")
    st.download_button(
        "Export data",
        data=store.export_data(),
        file_name=f"expense-tracker-{date.today().isoformat()}.json",
        mime="application/json",
    )
    uploaded = st.file_uploader("Import data", type=["json"])
    if uploaded is not None and st.button("Import"):
        if store.import_data(uploaded.getvalue().decode("utf-8")):
            st.success("Data imported.")
            _rerun()
        else:
            st.error("That file is not a valid export.")

    if st.button("Clear all data", type="primary"):
        store.clear_all_data()
        _rerun()


def main() -> None:
    """Entry point for the Streamlit app."""
    st.set_page_config(page_title="Expense Tracker", layout="centered")
    store = get_store()
    snapshot = store.snapshot()
    today = date.today()

    home, analytics_tab, budget, settings = st.tabs(["🏠 Home", "📊 Analytics", "💰 Budget", "⚙️ Settings"])
    with home:
        render_home(store, snapshot, today)
    with analytics_tab:
        render_analytics(snapshot, today)
    with budget:
        render_budget(store, snapshot, today)
    with settings:
        render_settings(store, snapshot)


if __name__ == "__main__":  # pragma: no cover
    main()
