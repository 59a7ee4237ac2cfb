"""Spending analytics and budget status calculations.

Everything here is a pure function of its inputs: an expense collection,
optionally a budget collection, and a reference date that decides which
month, week and day count as "current".  Nothing reads or writes the store.

:class:`SpendingAnalytics` loads the expenses into a DataFrame once so a
caller needing several figures for the same data (the insight generator,
the dashboard) does not rebuild it per call.  The module-level functions
wrap it for one-off use.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .formatting import round_half_up
from .models import (
    Budget,
    BudgetPeriod,
    BudgetState,
    BudgetStatus,
    CategoryShare,
    DailySpend,
    Expense,
    ForCategory,
    MonthComparison,
    Overall,
    SpendingSpike,
    parse_day,
)

ReferenceDate = Union[date, datetime, str, None]

EXCEEDED_PERCENT = 100.0
DANGER_PERCENT = 90.0
WARNING_PERCENT = 75.0
DEFAULT_SPIKE_THRESHOLD = 2.0

FRAME_COLUMNS = ['Amount', 'Category', 'Date']


def resolve_reference_date(reference_date: ReferenceDate = None) -> date:
    """Normalize a reference date; ``None`` means today."""
    if reference_date is None:
        return date.today()
    return parse_day(reference_date)


def days_in_month(reference_date: ReferenceDate = None) -> int:
    ref = resolve_reference_date(reference_date)
    return int(pd.Timestamp(ref).days_in_month)


def previous_month(reference_date: ReferenceDate = None) -> date:
    """Shift back one calendar month, clamping the day to the shorter month."""
    ref = resolve_reference_date(reference_date)
    return (pd.Timestamp(ref) - pd.DateOffset(months=1)).date()


def month_reference(month: ReferenceDate, today: ReferenceDate = None) -> date:
    """Reference date for viewing a whole month.

    The current month is seen as of today; any other month as of its last
    day, so averages and projections cover every day of it.
    """
    ref = resolve_reference_date(month)
    current = resolve_reference_date(today)
    if (ref.year, ref.month) == (current.year, current.month):
        return current
    return ref.replace(day=days_in_month(ref))


def start_of_week(reference_date: ReferenceDate = None) -> date:
    """Sunday on or before the reference date."""
    ref = resolve_reference_date(reference_date)
    # date.weekday() is Monday=0; weeks here start on Sunday
    return ref - timedelta(days=(ref.weekday() + 1) % 7)


def classify_budget(percentage: float) -> BudgetState:
    """Map a spent-vs-budget percentage to its severity."""
    if percentage >= EXCEEDED_PERCENT:
        return BudgetState.EXCEEDED
    if percentage >= DANGER_PERCENT:
        return BudgetState.DANGER
    if percentage >= WARNING_PERCENT:
        return BudgetState.WARNING
    return BudgetState.SAFE


def _percentage(part: float, whole: float) -> float:
    return float(part / whole * 100) if whole > 0 else 0.0


class SpendingAnalytics:
    """Spending aggregates over one expense collection."""

    def __init__(self, expenses: Iterable[Expense]):
        """Initialize with expense records; the records are only read."""
        self.data = self._prepare_data(expenses)

    @staticmethod
    def _prepare_data(expenses: Iterable[Expense]) -> pd.DataFrame:
        rows = [
            {'Amount': expense.amount, 'Category': expense.category, 'Date': expense.date}
            for expense in expenses
        ]
        data = pd.DataFrame(rows, columns=FRAME_COLUMNS)

        data['Amount'] = pd.to_numeric(data['Amount'], errors='coerce').fillna(0.0).astype(float)
        data['Category'] = data['Category'].astype(str)
        data['Date'] = pd.to_datetime(data['Date'])

        data['Year'] = data['Date'].dt.year
        data['Month'] = data['Date'].dt.month
        data['Day'] = data['Date'].dt.day
        return data

    def _month_rows(self, ref: date) -> pd.DataFrame:
        return self.data[(self.data['Year'] == ref.year) & (self.data['Month'] == ref.month)]

    # Time windows

    def monthly_total(self, reference_date: ReferenceDate = None) -> float:
        ref = resolve_reference_date(reference_date)
        return float(self._month_rows(ref)['Amount'].sum())

    def weekly_total(self, reference_date: ReferenceDate = None) -> float:
        """Total over ``[start_of_week, start_of_week + 7 days)``."""
        start = pd.Timestamp(start_of_week(reference_date))
        end = start + pd.Timedelta(days=7)
        in_week = (self.data['Date'] >= start) & (self.data['Date'] < end)
        return float(self.data.loc[in_week, 'Amount'].sum())

    def daily_breakdown(self, reference_date: ReferenceDate = None) -> List[DailySpend]:
        """One entry per day of the reference month, zero-filled."""
        ref = resolve_reference_date(reference_date)
        totals = self._month_rows(ref).groupby('Day')['Amount'].sum()
        totals = totals.reindex(range(1, days_in_month(ref) + 1), fill_value=0.0)
        return [DailySpend(day=int(day), amount=float(amount)) for day, amount in totals.items()]

    def daily_average(self, reference_date: ReferenceDate = None) -> float:
        """Month-to-date total divided by the reference day of month."""
        ref = resolve_reference_date(reference_date)
        if ref.day <= 0:
            return 0.0
        return self.monthly_total(ref) / ref.day

    # Comparison and projection

    def monthly_projection(self, reference_date: ReferenceDate = None) -> float:
        ref = resolve_reference_date(reference_date)
        return self.daily_average(ref) * days_in_month(ref)

    def compare_months(self, reference_date: ReferenceDate = None) -> MonthComparison:
        """Compare the reference month with the one before it.

        Without spending in the previous month there is no baseline, so
        ``change_percent`` is 0 rather than infinite.
        """
        ref = resolve_reference_date(reference_date)
        current = self.monthly_total(ref)
        previous = self.monthly_total(previous_month(ref))
        change = (current - previous) / previous * 100 if previous > 0 else 0.0
        return MonthComparison(current=current, previous=previous, change_percent=float(change))

    def category_breakdown(self, reference_date: ReferenceDate = None) -> List[CategoryShare]:
        """Spending per category for the month, largest first."""
        ref = resolve_reference_date(reference_date)
        month_rows = self._month_rows(ref)
        if month_rows.empty:
            return []

        total = float(month_rows['Amount'].sum())
        by_category = month_rows.groupby('Category', sort=False)['Amount'].sum()
        # mergesort is stable: equal totals keep first-appearance order
        by_category = by_category.sort_values(ascending=False, kind='mergesort')
        return [
            CategoryShare(category=str(category), amount=float(amount), percentage=_percentage(amount, total))
            for category, amount in by_category.items()
        ]

    # Budgets

    def _spent_for(self, budget: Budget, ref: date) -> float:
        month_rows = self._month_rows(ref)
        if isinstance(budget.scope, ForCategory):
            month_rows = month_rows[month_rows['Category'] == budget.scope.name]
        return float(month_rows['Amount'].sum())

    def budget_status(self, budgets: Iterable[Budget], reference_date: ReferenceDate = None) -> List[BudgetStatus]:
        """Classify every monthly budget against the month's spending.

        Weekly budgets are skipped entirely.
        """
        ref = resolve_reference_date(reference_date)
        statuses = []
        for budget in budgets:
            if budget.period != BudgetPeriod.MONTHLY:
                continue
            spent = self._spent_for(budget, ref)
            percentage = _percentage(spent, budget.amount)
            statuses.append(BudgetStatus(
                budget_id=budget.id,
                scope=budget.scope,
                budget=budget.amount,
                spent=spent,
                percentage=percentage,
                state=classify_budget(percentage),
            ))
        return statuses

    # Spikes

    def detect_spending_spikes(
        self,
        reference_date: ReferenceDate = None,
        threshold: float = DEFAULT_SPIKE_THRESHOLD,
    ) -> List[SpendingSpike]:
        """Find days spending more than ``threshold`` times the active-day mean.

        Days without spending are left out of the mean so a quiet month
        does not make every purchase look like a spike.
        """
        ref = resolve_reference_date(reference_date)
        active = [entry for entry in self.daily_breakdown(ref) if entry.amount > 0]
        if not active:
            return []

        average = float(np.mean([entry.amount for entry in active]))
        return [
            SpendingSpike(date=ref.replace(day=entry.day), amount=entry.amount, average=average)
            for entry in active
            if entry.amount > average * threshold
        ]

    # Summaries

    def monthly_summary(self, budgets: Sequence[Budget] = (), reference_date: ReferenceDate = None) -> Dict[str, object]:
        """Headline figures for the reference month."""
        ref = resolve_reference_date(reference_date)
        return {
            'reference_date': ref,
            'monthly_total': self.monthly_total(ref),
            'weekly_total': self.weekly_total(ref),
            'daily_average': self.daily_average(ref),
            'projection': self.monthly_projection(ref),
            'comparison': self.compare_months(ref),
            'budget_status': self.budget_status(budgets, ref),
        }

    def generate_insights(
        self,
        budgets: Sequence[Budget] = (),
        reference_date: ReferenceDate = None,
        currency_symbol: str = "₹",
    ) -> List[str]:
        """Generate short spending insights in a fixed order.

        Each rule is checked on its own; an earlier insight never
        suppresses a later one.
        """
        ref = resolve_reference_date(reference_date)
        insights = []

        change = self.compare_months(ref).change_percent
        if change > 0:
            insights.append(f"You spent {round_half_up(abs(change))}% more this month compared to last month")
        elif change < 0:
            insights.append(f"Great job! You spent {round_half_up(abs(change))}% less this month")

        breakdown = self.category_breakdown(ref)
        if breakdown:
            top = breakdown[0]
            insights.append(
                f"{top.category} is your highest spending category at {round_half_up(top.percentage)}%"
            )

        overall = overall_budget_status(self.budget_status(budgets, ref))
        if overall is not None and self.monthly_projection(ref) > overall.budget:
            days_remaining = days_in_month(ref) - ref.day
            insights.append(f"At current pace, you may exceed your budget in {days_remaining} days")

        spikes = self.detect_spending_spikes(ref)
        if spikes:
            plural = "s" if len(spikes) > 1 else ""
            insights.append(f"Detected {len(spikes)} unusual spending spike{plural} this month")

        average = self.daily_average(ref)
        if average > 0:
            insights.append(f"Your average daily spending is {currency_symbol}{round_half_up(average)}")

        return insights


def overall_budget_status(statuses: Iterable[BudgetStatus]) -> Optional[BudgetStatus]:
    """Return the first status whose budget covers total spend, if any."""
    for status in statuses:
        if isinstance(status.scope, Overall):
            return status
    return None


def monthly_total(expenses: Iterable[Expense], reference_date: ReferenceDate = None) -> float:
    return SpendingAnalytics(expenses).monthly_total(reference_date)


def weekly_total(expenses: Iterable[Expense], reference_date: ReferenceDate = None) -> float:
    return SpendingAnalytics(expenses).weekly_total(reference_date)


def daily_breakdown(expenses: Iterable[Expense], reference_date: ReferenceDate = None) -> List[DailySpend]:
    return SpendingAnalytics(expenses).daily_breakdown(reference_date)


def daily_average(expenses: Iterable[Expense], reference_date: ReferenceDate = None) -> float:
    return SpendingAnalytics(expenses).daily_average(reference_date)


def monthly_projection(expenses: Iterable[Expense], reference_date: ReferenceDate = None) -> float:
    return SpendingAnalytics(expenses).monthly_projection(reference_date)


def compare_months(expenses: Iterable[Expense], reference_date: ReferenceDate = None) -> MonthComparison:
    return SpendingAnalytics(expenses).compare_months(reference_date)


def category_breakdown(expenses: Iterable[Expense], reference_date: ReferenceDate = None) -> List[CategoryShare]:
    return SpendingAnalytics(expenses).category_breakdown(reference_date)


def budget_status(
    expenses: Iterable[Expense],
    budgets: Iterable[Budget],
    reference_date: ReferenceDate = None,
) -> List[BudgetStatus]:
    return SpendingAnalytics(expenses).budget_status(budgets, reference_date)


def detect_spending_spikes(
    expenses: Iterable[Expense],
    reference_date: ReferenceDate = None,
    threshold: float = DEFAULT_SPIKE_THRESHOLD,
) -> List[SpendingSpike]:
    return SpendingAnalytics(expenses).detect_spending_spikes(reference_date, threshold)


def monthly_summary(
    expenses: Iterable[Expense],
    budgets: Sequence[Budget] = (),
    reference_date: ReferenceDate = None,
) -> Dict[str, object]:
    return SpendingAnalytics(expenses).monthly_summary(budgets, reference_date)


def generate_insights(
    expenses: Iterable[Expense],
    budgets: Sequence[Budget] = (),
    reference_date: ReferenceDate = None,
    currency_symbol: str = "₹",
) -> List[str]:
    return SpendingAnalytics(expenses).generate_insights(budgets, reference_date, currency_symbol)
