"""Plotly visualisation helpers for the expense tracker.

Each function accepts results from :mod:`expense_tracker.analytics` and
returns a ``plotly.graph_objects.Figure`` that Streamlit can render via
``st.plotly_chart``.  Empty inputs produce an empty figure titled
"No data to display" rather than raising.
"""

from __future__ import annotations

from typing import Dict, Iterable, Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .models import BudgetState, BudgetStatus, Category, CategoryShare, DailySpend, lookup_category

STATE_COLORS: Dict[BudgetState, str] = {
    BudgetState.SAFE: "hsl(142, 71%, 45%)",
    BudgetState.WARNING: "hsl(38, 92%, 50%)",
    BudgetState.DANGER: "hsl(0, 84%, 60%)",
    BudgetState.EXCEEDED: "hsl(0, 72%, 45%)",
}


def _empty_figure(title: str = "No data to display") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    return fig


def daily_breakdown_frame(breakdown: Sequence[DailySpend]) -> pd.DataFrame:
    """Convert a daily breakdown into a ``Day``/``Amount`` DataFrame."""
    return pd.DataFrame(
        [{'Day': entry.day, 'Amount': entry.amount} for entry in breakdown],
        columns=['Day', 'Amount'],
    )


def create_daily_spending_chart(
    breakdown: Sequence[DailySpend],
    currency_symbol: str = "₹",
    title: str | None = None,
) -> go.Figure:
    """Bar chart of spending per day of the month.

    Parameters
    ----------
    breakdown : sequence of DailySpend
        Output of :func:`expense_tracker.analytics.daily_breakdown`.
    currency_symbol : str
        Symbol used in the axis title and hover text.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Interactive bar chart, one bar per day.
    """
    df = daily_breakdown_frame(breakdown)
    if df.empty or not (df['Amount'] > 0).any():
        return _empty_figure()
    fig = go.Figure(
        go.Bar(
            x=df['Day'],
            y=df['Amount'],
            hovertemplate=f"Day %{{x}}<br>{currency_symbol}%{{y:,.2f}}<extra></extra>",
        )
    )
    fig.update_layout(
        title=title or "Daily spending",
        xaxis_title="Day",
        yaxis_title=f"Amount ({currency_symbol})",
        bargap=0.2,
    )
    return fig


def create_category_pie_chart(
    shares: Sequence[CategoryShare],
    categories: Iterable[Category] = (),
    title: str | None = None,
) -> go.Figure:
    """Donut chart of the month's spending per category.

    Slice colours come from the matching category; unknown names get the
    fallback colour.
    """
    if not shares:
        return _empty_figure()
    categories = list(categories)
    df = pd.DataFrame(
        [{'Category': share.category, 'Amount': share.amount} for share in shares]
    )
    color_map = {name: lookup_category(categories, name).color for name in df['Category']}
    fig = px.pie(
        df,
        names='Category',
        values='Amount',
        color='Category',
        color_discrete_map=color_map,
        hole=0.5,
    )
    fig.update_layout(title=title or "Category breakdown")
    return fig


def create_budget_progress_chart(statuses: Sequence[BudgetStatus], title: str | None = None) -> go.Figure:
    """Horizontal bars of percentage used per budget, coloured by state."""
    if not statuses:
        return _empty_figure("No budgets to display")
    df = pd.DataFrame([
        {
            'Budget': status.scope.label,
            'Percentage': min(status.percentage, 100.0),
            'State': status.state.value,
            'Color': STATE_COLORS[status.state],
        }
        for status in statuses
    ])
    fig = go.Figure(
        go.Bar(
            x=df['Percentage'],
            y=df['Budget'],
            orientation='h',
            marker_color=df['Color'],
            text=df['State'],
        )
    )
    fig.update_layout(
        title=title or "Budget usage",
        xaxis_title="Used (%)",
        xaxis_range=[0, 100],
    )
    return fig
