from datetime import date

from expense_tracker import analytics
from expense_tracker import visualization as viz
from expense_tracker.formatting import format_currency, format_percentage, month_label, round_half_up
from expense_tracker.models import DEFAULT_CATEGORIES, OVERALL, Budget, Expense, ForCategory


def _expenses():
    return [
        Expense(id='1', amount=120, category='Food', date=date(2024, 3, 2)),
        Expense(id='2', amount=80, category='Gifts', date=date(2024, 3, 5)),
    ]


def test_daily_spending_chart_has_a_bar_per_day():
    breakdown = analytics.daily_breakdown(_expenses(), date(2024, 3, 10))
    fig = viz.create_daily_spending_chart(breakdown, '$')
    assert len(fig.data) == 1
    assert len(fig.data[0].x) == 31
    assert fig.layout.yaxis.title.text == 'Amount ($)'


def test_daily_spending_chart_empty_month():
    fig = viz.create_daily_spending_chart(analytics.daily_breakdown([], date(2024, 3, 10)))
    assert fig.layout.title.text == 'No data to display'


def test_category_pie_chart_labels():
    shares = analytics.category_breakdown(_expenses(), date(2024, 3, 10))
    fig = viz.create_category_pie_chart(shares, DEFAULT_CATEGORIES)
    assert len(fig.data) == 1
    assert set(fig.data[0].labels) == {'Food', 'Gifts'}
    assert viz.create_category_pie_chart([]).layout.title.text == 'No data to display'


def test_budget_progress_chart_caps_at_full():
    budgets = [Budget(id='o', scope=OVERALL, amount=100), Budget(id='f', scope=ForCategory('Food'), amount=400)]
    statuses = analytics.budget_status(_expenses(), budgets, date(2024, 3, 10))
    fig = viz.create_budget_progress_chart(statuses)
    assert list(fig.data[0].y) == ['Overall', 'Food']
    assert list(fig.data[0].x) == [100.0, 30.0]
    assert list(fig.data[0].text) == ['exceeded', 'safe']


def test_daily_breakdown_frame_columns():
    frame = viz.daily_breakdown_frame(analytics.daily_breakdown(_expenses(), date(2024, 2, 1)))
    assert list(frame.columns) == ['Day', 'Amount']
    assert len(frame) == 29


def test_format_currency():
    assert format_currency(1234.5) == '₹1,234.5'
    assert format_currency(1234.567, symbol='$') == '$1,234.57'
    assert format_currency(1200, symbol='$', max_decimals=0) == '$1,200'
    assert format_currency(50) == '₹50'
    assert format_currency(0.1) == '₹0.1'


def test_round_half_up_and_percentages():
    assert round_half_up(12.5) == 13
    assert round_half_up(2.4) == 2
    assert round_half_up(-2.5) == -3
    assert format_percentage(42.5) == '43%'


def test_month_label():
    assert month_label(date(2024, 3, 1)) == 'March 2024'
