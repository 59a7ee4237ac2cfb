from datetime import date, timezone

import pytest

from expense_tracker.models import (
    DEFAULT_CATEGORIES,
    OVERALL,
    Budget,
    BudgetPeriod,
    Category,
    Expense,
    ForCategory,
    Overall,
    Settings,
    find_currency,
    lookup_category,
    scope_from_value,
    scope_to_value,
)


def test_overall_scope_round_trips_as_null_category():
    budget = Budget(id='b1', scope=OVERALL, amount=1000)
    data = budget.to_dict()
    assert data == {'id': 'b1', 'category': None, 'amount': 1000, 'period': 'monthly'}
    assert Budget.from_dict(data) == budget
    assert Budget.from_dict(data).is_overall


def test_category_scope_round_trips_by_name():
    budget = Budget(id='b2', scope=ForCategory('Food'), amount=200, period=BudgetPeriod.WEEKLY)
    restored = Budget.from_dict(budget.to_dict())
    assert restored.scope == ForCategory('Food')
    assert restored.period == BudgetPeriod.WEEKLY
    assert not restored.is_overall


def test_scope_values():
    assert scope_from_value(None) == Overall()
    assert scope_from_value('Bills') == ForCategory('Bills')
    assert scope_to_value(OVERALL) is None
    assert scope_to_value(ForCategory('Bills')) == 'Bills'
    assert OVERALL.label == 'Overall'
    assert ForCategory('Bills').label == 'Bills'


def test_scope_to_value_rejects_plain_strings():
    with pytest.raises(TypeError):
        scope_to_value('Bills')


def test_budget_from_dict_rejects_unknown_period():
    with pytest.raises(ValueError):
        Budget.from_dict({'id': 'b', 'category': None, 'amount': 10, 'period': 'yearly'})


def test_expense_from_exported_record():
    expense = Expense.from_dict({
        'id': 'e1',
        'amount': '12.5',
        'category': 'Food',
        'date': '2024-03-01',
        'createdAt': '2024-03-01T09:15:00.000Z',
    })
    assert expense.amount == 12.5
    assert expense.date == date(2024, 3, 1)
    assert expense.created_at.utcoffset() == timezone.utc.utcoffset(None)
    assert expense.note is None


def test_expense_to_dict_omits_missing_note():
    expense = Expense(id='e1', amount=5, category='Food', date=date(2024, 3, 1))
    assert expense.to_dict() == {
        'id': 'e1', 'amount': 5, 'category': 'Food', 'date': '2024-03-01', 'createdAt': None,
    }
    assert 'note' in Expense(id='e2', amount=5, category='Food', date=date(2024, 3, 1), note='hi').to_dict()


def test_expense_from_dict_requires_fields():
    with pytest.raises(KeyError):
        Expense.from_dict({'id': 'e1', 'category': 'Food', 'date': '2024-03-01'})
    with pytest.raises(ValueError):
        Expense.from_dict({'id': 'e1', 'amount': 'lots', 'category': 'Food', 'date': '2024-03-01'})


def test_settings_merge_over_defaults():
    settings = Settings.from_dict({'currency': 'USD', 'currencySymbol': '$', 'unknown': 1})
    assert settings.currency_symbol == '$'
    assert settings.theme == 'dark'
    assert settings.budget_alerts is True
    assert Settings.from_dict(settings.to_dict()) == settings


def test_lookup_category_hit_and_fallback():
    assert lookup_category(DEFAULT_CATEGORIES, 'Food').icon == '🍔'
    fallback = lookup_category(DEFAULT_CATEGORIES, 'Gifts')
    assert fallback == Category(id='', name='Gifts', icon='📦', color='hsl(0, 0%, 50%)')


def test_find_currency():
    assert find_currency('JPY').symbol == '¥'
    assert find_currency('ABC') is None
