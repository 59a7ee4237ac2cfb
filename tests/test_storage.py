import json
import logging
from datetime import date

import pytest

from expense_tracker.models import (
    DEFAULT_CATEGORIES,
    DEFAULT_SETTINGS,
    OVERALL,
    BudgetPeriod,
    ForCategory,
    lookup_category,
)
from expense_tracker.storage import ExpenseStore


@pytest.fixture
def store(tmp_path):
    return ExpenseStore(tmp_path / 'data')


def test_new_store_returns_defaults(store):
    assert store.list_expenses() == []
    assert store.list_budgets() == []
    assert store.list_categories() == list(DEFAULT_CATEGORIES)
    assert store.get_settings() == DEFAULT_SETTINGS


def test_added_expenses_persist_newest_first(store):
    first = store.add_expense(100, 'Food', date(2024, 3, 1))
    second = store.add_expense(25.5, 'Transport', '2024-03-02', note='Cab')

    reopened = ExpenseStore(store.data_dir)
    assert [expense.id for expense in reopened.list_expenses()] == [second.id, first.id]
    assert reopened.get_expense(second.id).note == 'Cab'
    assert reopened.get_expense(second.id).date == date(2024, 3, 2)
    assert first.created_at is not None


def test_expense_dates_are_stored_as_calendar_days(store):
    store.add_expense(10, 'Food', date(2024, 3, 1))
    raw = json.loads(store.get_path('expenses').read_text(encoding='utf-8'))
    assert raw[0]['date'] == '2024-03-01'
    assert 'createdAt' in raw[0]


def test_add_expense_rejects_non_positive_amount(store):
    with pytest.raises(ValueError):
        store.add_expense(0, 'Food', date(2024, 3, 1))
    assert store.list_expenses() == []


def test_quick_add_uses_default_category(store):
    expense = store.quick_add(50, on=date(2024, 3, 4))
    assert expense.category == 'Other'
    assert expense.date == date(2024, 3, 4)
    assert store.quick_add(5).date == date.today()


def test_update_expense(store):
    expense = store.add_expense(100, 'Food', date(2024, 3, 1))
    updated = store.update_expense(expense.id, amount=120, category='Bills', date='2024-03-03')
    assert updated.amount == 120
    assert updated.category == 'Bills'
    assert updated.date == date(2024, 3, 3)
    assert store.get_expense(expense.id) == updated
    assert store.update_expense('missing', amount=1) is None


def test_update_expense_rejects_non_positive_amount(store):
    expense = store.add_expense(100, 'Food', date(2024, 3, 1))
    with pytest.raises(ValueError):
        store.update_expense(expense.id, amount=-5)
    assert store.get_expense(expense.id).amount == 100


def test_delete_expense(store):
    expense = store.add_expense(100, 'Food', date(2024, 3, 1))
    assert store.delete_expense(expense.id) is True
    assert store.delete_expense(expense.id) is False
    assert store.list_expenses() == []


def test_category_crud(store):
    travel = store.add_category(' Travel ', '✈️', 'hsl(200, 80%, 50%)')
    assert travel.name == 'Travel'
    assert store.list_categories()[-1] == travel

    renamed = store.update_category(travel.id, name='Trips')
    assert renamed.name == 'Trips'
    assert store.update_category('missing', name='x') is None

    assert store.delete_category(travel.id) is True
    assert store.delete_category(travel.id) is False
    assert len(store.list_categories()) == len(DEFAULT_CATEGORIES)


def test_add_category_requires_name(store):
    with pytest.raises(ValueError):
        store.add_category('  ', '❓', 'red')


def test_update_category_requires_name(store):
    food = lookup_category(store.list_categories(), 'Food')
    with pytest.raises(ValueError):
        store.update_category(food.id, name=' ')
    assert store.update_category(food.id, name=' Meals ').name == 'Meals'


def test_deleting_category_keeps_expenses(store):
    health = next(category for category in store.list_categories() if category.name == 'Health')
    store.add_expense(80, 'Health', date(2024, 3, 1))
    store.delete_category(health.id)

    [expense] = store.list_expenses()
    assert expense.category == 'Health'
    fallback = lookup_category(store.list_categories(), expense.category)
    assert fallback.name == 'Health'
    assert fallback.icon == '📦'


def test_set_budget_replaces_same_scope_and_period(store):
    first = store.set_budget(OVERALL, 1000)
    second = store.set_budget(OVERALL, 1500)
    assert second.id == first.id
    assert [budget.amount for budget in store.list_budgets()] == [1500]


def test_set_budget_keeps_distinct_scopes_and_periods(store):
    store.set_budget(OVERALL, 1000)
    store.set_budget(OVERALL, 300, BudgetPeriod.WEEKLY)
    store.set_budget(ForCategory('Food'), 400)
    store.set_budget(ForCategory('Food'), 450)

    budgets = store.list_budgets()
    assert len(budgets) == 3
    food = [budget for budget in budgets if budget.scope == ForCategory('Food')]
    assert [budget.amount for budget in food] == [450]


def test_set_budget_accepts_category_name(store):
    store.set_budget(OVERALL, 500)
    food = store.set_budget('Food', 100)
    assert food.scope == ForCategory('Food')

    budgets = store.list_budgets()
    assert [budget.amount for budget in budgets if budget.is_overall] == [500]
    assert [budget.scope for budget in budgets] == [OVERALL, ForCategory('Food')]
    assert store.set_budget('Food', 120).id == food.id


def test_set_budget_rejects_unknown_scope(store):
    with pytest.raises(TypeError):
        store.set_budget(42, 100)
    assert store.list_budgets() == []


def test_set_budget_rejects_non_positive_amount(store):
    with pytest.raises(ValueError):
        store.set_budget(OVERALL, 0)


def test_delete_budget(store):
    budget = store.set_budget(OVERALL, 1000)
    assert store.delete_budget(budget.id) is True
    assert store.delete_budget(budget.id) is False


def test_settings_updates(store):
    store.update_settings(theme='light', daily_reminder=False)
    settings = ExpenseStore(store.data_dir).get_settings()
    assert settings.theme == 'light'
    assert settings.daily_reminder is False
    assert settings.currency == 'INR'


def test_set_currency(store):
    settings = store.set_currency('USD')
    assert (settings.currency, settings.currency_symbol) == ('USD', '$')
    with pytest.raises(ValueError):
        store.set_currency('XYZ')


def test_export_contains_all_buckets(store):
    store.add_expense(100, 'Food', date(2024, 3, 1))
    document = json.loads(store.export_data())
    assert set(document) == {'expenses', 'categories', 'budgets', 'settings', 'exportedAt'}
    assert document['expenses'][0]['amount'] == 100
    assert document['settings']['currencySymbol'] == '₹'


def test_export_then_import_into_fresh_store(store, tmp_path):
    store.add_expense(100, 'Food', date(2024, 3, 1))
    store.set_budget(OVERALL, 1000)
    store.set_currency('EUR')

    other = ExpenseStore(tmp_path / 'other')
    assert other.import_data(store.export_data()) is True
    assert other.list_expenses() == store.list_expenses()
    assert other.list_budgets() == store.list_budgets()
    assert other.get_settings().currency == 'EUR'


def test_import_only_replaces_present_keys(store):
    store.set_budget(OVERALL, 1000)
    store.set_currency('GBP')
    store.add_category('Travel', '✈️', 'blue')
    categories_before = store.list_categories()

    document = json.dumps({'expenses': [
        {'id': 'x1', 'amount': 42, 'category': 'Food', 'date': '2024-03-01', 'createdAt': '2024-03-01T10:00:00.000Z'},
    ]})
    assert store.import_data(document) is True

    assert [expense.id for expense in store.list_expenses()] == ['x1']
    assert store.list_categories() == categories_before
    assert len(store.list_budgets()) == 1
    assert store.get_settings().currency == 'GBP'


def test_import_rejects_unparseable_document(store):
    expense = store.add_expense(100, 'Food', date(2024, 3, 1))
    assert store.import_data('{"expenses": [') is False
    assert store.import_data('[1, 2, 3]') is False
    assert [e.id for e in store.list_expenses()] == [expense.id]


def test_import_keeps_malformed_records(store):
    document = json.dumps({'expenses': [
        {'unexpected': True},
        {'id': 'ok', 'amount': 5, 'category': 'Food', 'date': '2024-03-01'},
    ]})
    assert store.import_data(document) is True
    assert [expense.id for expense in store.list_expenses()] == ['ok']
    assert len(json.loads(store.export_data())['expenses']) == 2


def test_update_of_malformed_record_returns_none(store, caplog):
    assert store.import_data(json.dumps({'expenses': [{'id': 'x', 'amount': 5}]})) is True
    with caplog.at_level(logging.WARNING, logger='expense_tracker.storage'):
        assert store.update_expense('x', note='hi') is None
    assert 'Cannot update malformed expenses' in caplog.text
    assert json.loads(store.export_data())['expenses'] == [{'id': 'x', 'amount': 5}]


def test_corrupt_bucket_falls_back_to_default(store, caplog):
    store.data_dir.mkdir(parents=True)
    store.get_path('budgets').write_text('not json', encoding='utf-8')
    with caplog.at_level(logging.WARNING, logger='expense_tracker.storage'):
        assert store.list_budgets() == []
    assert 'Could not read budgets' in caplog.text


def test_clear_all_data(store):
    store.add_expense(100, 'Food', date(2024, 3, 1))
    store.update_settings(theme='light')
    store.clear_all_data()
    assert store.list_expenses() == []
    assert store.get_settings() == DEFAULT_SETTINGS
    assert not store.get_path('expenses').exists()


def test_snapshot(store):
    store.add_expense(100, 'Food', date(2024, 3, 1))
    store.set_budget(OVERALL, 1000)
    snapshot = store.snapshot()
    assert len(snapshot.expenses) == 1
    assert len(snapshot.budgets) == 1
    assert snapshot.categories == DEFAULT_CATEGORIES
    assert snapshot.settings == DEFAULT_SETTINGS
