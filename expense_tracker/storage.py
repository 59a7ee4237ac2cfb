"""Local persistence for expenses, categories, budgets and settings.

Each collection lives in its own bucket, a JSON file named after the
bucket inside the data directory.  Buckets are read on demand and written
back after every mutation, so two stores pointed at the same directory
see each other's changes.

Buckets hold the raw dictionaries that were written or imported.  Records
are converted to model objects when listed; a record that cannot be
converted is skipped with a warning but left in the bucket untouched.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union
from uuid import uuid4

from . import config
from .models import (
    Budget,
    BudgetPeriod,
    BudgetScope,
    Category,
    DEFAULT_CATEGORIES,
    DEFAULT_SETTINGS,
    Expense,
    ForCategory,
    Overall,
    Settings,
    StoreSnapshot,
    find_currency,
    parse_day,
    scope_from_value,
)

logger = logging.getLogger(__name__)

EXPENSES = 'expenses'
CATEGORIES = 'categories'
BUDGETS = 'budgets'
SETTINGS = 'settings'
BUCKETS = (EXPENSES, CATEGORIES, BUDGETS, SETTINGS)

T = TypeVar('T')


def _new_id() -> str:
    return str(uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _require_positive(amount: float, what: str) -> float:
    value = float(amount)
    if value <= 0:
        raise ValueError(f"{what} amount must be positive, got {amount!r}")
    return value


class ExpenseStore:
    """Handles expense tracker storage operations."""

    def __init__(self, data_dir: Optional[Path] = None):
        """Initialize the store.

        Args:
            data_dir: Optional directory for the bucket files.
                      Defaults to DATA_DIR from config.
        """
        self.data_dir = Path(data_dir) if data_dir is not None else config.DATA_DIR

    def get_path(self, bucket: str) -> Path:
        return self.data_dir / f"{bucket}.json"

    def _default(self, bucket: str) -> Any:
        if bucket == CATEGORIES:
            return [category.to_dict() for category in DEFAULT_CATEGORIES]
        if bucket == SETTINGS:
            return DEFAULT_SETTINGS.to_dict()
        return []

    def _read(self, bucket: str) -> Any:
        target = self.get_path(bucket)
        if not target.exists():
            return self._default(bucket)
        try:
            with target.open('r', encoding='utf-8') as handle:
                return json.load(handle)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not read %s bucket from %s: %s", bucket, target, e)
            return self._default(bucket)

    def _write(self, bucket: str, value: Any) -> None:
        target = self.get_path(bucket)
        config.ensure_data_directories(target.parent)
        try:
            with target.open('w', encoding='utf-8') as handle:
                json.dump(value, handle, indent=2, ensure_ascii=False)
        except OSError as e:
            raise OSError(f"Failed to save {bucket} to {target}: {e}") from e
        logger.debug("Saved %s bucket to %s", bucket, target)

    def _records(self, bucket: str) -> List[Any]:
        records = self._read(bucket)
        if not isinstance(records, list):
            logger.warning("Ignoring %s bucket: expected a list, got %s", bucket, type(records).__name__)
            return []
        return records

    def _load(self, bucket: str, factory: Callable[[Dict[str, Any]], T]) -> List[T]:
        items: List[T] = []
        for record in self._records(bucket):
            try:
                items.append(factory(record))
            except (KeyError, ValueError, TypeError) as e:
                logger.warning("Skipping malformed %s record %r: %s", bucket, record, e)
        return items

    @staticmethod
    def _index_of(records: List[Any], record_id: str) -> int:
        for index, record in enumerate(records):
            if isinstance(record, dict) and record.get('id') == record_id:
                return index
        return -1

    def _update(self, bucket: str, record_id: str, factory: Callable[[Dict[str, Any]], T], changes: Dict[str, Any]) -> Optional[T]:
        records = self._records(bucket)
        index = self._index_of(records, record_id)
        if index == -1:
            return None
        try:
            current = factory(records[index])
        except (KeyError, ValueError, TypeError) as e:
            logger.warning("Cannot update malformed %s record %r: %s", bucket, records[index], e)
            return None
        updated = replace(current, **changes)
        records[index] = updated.to_dict()
        self._write(bucket, records)
        return updated

    def _delete(self, bucket: str, record_id: str) -> bool:
        records = self._records(bucket)
        remaining = [
            record for record in records
            if not (isinstance(record, dict) and record.get('id') == record_id)
        ]
        if len(remaining) == len(records):
            return False
        self._write(bucket, remaining)
        return True

    # Expenses

    def list_expenses(self) -> List[Expense]:
        """All expenses, most recently added first."""
        return self._load(EXPENSES, Expense.from_dict)

    def get_expense(self, expense_id: str) -> Optional[Expense]:
        for expense in self.list_expenses():
            if expense.id == expense_id:
                return expense
        return None

    def add_expense(
        self,
        amount: float,
        category: str,
        date: Union[date, str],
        note: Optional[str] = None,
    ) -> Expense:
        """Record a new expense.

        Raises:
            ValueError: If the amount is not positive
        """
        expense = Expense(
            id=_new_id(),
            amount=_require_positive(amount, "Expense"),
            category=category,
            date=parse_day(date),
            created_at=_now(),
            note=note,
        )
        records = self._records(EXPENSES)
        records.insert(0, expense.to_dict())
        self._write(EXPENSES, records)
        return expense

    def quick_add(self, amount: float, on: Union[date, str, None] = None) -> Expense:
        """Record a shortcut expense under the default category."""
        return self.add_expense(amount, config.QUICK_ADD_CATEGORY, on or date.today())

    def update_expense(self, expense_id: str, **changes: Any) -> Optional[Expense]:
        """Apply field changes to an expense; ``None`` if the id is unknown.

        Raises:
            ValueError: If a new amount is not positive
            TypeError: If a change names a field expenses do not have
        """
        if 'amount' in changes:
            changes['amount'] = _require_positive(changes['amount'], "Expense")
        if 'date' in changes:
            changes['date'] = parse_day(changes['date'])
        return self._update(EXPENSES, expense_id, Expense.from_dict, changes)

    def delete_expense(self, expense_id: str) -> bool:
        return self._delete(EXPENSES, expense_id)

    # Categories

    def list_categories(self) -> List[Category]:
        return self._load(CATEGORIES, Category.from_dict)

    def add_category(self, name: str, icon: str, color: str) -> Category:
        """Add a category.

        Raises:
            ValueError: If the name is empty
        """
        if not name or not name.strip():
            raise ValueError("Category name cannot be empty")
        category = Category(id=_new_id(), name=name.strip(), icon=icon, color=color)
        records = self._records(CATEGORIES)
        records.append(category.to_dict())
        self._write(CATEGORIES, records)
        return category

    def update_category(self, category_id: str, **changes: Any) -> Optional[Category]:
        """Apply field changes to a category; ``None`` if the id is unknown.

        Raises:
            ValueError: If a new name is empty
        """
        if 'name' in changes:
            name = changes['name']
            if not name or not name.strip():
                raise ValueError("Category name cannot be empty")
            changes['name'] = name.strip()
        return self._update(CATEGORIES, category_id, Category.from_dict, changes)

    def delete_category(self, category_id: str) -> bool:
        """Delete a category.  Expenses keep referring to it by name."""
        return self._delete(CATEGORIES, category_id)

    # Budgets

    def list_budgets(self) -> List[Budget]:
        return self._load(BUDGETS, Budget.from_dict)

    def set_budget(
        self,
        scope: Union[BudgetScope, str],
        amount: float,
        period: BudgetPeriod = BudgetPeriod.MONTHLY,
    ) -> Budget:
        """Create or replace the budget for ``(scope, period)``.

        An existing budget for the same scope and period keeps its id and
        position and takes the new amount.

        Raises:
            ValueError: If the amount is not positive
            TypeError: If the scope is neither a category name nor a scope
        """
        if isinstance(scope, str):
            scope = scope_from_value(scope)
        elif not isinstance(scope, (Overall, ForCategory)):
            raise TypeError(f"Expected Overall or ForCategory scope, got {type(scope).__name__}")
        amount = _require_positive(amount, "Budget")
        period = BudgetPeriod(period)
        records = self._records(BUDGETS)

        existing_index = -1
        for index, record in enumerate(records):
            try:
                current = Budget.from_dict(record)
            except (KeyError, ValueError, TypeError):
                continue
            if current.scope == scope and current.period == period:
                existing_index = index
                break

        if existing_index >= 0:
            budget = Budget(id=str(records[existing_index]['id']), scope=scope, amount=amount, period=period)
            records[existing_index] = budget.to_dict()
        else:
            budget = Budget(id=_new_id(), scope=scope, amount=amount, period=period)
            records.append(budget.to_dict())

        self._write(BUDGETS, records)
        return budget

    def delete_budget(self, budget_id: str) -> bool:
        return self._delete(BUDGETS, budget_id)

    # Settings

    def get_settings(self) -> Settings:
        data = self._read(SETTINGS)
        if not isinstance(data, dict):
            logger.warning("Ignoring settings bucket: expected an object")
            return DEFAULT_SETTINGS
        return Settings.from_dict(data)

    def update_settings(self, **changes: Any) -> Settings:
        settings = replace(self.get_settings(), **changes)
        self._write(SETTINGS, settings.to_dict())
        return settings

    def set_currency(self, code: str) -> Settings:
        """Switch display currency by code.

        Raises:
            ValueError: If the code is not one of the supported currencies
        """
        currency = find_currency(code)
        if currency is None:
            raise ValueError(f"Unsupported currency code: {code!r}")
        return self.update_settings(currency=currency.code, currency_symbol=currency.symbol)

    # Whole store

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            expenses=tuple(self.list_expenses()),
            categories=tuple(self.list_categories()),
            budgets=tuple(self.list_budgets()),
            settings=self.get_settings(),
        )

    def clear_all_data(self) -> None:
        """Remove every bucket file; later reads fall back to defaults."""
        for bucket in BUCKETS:
            target = self.get_path(bucket)
            if not target.exists():
                continue
            try:
                target.unlink()
            except OSError as e:
                raise OSError(f"Failed to delete {bucket} file {target}: {e}") from e
        logger.info("Cleared all data in %s", self.data_dir)

    def export_data(self) -> str:
        """Serialize all buckets into one JSON document."""
        payload = {
            EXPENSES: self._read(EXPENSES),
            CATEGORIES: self._read(CATEGORIES),
            BUDGETS: self._read(BUDGETS),
            SETTINGS: self._read(SETTINGS),
            'exportedAt': _now().isoformat(),
        }
        return json.dumps(payload, indent=2, ensure_ascii=False)

    def import_data(self, document: str) -> bool:
        """Replace buckets from an exported JSON document.

        Every bucket key present in the document replaces that bucket as a
        whole; absent keys leave stored data untouched.  Records are not
        validated.  Returns ``False`` without touching the store when the
        document is not a JSON object.
        """
        try:
            data = json.loads(document)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning("Import rejected, document is not valid JSON: %s", e)
            return False
        if not isinstance(data, dict):
            logger.warning("Import rejected, expected a JSON object, got %s", type(data).__name__)
            return False

        imported = [bucket for bucket in BUCKETS if data.get(bucket) is not None]
        for bucket in imported:
            self._write(bucket, data[bucket])
        logger.info("Imported buckets: %s", ", ".join(imported) or "none")
        return True
