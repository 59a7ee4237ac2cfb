"""Record shapes for the expense tracker.

Expenses, categories, budgets and settings are plain frozen dataclasses.
Each converts to and from the dictionaries stored in the JSON buckets via
``to_dict`` / ``from_dict``, using the exchange field names (``createdAt``,
``currencySymbol`` and so on).

Expenses and budgets reference categories by *name*, not by id.  Nothing
enforces that a referenced name exists; :func:`lookup_category` resolves a
name and falls back to a neutral display category on a miss.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple, Union

import pandas as pd

UNKNOWN_CATEGORY_ICON = "📦"
UNKNOWN_CATEGORY_COLOR = "hsl(0, 0%, 50%)"


class BudgetPeriod(str, Enum):
    MONTHLY = "monthly"
    WEEKLY = "weekly"


class BudgetState(str, Enum):
    """Severity of a budget's spend, lowest to highest."""

    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"
    EXCEEDED = "exceeded"


@dataclass(frozen=True)
class Overall:
    """Budget scope covering total spend across all categories."""

    @property
    def label(self) -> str:
        return "Overall"


@dataclass(frozen=True)
class ForCategory:
    """Budget scope covering a single category, matched by exact name."""

    name: str

    @property
    def label(self) -> str:
        return self.name


BudgetScope = Union[Overall, ForCategory]
OVERALL = Overall()


def scope_from_value(value: Optional[str]) -> BudgetScope:
    """Build a scope from its stored form (``None`` means overall)."""
    if value is None:
        return OVERALL
    return ForCategory(str(value))


def scope_to_value(scope: BudgetScope) -> Optional[str]:
    if isinstance(scope, ForCategory):
        return scope.name
    if isinstance(scope, Overall):
        return None
    raise TypeError(f"Expected Overall or ForCategory scope, got {type(scope).__name__}")


def parse_day(value: Union[str, date, datetime]) -> date:
    """Parse a calendar day from ``YYYY-MM-DD`` text or a date/datetime."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return pd.to_datetime(str(value)).date()


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return pd.Timestamp(value).to_pydatetime()


@dataclass(frozen=True)
class Expense:
    id: str
    amount: float
    category: str
    date: date
    created_at: Optional[datetime] = None
    note: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'id': self.id,
            'amount': self.amount,
            'category': self.category,
            'date': self.date.isoformat(),
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }
        if self.note is not None:
            data['note'] = self.note
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Expense':
        """Build an expense from a stored record.

        Raises:
            KeyError: If ``id``, ``amount``, ``category`` or ``date`` is missing
            ValueError: If the amount or a date cannot be parsed
            TypeError: If ``data`` is not a mapping
        """
        return cls(
            id=str(data['id']),
            amount=float(data['amount']),
            category=str(data['category']),
            date=parse_day(data['date']),
            created_at=_parse_timestamp(data.get('createdAt')),
            note=data.get('note'),
        )


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    icon: str = UNKNOWN_CATEGORY_ICON
    color: str = UNKNOWN_CATEGORY_COLOR

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'icon': self.icon, 'color': self.color}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Category':
        return cls(
            id=str(data['id']),
            name=str(data['name']),
            icon=data.get('icon') or UNKNOWN_CATEGORY_ICON,
            color=data.get('color') or UNKNOWN_CATEGORY_COLOR,
        )


@dataclass(frozen=True)
class Budget:
    id: str
    scope: BudgetScope
    amount: float
    period: BudgetPeriod = BudgetPeriod.MONTHLY

    @property
    def is_overall(self) -> bool:
        return isinstance(self.scope, Overall)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'category': scope_to_value(self.scope),
            'amount': self.amount,
            'period': self.period.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Budget':
        return cls(
            id=str(data['id']),
            scope=scope_from_value(data.get('category')),
            amount=float(data['amount']),
            period=BudgetPeriod(data.get('period', BudgetPeriod.MONTHLY.value)),
        )


@dataclass(frozen=True)
class Settings:
    """Display and locale preferences.  Analytics never reads these."""

    currency: str = "INR"
    currency_symbol: str = "₹"
    theme: str = "dark"
    daily_reminder: bool = True
    budget_alerts: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'currency': self.currency,
            'currencySymbol': self.currency_symbol,
            'theme': self.theme,
            'dailyReminder': self.daily_reminder,
            'budgetAlerts': self.budget_alerts,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Settings':
        """Merge stored values over the defaults; unknown keys are ignored."""
        defaults = cls()
        return cls(
            currency=data.get('currency', defaults.currency),
            currency_symbol=data.get('currencySymbol', defaults.currency_symbol),
            theme=data.get('theme', defaults.theme),
            daily_reminder=bool(data.get('dailyReminder', defaults.daily_reminder)),
            budget_alerts=bool(data.get('budgetAlerts', defaults.budget_alerts)),
        )


# Analytics results

@dataclass(frozen=True)
class DailySpend:
    day: int
    amount: float


@dataclass(frozen=True)
class MonthComparison:
    current: float
    previous: float
    change_percent: float


@dataclass(frozen=True)
class CategoryShare:
    category: str
    amount: float
    percentage: float


@dataclass(frozen=True)
class BudgetStatus:
    budget_id: str
    scope: BudgetScope
    budget: float
    spent: float
    percentage: float
    state: BudgetState

    @property
    def remaining(self) -> float:
        return self.budget - self.spent


@dataclass(frozen=True)
class SpendingSpike:
    date: date
    amount: float
    average: float


@dataclass(frozen=True)
class Currency:
    code: str
    symbol: str
    name: str


DEFAULT_CATEGORIES: Tuple[Category, ...] = (
    Category("1", "Food", "🍔", "hsl(24, 100%, 50%)"),
    Category("2", "Transport", "🚕", "hsl(210, 100%, 50%)"),
    Category("3", "Shopping", "🛍", "hsl(330, 100%, 50%)"),
    Category("4", "Bills", "💡", "hsl(45, 100%, 50%)"),
    Category("5", "Entertainment", "🎮", "hsl(270, 100%, 50%)"),
    Category("6", "Health", "🏥", "hsl(150, 100%, 40%)"),
    Category("7", "Other", "📦", "hsl(0, 0%, 50%)"),
)

DEFAULT_SETTINGS = Settings()

CURRENCIES: Tuple[Currency, ...] = (
    Currency("INR", "₹", "Indian Rupee"),
    Currency("USD", "$", "US Dollar"),
    Currency("EUR", "€", "Euro"),
    Currency("GBP", "£", "British Pound"),
    Currency("JPY", "¥", "Japanese Yen"),
)


def find_currency(code: str) -> Optional[Currency]:
    for currency in CURRENCIES:
        if currency.code == code:
            return currency
    return None


def lookup_category(categories: Iterable[Category], name: str) -> Category:
    """Resolve a category by exact name.

    Expenses keep their category name after the category itself is deleted,
    so a miss is expected and returns a display-only placeholder carrying the
    requested name instead of raising.
    """
    for category in categories:
        if category.name == name:
            return category
    return Category(id="", name=name, icon=UNKNOWN_CATEGORY_ICON, color=UNKNOWN_CATEGORY_COLOR)


@dataclass(frozen=True)
class StoreSnapshot:
    """All four collections read from the store at one point in time."""

    expenses: Tuple[Expense, ...] = ()
    categories: Tuple[Category, ...] = DEFAULT_CATEGORIES
    budgets: Tuple[Budget, ...] = ()
    settings: Settings = field(default_factory=Settings)
