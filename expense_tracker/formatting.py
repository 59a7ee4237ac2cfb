"""Formatting utilities for currency and text display."""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[float, int]


def round_half_up(value: Number) -> int:
    """Round to a whole number, halves away from zero.

    Example:
        >>> round_half_up(12.5)
        13
        >>> round_half_up(-2.5)
        -3
    """
    return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def format_currency(amount: Number, symbol: str = "₹", max_decimals: int = 2) -> str:
    """Format a currency amount with thousands separators.

    Trailing zero decimals are dropped so whole amounts read cleanly.

    Args:
        amount: The amount to format
        symbol: Currency symbol to prefix
        max_decimals: Maximum number of decimal places to show

    Returns:
        Formatted currency string

    Example:
        >>> format_currency(1234.5)
        '₹1,234.5'
        >>> format_currency(1234.567, symbol='$')
        '$1,234.57'
        >>> format_currency(1200, symbol='$', max_decimals=0)
        '$1,200'
    """
    formatted = f"{amount:,.{max_decimals}f}"
    if max_decimals > 0:
        formatted = formatted.rstrip('0').rstrip('.')
    return f"{symbol}{formatted}"


def format_percentage(value: Number) -> str:
    """Format a percentage as a whole number, e.g. ``'42%'``."""
    return f"{round_half_up(value)}%"


def month_label(reference_date: date) -> str:
    """Return a display label such as ``'March 2024'``."""
    return reference_date.strftime('%B %Y')
