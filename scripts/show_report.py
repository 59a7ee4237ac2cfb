#!/usr/bin/env python3
"""Print the monthly spending report and insights for the local store."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from expense_tracker import config
from expense_tracker.analytics import SpendingAnalytics, resolve_reference_date
from expense_tracker.formatting import format_currency, format_percentage, month_label
from expense_tracker.storage import ExpenseStore


def print_report(data_dir: Optional[Path] = None, on: Optional[str] = None) -> int:
    store = ExpenseStore(data_dir)
    snapshot = store.snapshot()
    ref = resolve_reference_date(on)
    symbol = snapshot.settings.currency_symbol
    analytics = SpendingAnalytics(snapshot.expenses)
    summary = analytics.monthly_summary(snapshot.budgets, ref)

    print(f"{month_label(ref)} (as of {ref.isoformat()})")
    print(f"  Spent this month: {format_currency(summary['monthly_total'], symbol)}")
    print(f"  Spent this week:  {format_currency(summary['weekly_total'], symbol)}")
    print(f"  Daily average:    {format_currency(summary['daily_average'], symbol)}")
    print(f"  Projected:        {format_currency(summary['projection'], symbol)}")
    comparison = summary['comparison']
    print(f"  Last month:       {format_currency(comparison.previous, symbol)}"
          f" ({format_percentage(comparison.change_percent)} change)")

    breakdown = analytics.category_breakdown(ref)
    if breakdown:
        print("\nBy category:")
        for share in breakdown:
            print(f"  {share.category:<15} {format_currency(share.amount, symbol):>12}  {format_percentage(share.percentage)}")

    statuses = summary['budget_status']
    if statuses:
        print("\nBudgets:")
        for status in statuses:
            print(f"  {status.scope.label:<15} {format_currency(status.spent, symbol)} / "
                  f"{format_currency(status.budget, symbol)}  {status.state.value}")

    insights = analytics.generate_insights(snapshot.budgets, ref, symbol)
    if insights:
        print("\nInsights:")
        for insight in insights:
            print(f"  - {insight}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description='Show the monthly spending report.')
    parser.add_argument('--data-dir', type=Path, default=None, help='Store directory (defaults to EXPENSE_TRACKER_DATA_DIR)')
    parser.add_argument('--date', dest='on', default=None, help='Reference date as YYYY-MM-DD (defaults to today)')
    parser.add_argument('--log-level', default=None, help='Logging level, e.g. DEBUG')
    args = parser.parse_args()

    config.configure_logging(args.log_level)
    return print_report(data_dir=args.data_dir, on=args.on)


if __name__ == "__main__":
    raise SystemExit(main())
