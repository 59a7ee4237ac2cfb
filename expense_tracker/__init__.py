"""Top‑level package for the Expense Tracker.

This file makes the directory a Python package and exposes
convenient names.  The primary modules are:

* ``analytics`` – pure functions turning expenses and budgets into totals,
  comparisons, budget status, spikes and insights
* ``storage`` – the local JSON store for expenses, categories, budgets and settings
* ``visualization`` – functions that generate Plotly figures
* ``dashboard`` – a Streamlit app that ties everything together

To run the dashboard from the command line you can execute:

```bash
streamlit run expense_tracker/dashboard.py
```
"""

from . import analytics  # noqa: F401  # re-exported for convenience
from . import storage  # noqa: F401  # re-exported for convenience
from . import visualization  # noqa: F401  # re-exported for convenience
from .analytics import SpendingAnalytics  # noqa: F401
from .storage import ExpenseStore  # noqa: F401

# Import dashboard lazily.  Streamlit may not be installed in all
# environments (e.g. during unit testing).
try:
    from . import dashboard  # type: ignore  # noqa: F401
except ModuleNotFoundError:
    dashboard = None  # type: ignore


__all__ = ["analytics", "storage", "visualization", "dashboard", "SpendingAnalytics", "ExpenseStore"]
