#!/usr/bin/env python3
"""Direct launcher for the Expense Tracker dashboard.

This script launches Streamlit on ``expense_tracker/dashboard.py`` with the
project root on the import path.
"""

import sys
import subprocess
import os
from pathlib import Path

# Get the project root and the dashboard script
project_root = Path(__file__).parent.resolve()
dashboard_script = project_root / "expense_tracker" / "dashboard.py"

if __name__ == "__main__":
    # Make the package importable from the Streamlit subprocess
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(project_root), env.get("PYTHONPATH")]))
    subprocess.run([
        sys.executable, "-m", "streamlit", "run",
        str(dashboard_script)
    ], env=env)
