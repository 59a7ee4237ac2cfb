#!/usr/bin/env python3
"""Export the local store to a JSON file, or import one back."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from expense_tracker import config
from expense_tracker.storage import ExpenseStore


def export_to(path: Path, data_dir: Optional[Path] = None) -> int:
    store = ExpenseStore(data_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(store.export_data(), encoding='utf-8')
    print(f"Exported data to {path}")
    return 0


def import_from(path: Path, data_dir: Optional[Path] = None) -> int:
    if not path.exists():
        print(f"Backup file not found: {path}")
        return 1
    store = ExpenseStore(data_dir)
    if not store.import_data(path.read_text(encoding='utf-8')):
        print(f"Import failed: {path} is not a valid export")
        return 1
    print(f"Imported data from {path}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description='Back up or restore expense tracker data.')
    parser.add_argument('action', choices=['export', 'import'])
    parser.add_argument('path', type=Path, help='Backup JSON file')
    parser.add_argument('--data-dir', type=Path, default=None, help='Store directory (defaults to EXPENSE_TRACKER_DATA_DIR)')
    args = parser.parse_args()

    config.configure_logging()
    if args.action == 'export':
        return export_to(args.path, args.data_dir)
    return import_from(args.path, args.data_dir)


if __name__ == "__main__":
    raise SystemExit(main())
