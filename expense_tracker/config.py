"""Configuration management for the expense tracker.

This module centralizes all configuration values including paths,
defaults, and environment variable overrides.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

# Base project root - assumes this file is in expense_tracker/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directory holding one JSON file per store bucket
DATA_DIR = Path(os.getenv("EXPENSE_TRACKER_DATA_DIR", _PROJECT_ROOT / "data")).resolve()

LOG_LEVEL = os.getenv("EXPENSE_TRACKER_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Home screen shortcuts: one tap records an expense of this amount
QUICK_ADD_AMOUNTS = (1, 5, 50, 0.1)
QUICK_ADD_CATEGORY = "Other"


def ensure_data_directories(data_dir: Optional[Path] = None) -> Path:
    """Create the data directory if it doesn't exist."""
    directory = Path(data_dir) if data_dir is not None else DATA_DIR
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def get_data_dir() -> str:
    """Get the data directory as a string."""
    return str(DATA_DIR)


def configure_logging(level: Union[str, int, None] = None) -> None:
    """Configure root logging for scripts and the dashboard.

    Args:
        level: Logging level name or number. Defaults to ``LOG_LEVEL``.
    """
    resolved = level if level is not None else LOG_LEVEL
    if isinstance(resolved, str):
        resolved = logging.getLevelName(resolved.upper())
        if not isinstance(resolved, int):
            resolved = logging.INFO
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
