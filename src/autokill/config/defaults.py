"""Default settings applied before the user configuration file."""
from __future__ import annotations

from typing import Any, Dict

DEFAULT_SETTINGS: Dict[str, Any] = {
    "title_max_length": 255,
    "ignore_case": False,
    "show_countdown": True,
    "log_level": "WARNING",
    "log_file": None,
    "exit_code": 0,
}

__all__ = ["DEFAULT_SETTINGS"]
