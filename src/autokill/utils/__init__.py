"""Platform helpers for window enumeration and process termination."""
from __future__ import annotations

from .kill_utils import ProcessHandle, describe_error, open_process
from .logging_config import setup_logging
from .window_utils import WindowBackend, get_backend

__all__ = [
    "ProcessHandle",
    "WindowBackend",
    "describe_error",
    "get_backend",
    "open_process",
    "setup_logging",
]
