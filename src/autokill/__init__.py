"""Kill the processes owning windows whose title matches a pattern."""

__version__ = "1.0.0"

from .errors import (
    AutokillError,
    EnumerationError,
    PatternError,
    TerminationError,
    UsageError,
)
from .matcher import TitleMatcher
from .scheduler import DelayScheduler
from .session import CapturedWindow, Outcome, capture_windows, run, terminate_windows

__all__ = [
    "AutokillError",
    "CapturedWindow",
    "DelayScheduler",
    "EnumerationError",
    "Outcome",
    "PatternError",
    "TerminationError",
    "TitleMatcher",
    "UsageError",
    "capture_windows",
    "run",
    "terminate_windows",
]
