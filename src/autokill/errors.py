"""Exception types raised by autokill."""
from __future__ import annotations


class AutokillError(Exception):
    """Base class for all autokill failures."""


class UsageError(AutokillError):
    """Bad command line arguments."""


class PatternError(UsageError):
    """The title pattern is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"invalid pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class EnumerationError(AutokillError):
    """The operating system refused to enumerate windows."""

    def __init__(self, description: str) -> None:
        super().__init__(description)
        self.description = description


class TerminationError(AutokillError):
    """Forced termination of a process failed.

    ``description`` holds the human readable OS error text.
    """

    def __init__(self, description: str, code: int | None = None) -> None:
        super().__init__(description)
        self.description = description
        self.code = code


__all__ = [
    "AutokillError",
    "EnumerationError",
    "PatternError",
    "TerminationError",
    "UsageError",
]
