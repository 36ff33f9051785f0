"""Regular expression matching of window titles."""
from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import PatternError


@dataclass(frozen=True)
class TitleMatcher:
    """A compiled title pattern applied with an unanchored search."""

    regex: re.Pattern[str]

    @classmethod
    def compile(cls, pattern: str, *, ignore_case: bool = False) -> "TitleMatcher":
        """Compile *pattern* once, raising :class:`PatternError` if it is invalid."""

        flags = re.IGNORECASE if ignore_case else 0
        try:
            return cls(re.compile(pattern, flags))
        except re.error as exc:
            raise PatternError(pattern, str(exc)) from exc

    @property
    def pattern(self) -> str:
        return self.regex.pattern

    def matches(self, title: str) -> bool:
        return self.regex.search(title) is not None


__all__ = ["TitleMatcher"]
