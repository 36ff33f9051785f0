from __future__ import annotations

"""Shared rich consoles."""

from rich.console import Console

# stdout carries the kill report, so every rich surface draws on stderr
console = Console(stderr=True)


def is_interactive() -> bool:
    """Return ``True`` when the diagnostic console is attached to a terminal."""

    return bool(console.is_terminal)


__all__ = ["console", "is_interactive"]
