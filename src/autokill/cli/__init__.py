"""Command line helpers and entry points for autokill."""
from __future__ import annotations

from .app import build_parser, main, parse_delay

__all__ = ["build_parser", "main", "parse_delay"]
