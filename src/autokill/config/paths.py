"""Filesystem helpers for configuration storage."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ConfigPaths:
    """Resolved filesystem locations for configuration data."""

    root: Path
    config_file: Path

    @classmethod
    def create(cls, root: Path | None = None) -> "ConfigPaths":
        """Return paths rooted at *root*, ``$AUTOKILL_HOME`` or ``~/.autokill``."""

        if root is None:
            env_root = os.getenv("AUTOKILL_HOME")
            root = Path(env_root) if env_root else Path.home() / ".autokill"
        base = Path(root).expanduser().resolve()
        return cls(root=base, config_file=base / "config.json")


__all__ = ["ConfigPaths"]
