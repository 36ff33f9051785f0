"""Configuration manager for autokill."""
from __future__ import annotations

import json
import logging
import shutil
from copy import deepcopy
from json import JSONDecodeError
from pathlib import Path
from typing import Any, Dict

from .defaults import DEFAULT_SETTINGS
from .paths import ConfigPaths

logger = logging.getLogger(__name__)


class Config:
    """Load the user configuration over the defaults."""

    def __init__(
        self,
        *,
        paths: ConfigPaths | None = None,
        defaults: Dict[str, Any] | None = None,
    ) -> None:
        self.paths = paths or ConfigPaths.create()
        self.defaults: Dict[str, Any] = deepcopy(defaults or DEFAULT_SETTINGS)
        self.config: Dict[str, Any] = self.defaults.copy()
        self.load_ok = self._load_config()

    @property
    def config_file(self) -> Path:
        """Return the primary configuration file path."""

        return self.paths.config_file

    def _load_config(self) -> bool:
        """Load configuration from disk, falling back to defaults."""

        path = self.paths.config_file
        if not path.exists():
            self.config = self.defaults.copy()
            return True
        try:
            with open(path, "r", encoding="utf-8") as handle:
                loaded_config = json.load(handle)
            if not isinstance(loaded_config, dict):
                raise JSONDecodeError("top level value must be an object", "", 0)
            self.config = {**self.defaults, **loaded_config}
            return True
        except JSONDecodeError as exc:
            logger.warning("Invalid config file, using defaults: %s", exc)
            backup = path.with_suffix(path.suffix + ".bak")
            try:
                shutil.move(path, backup)
            except OSError as backup_err:
                logger.warning("Failed to back up invalid config: %s", backup_err)
            self.config = self.defaults.copy()
            return False
        except OSError as exc:
            logger.error("Error reading config: %s", exc)
            self.config = self.defaults.copy()
            return False

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for *key* or ``default`` when unset."""

        return self.config.get(key, default)

    def get_int(self, key: str) -> int:
        """Return *key* as an integer, falling back to the default on bad data."""

        value = self.config.get(key)
        try:
            if isinstance(value, bool):
                raise TypeError(key)
            return int(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid %s=%r in config", key, value)
            return int(self.defaults[key])

    def get_bool(self, key: str) -> bool:
        """Return *key* as a boolean, falling back to the default on bad data."""

        value = self.config.get(key)
        if isinstance(value, bool):
            return value
        logger.warning("Ignoring invalid %s=%r in config", key, value)
        return bool(self.defaults[key])


__all__ = ["Config"]
