"""Application-wide logging configuration using rich handlers."""
from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

from rich.logging import RichHandler

from .system_utils import console


def setup_logging(level: int | str = logging.WARNING, log_file: str | None = None) -> None:
    """Configure standard logging with RichHandler and optional file output.

    Parameters
    ----------
    level:
        Minimum logging severity, as a number or a level name such as
        ``"DEBUG"``. Defaults to ``logging.WARNING`` so diagnostics stay out
        of the way of the kill report.
    log_file:
        Optional path to a log file. If provided, a ``RotatingFileHandler``
        will be attached writing plain text logs suitable for diagnostics.
        If ``None``, the environment variable ``AUTOKILL_LOG_FILE`` is
        consulted. When neither are provided no file logging is configured.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"unknown log level: {level}")
        level = resolved

    if log_file is None:
        log_file = os.getenv("AUTOKILL_LOG_FILE")

    # the report goes to stdout, diagnostics to stderr
    handlers: list[logging.Handler] = [
        RichHandler(console=console, rich_tracebacks=True, markup=False)
    ]

    if log_file:
        file_handler = RotatingFileHandler(log_file, maxBytes=5_000_000, backupCount=5)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        handlers=handlers,
        format="%(message)s",
        force=True,
    )


__all__ = ["setup_logging"]
