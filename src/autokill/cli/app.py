"""Command line entry point: ``autokill <title-pattern> [delay-seconds]``."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import NoReturn, Sequence, TextIO

from .. import __version__
from ..config import Config
from ..errors import EnumerationError, PatternError, UsageError
from ..matcher import TitleMatcher
from ..session import run
from ..utils.logging_config import setup_logging
from ..utils.system_utils import is_interactive
from ..utils.window_utils import DEFAULT_TITLE_MAX_LENGTH, WindowBackend, get_backend

logger = logging.getLogger(__name__)

DESCRIPTION = (
    "Automatically kill all windows matching title after a delay, if provided. "
    "Title may be a regular expression."
)
EPILOG = "Patterns starting with '-' go after '--': autokill -- -x 5"


class _Parser(argparse.ArgumentParser):
    """Argument parser that reports errors as :class:`UsageError`."""

    def error(self, message: str) -> NoReturn:
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(prog="autokill", description=DESCRIPTION, epilog=EPILOG)
    parser.add_argument("title", help="Regular expression searched in window titles")
    parser.add_argument(
        "delay",
        nargs="?",
        default="0",
        help="Seconds to wait before killing (default: 0)",
    )
    parser.add_argument(
        "--ignore-case", "-i", action="store_true",
        help="Match titles case-insensitively",
    )
    parser.add_argument(
        "--no-countdown", action="store_true",
        help="Do not draw a countdown while waiting",
    )
    parser.add_argument(
        "--log-level", default=None,
        help="Diagnostic log level written to stderr (default: WARNING)",
    )
    parser.add_argument(
        "--log-file", default=None,
        help="Also write diagnostics to this rotating log file",
    )
    parser.add_argument(
        "--version", "-V", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def parse_delay(value: str | None) -> int:
    """Return ``value`` as a non-negative number of seconds."""

    if value is None:
        return 0
    if not (value.isascii() and value.isdigit()):
        raise UsageError(
            f"delay must be a non-negative whole number of seconds, got {value!r}"
        )
    return int(value)


def _title_max_length(config: Config) -> int:
    length = config.get_int("title_max_length")
    if length <= 0:
        logger.warning("Ignoring non-positive title_max_length=%s", length)
        return DEFAULT_TITLE_MAX_LENGTH
    return length


def main(
    argv: Sequence[str] | None = None,
    *,
    backend: WindowBackend | None = None,
    config: Config | None = None,
    out: TextIO | None = None,
) -> int:
    """Run autokill and return the process exit status."""

    out = out if out is not None else sys.stdout
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
        delay = parse_delay(args.delay)
    except UsageError as exc:
        print(parser.format_help().rstrip(), file=out)
        print(f"error: {exc}", file=out)
        return 1

    config = config if config is not None else Config()
    try:
        setup_logging(
            args.log_level or config.get("log_level") or logging.WARNING,
            args.log_file or config.get("log_file"),
        )
    except (ValueError, OSError) as exc:
        print(f"error: {exc}", file=out)
        return 1

    try:
        matcher = TitleMatcher.compile(
            args.title, ignore_case=args.ignore_case or config.get_bool("ignore_case")
        )
    except PatternError as exc:
        print(f"invalid pattern: {exc.reason}", file=out)
        return 1

    show_progress = (
        not args.no_countdown and config.get_bool("show_countdown") and is_interactive()
    )
    try:
        if backend is None:
            backend = get_backend(title_max_length=_title_max_length(config))
        run(
            backend,
            matcher,
            delay,
            out=out,
            show_progress=show_progress,
            exit_code=config.get_int("exit_code"),
        )
    except EnumerationError as exc:
        print(f"enumeration failed: {exc.description}", file=out)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130
    return 0


__all__ = ["DESCRIPTION", "EPILOG", "build_parser", "main", "parse_delay"]
