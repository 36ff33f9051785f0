"""Enumerate, capture, wait, terminate and report.

The run is strictly sequential:

1. every top-level window is enumerated and its title read;
2. titles matching the pattern are captured together with a
   termination-capable handle to the owning process;
3. the captured windows are announced and the delay elapses;
4. each captured process is killed and one outcome line is printed.

Windows whose title cannot be read or whose process cannot be opened are
skipped silently.  A failed kill is reported and the batch carries on.
"""
from __future__ import annotations

import logging
import sys
from contextlib import ExitStack
from dataclasses import dataclass
from typing import Iterable, List, TextIO

from .errors import TerminationError
from .matcher import TitleMatcher
from .scheduler import DelayScheduler
from .utils.kill_utils import ProcessHandle
from .utils.window_utils import WindowBackend

logger = logging.getLogger(__name__)


@dataclass
class CapturedWindow:
    """A matched window awaiting termination.

    ``process_handle`` is owned by this object and released by
    :func:`terminate_windows`.
    """

    title: str
    window_handle: int
    process_handle: ProcessHandle


@dataclass(frozen=True)
class Outcome:
    """Result of one termination attempt."""

    window: CapturedWindow
    killed: bool
    current_title: str | None = None
    error: str | None = None

    @property
    def title_changed(self) -> bool:
        return self.current_title is not None and self.current_title != self.window.title


def capture_windows(backend: WindowBackend, matcher: TitleMatcher) -> List[CapturedWindow]:
    """Return the windows whose title matches, in enumeration order.

    Raises :class:`~autokill.errors.EnumerationError` if enumeration fails, in
    which case nothing is kept.
    """

    captured: List[CapturedWindow] = []
    handles = backend.enumerate_windows()
    logger.debug("Enumerated %d windows with %s backend", len(handles), backend.name)
    try:
        for handle in handles:
            title = backend.get_title(handle)
            if not title:
                continue
            if not matcher.matches(title):
                continue
            process = backend.open_process(handle)
            if process is None:
                logger.debug("Skipping %r: owning process cannot be opened", title)
                continue
            captured.append(CapturedWindow(title, handle, process))
    except BaseException:
        release_all(captured)
        raise
    return captured


def release_all(windows: Iterable[CapturedWindow]) -> None:
    for window in windows:
        window.process_handle.close()


def format_intent(window: CapturedWindow, delay: int) -> str:
    line = f'killing "{window.title}"'
    if delay > 0:
        line += f" in {delay} seconds"
    return line


def format_outcome(outcome: Outcome) -> str:
    title = outcome.window.title
    if not outcome.killed:
        return f'cannot kill "{title}": {outcome.error}'
    if outcome.title_changed:
        return f'killed "{outcome.current_title}"(previously "{title}")'
    return f'killed "{title}"'


def announce(windows: Iterable[CapturedWindow], delay: int, out: TextIO) -> None:
    """Print one ``killing`` line per captured window."""

    for window in windows:
        print(format_intent(window, delay), file=out)
    out.flush()


def terminate_window(
    backend: WindowBackend, window: CapturedWindow, *, exit_code: int = 0
) -> Outcome:
    """Kill one captured window's process and release its handle."""

    try:
        current_title = backend.get_title(window.window_handle)
        try:
            window.process_handle.terminate(exit_code)
        except TerminationError as exc:
            logger.debug("Terminating pid %s failed: %s", window.process_handle.pid, exc)
            return Outcome(window, False, current_title, exc.description)
        return Outcome(window, True, current_title)
    finally:
        window.process_handle.close()


def terminate_windows(
    backend: WindowBackend,
    windows: Iterable[CapturedWindow],
    out: TextIO,
    *,
    exit_code: int = 0,
) -> List[Outcome]:
    """Terminate every window in order, printing one outcome line each."""

    outcomes: List[Outcome] = []
    for window in windows:
        outcome = terminate_window(backend, window, exit_code=exit_code)
        print(format_outcome(outcome), file=out)
        out.flush()
        outcomes.append(outcome)
    return outcomes


def run(
    backend: WindowBackend,
    matcher: TitleMatcher,
    delay: int = 0,
    *,
    out: TextIO | None = None,
    scheduler: DelayScheduler | None = None,
    show_progress: bool = False,
    exit_code: int = 0,
) -> List[Outcome]:
    """Execute the whole enumerate/capture/wait/terminate sequence."""

    out = out if out is not None else sys.stdout
    scheduler = scheduler if scheduler is not None else DelayScheduler(delay)
    with ExitStack() as stack:
        windows = capture_windows(backend, matcher)
        for window in windows:
            stack.callback(window.process_handle.close)
        if not windows:
            logger.info("No window title matches %r", matcher.pattern)
            return []
        announce(windows, delay, out)
        scheduler.start()
        scheduler.wait(show_progress=show_progress)
        return terminate_windows(backend, windows, out, exit_code=exit_code)


__all__ = [
    "CapturedWindow",
    "Outcome",
    "announce",
    "capture_windows",
    "format_intent",
    "format_outcome",
    "release_all",
    "run",
    "terminate_window",
    "terminate_windows",
]
