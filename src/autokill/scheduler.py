"""Single monotonic deadline between the announcement and the kills."""
from __future__ import annotations

import logging
import time
from typing import Callable

from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeRemainingColumn

from .utils.system_utils import console

logger = logging.getLogger(__name__)


class DelayScheduler:
    """Block until ``delay`` seconds after :meth:`start` was called.

    The deadline is measured on a monotonic clock so adjusting the wall clock
    during the wait neither shortens nor extends it.
    """

    def __init__(
        self,
        delay: float = 0,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if delay < 0:
            raise ValueError("delay must not be negative")
        self.delay = delay
        self._clock = clock
        self._sleep = sleep
        self.deadline: float | None = None

    def start(self) -> float:
        """Fix the absolute deadline; later calls keep the first one."""

        if self.deadline is None:
            self.deadline = self._clock() + self.delay
        return self.deadline

    def remaining(self) -> float:
        if self.deadline is None:
            return float(self.delay)
        return max(0.0, self.deadline - self._clock())

    def wait(self, *, show_progress: bool = False) -> None:
        """Sleep until the deadline, starting it first if needed."""

        self.start()
        if self.delay <= 0:
            return
        logger.debug("Waiting %.1fs before terminating", self.remaining())
        if show_progress:
            self._wait_with_progress()
        else:
            while (left := self.remaining()) > 0:
                self._sleep(left)

    def _wait_with_progress(self) -> None:
        with Progress(
            SpinnerColumn(style="bold red"),
            TextColumn("Killing in"),
            BarColumn(bar_width=None),
            TimeRemainingColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("delay", total=self.delay)
            while (left := self.remaining()) > 0:
                progress.update(task, completed=self.delay - left)
                self._sleep(min(left, 0.1))


__all__ = ["DelayScheduler"]
