from __future__ import annotations

from typing import Dict, List

import pytest

from autokill.errors import EnumerationError, TerminationError
from autokill.utils.kill_utils import ProcessHandle
from autokill.utils.window_utils import WindowBackend


class FakeProcessHandle(ProcessHandle):
    """Process handle that records terminate and release calls."""

    def __init__(self, pid: int, failure: str | None = None) -> None:
        super().__init__(pid)
        self.failure = failure
        self.terminated = 0
        self.releases = 0

    def _terminate(self, exit_code: int) -> None:
        self.terminated += 1
        if self.failure is not None:
            raise TerminationError(self.failure, 5)

    def _release(self) -> None:
        self.releases += 1


class FakeBackend(WindowBackend):
    """In-memory desktop: ``windows`` maps handle to title (``None`` = no title)."""

    name = "fake"

    def __init__(self, windows: Dict[int, str | None], **kwargs) -> None:
        super().__init__(**kwargs)
        self.windows = dict(windows)
        self.pids = {handle: 1000 + handle for handle in windows}
        self.unopenable: set[int] = set()
        self.kill_failures: Dict[int, str] = {}
        self.enumeration_error: str | None = None
        self.enumerated = 0
        self.opened: List[FakeProcessHandle] = []

    def enumerate_windows(self) -> List[int]:
        self.enumerated += 1
        if self.enumeration_error is not None:
            raise EnumerationError(self.enumeration_error)
        return list(self.windows)

    def get_title(self, handle: int) -> str | None:
        return self._truncate(self.windows.get(handle))

    def get_pid(self, handle: int) -> int | None:
        return self.pids.get(handle)

    def open_process(self, handle: int) -> ProcessHandle | None:
        if handle in self.unopenable:
            return None
        process = FakeProcessHandle(self.pids[handle], self.kill_failures.get(handle))
        self.opened.append(process)
        return process


class FakeClock:
    """Monotonic clock advanced only by ``sleep``."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend(
        {
            1: "Untitled - Notepad",
            2: "Calculator",
            3: None,
            4: "notepad",
            5: "Inbox - Mail",
        }
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    monkeypatch.setenv("AUTOKILL_HOME", str(tmp_path / "home"))
    monkeypatch.delenv("AUTOKILL_LOG_FILE", raising=False)
    return tmp_path / "home"
