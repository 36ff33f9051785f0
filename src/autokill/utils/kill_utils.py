from __future__ import annotations

"""Scoped process handles used to forcibly terminate window owners.

A :class:`ProcessHandle` is acquired while windows are captured and released
right after the termination attempt.  Both implementations make
:meth:`ProcessHandle.close` idempotent so the handle is released exactly once
even when several cleanup paths run.
"""

import ctypes
import logging
import os
import sys
from ctypes import wintypes
from typing import Any

import psutil

from ..errors import TerminationError

logger = logging.getLogger(__name__)

PROCESS_TERMINATE = 0x0001

_KERNEL32: Any | None = None


def _get_kernel32() -> Any | None:
    """Return ``kernel32`` with last-error tracking, or ``None`` off Windows."""

    global _KERNEL32
    if not sys.platform.startswith("win"):
        return None
    if _KERNEL32 is None:
        kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)  # type: ignore[attr-defined]
        kernel32.OpenProcess.argtypes = [wintypes.DWORD, wintypes.BOOL, wintypes.DWORD]
        kernel32.OpenProcess.restype = wintypes.HANDLE
        kernel32.TerminateProcess.argtypes = [wintypes.HANDLE, wintypes.UINT]
        kernel32.TerminateProcess.restype = wintypes.BOOL
        kernel32.CloseHandle.argtypes = [wintypes.HANDLE]
        kernel32.CloseHandle.restype = wintypes.BOOL
        _KERNEL32 = kernel32
    return _KERNEL32


def _last_error() -> int:
    getter = getattr(ctypes, "get_last_error", None)
    return int(getter()) if getter is not None else 0


def describe_error(code: int) -> str:
    """Return the system description for the OS error ``code``."""

    if not code:
        return ""
    formatter = getattr(ctypes, "FormatError", None)
    if formatter is not None:
        return str(formatter(code)).strip()
    return os.strerror(code)


class ProcessHandle:
    """Termination-capable reference to a running process."""

    def __init__(self, pid: int) -> None:
        self.pid = pid
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def terminate(self, exit_code: int = 0) -> None:
        """Forcibly terminate the process or raise :class:`TerminationError`."""

        if self._closed:
            raise TerminationError("process handle already released")
        self._terminate(exit_code)

    def close(self) -> None:
        """Release the handle; calling this again has no effect."""

        if self._closed:
            return
        self._closed = True
        self._release()

    def _terminate(self, exit_code: int) -> None:
        raise NotImplementedError

    def _release(self) -> None:
        raise NotImplementedError

    def __enter__(self) -> "ProcessHandle":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<{type(self).__name__} pid={self.pid} {state}>"


class Win32ProcessHandle(ProcessHandle):
    """Handle opened with ``PROCESS_TERMINATE`` access only."""

    def __init__(self, pid: int, handle: int, kernel32: Any) -> None:
        super().__init__(pid)
        self.handle = handle
        self._kernel32 = kernel32

    def _terminate(self, exit_code: int) -> None:
        if not self._kernel32.TerminateProcess(self.handle, exit_code):
            code = _last_error()
            raise TerminationError(describe_error(code), code)
        logger.debug("TerminateProcess succeeded for pid %s", self.pid)

    def _release(self) -> None:
        if not self._kernel32.CloseHandle(self.handle):
            logger.warning("CloseHandle failed for pid %s: %s", self.pid, describe_error(_last_error()))


class PsutilProcessHandle(ProcessHandle):
    """Handle backed by :class:`psutil.Process`, killed with ``SIGKILL``."""

    def __init__(self, process: psutil.Process) -> None:
        super().__init__(process.pid)
        self._process: psutil.Process | None = process

    def _terminate(self, exit_code: int) -> None:
        assert self._process is not None
        try:
            # psutil refuses to signal a pid that was reused since acquisition
            self._process.kill()
        except psutil.NoSuchProcess:
            raise TerminationError("the process no longer exists") from None
        except psutil.AccessDenied:
            raise TerminationError("access is denied") from None
        except (psutil.Error, OSError) as exc:
            raise TerminationError(str(exc) or type(exc).__name__) from exc
        logger.debug("SIGKILL delivered to pid %s", self.pid)

    def _release(self) -> None:
        self._process = None


def open_process(pid: int | None) -> ProcessHandle | None:
    """Acquire a termination-capable handle for ``pid``.

    Returns ``None`` when the process is gone or cannot be opened.
    """

    if not pid:
        return None
    kernel32 = _get_kernel32()
    if kernel32 is not None:
        handle = kernel32.OpenProcess(PROCESS_TERMINATE, False, pid)
        if not handle:
            logger.debug("OpenProcess(%s) failed: %s", pid, describe_error(_last_error()))
            return None
        return Win32ProcessHandle(pid, int(handle), kernel32)
    try:
        return PsutilProcessHandle(psutil.Process(pid))
    except psutil.Error as exc:
        logger.debug("Cannot open pid %s: %s", pid, exc)
        return None


__all__ = [
    "PROCESS_TERMINATE",
    "ProcessHandle",
    "PsutilProcessHandle",
    "Win32ProcessHandle",
    "describe_error",
    "open_process",
]
