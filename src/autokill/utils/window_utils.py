"""Backends for enumerating desktop windows and reading their titles.

Every backend exposes the same three queries: the list of top-level window
handles, the current title of a window and a termination-capable handle to
the process that owns it.  Callback based APIs such as ``EnumWindows`` are
collected into a plain list so callers never see the callback.
"""
from __future__ import annotations

import ctypes
import logging
import re
import shutil
import subprocess
import sys
from ctypes import wintypes
from typing import Any, Callable, List

from ..errors import EnumerationError
from .kill_utils import ProcessHandle, _last_error, describe_error, open_process

logger = logging.getLogger(__name__)

DEFAULT_TITLE_MAX_LENGTH = 255


class WindowBackend:
    """Platform neutral window queries."""

    name = "generic"

    def __init__(self, *, title_max_length: int = DEFAULT_TITLE_MAX_LENGTH) -> None:
        if title_max_length <= 0:
            raise ValueError("title_max_length must be positive")
        self.title_max_length = title_max_length

    def enumerate_windows(self) -> List[int]:
        """Return handles of all top-level windows in OS order.

        Raises :class:`EnumerationError` when the OS call itself fails.
        """

        raise NotImplementedError

    def get_title(self, handle: int) -> str | None:
        """Return the title of ``handle`` or ``None`` when it has none."""

        raise NotImplementedError

    def get_pid(self, handle: int) -> int | None:
        raise NotImplementedError

    def open_process(self, handle: int) -> ProcessHandle | None:
        """Return a termination-capable handle to the owner of ``handle``."""

        return open_process(self.get_pid(handle))

    def _truncate(self, title: str | None) -> str | None:
        if not title:
            return None
        return title[: self.title_max_length]


class Win32WindowBackend(WindowBackend):
    """``user32`` based enumeration through :mod:`ctypes`."""

    name = "win32"

    def __init__(
        self,
        *,
        title_max_length: int = DEFAULT_TITLE_MAX_LENGTH,
        user32: Any | None = None,
        enum_proc_type: Callable[..., Any] | None = None,
    ) -> None:
        super().__init__(title_max_length=title_max_length)
        if user32 is None or enum_proc_type is None:
            default_user32, default_proc = _load_user32()
            user32 = user32 if user32 is not None else default_user32
            enum_proc_type = enum_proc_type if enum_proc_type is not None else default_proc
        self._user32 = user32
        self._enum_proc_type = enum_proc_type

    def enumerate_windows(self) -> List[int]:
        handles: List[int] = []

        def _collect(hwnd: Any, _lparam: Any) -> bool:
            if hwnd:
                handles.append(int(hwnd))
            return True

        callback = self._enum_proc_type(_collect)
        if not self._user32.EnumWindows(callback, 0):
            code = _last_error()
            raise EnumerationError(describe_error(code) or "EnumWindows failed")
        return handles

    def get_title(self, handle: int) -> str | None:
        size = self.title_max_length + 1
        buf = ctypes.create_unicode_buffer(size)
        length = self._user32.GetWindowTextW(handle, buf, size)
        if not length:
            return None
        return self._truncate(buf.value[:length])

    def get_pid(self, handle: int) -> int | None:
        pid = wintypes.DWORD()
        self._user32.GetWindowThreadProcessId(handle, ctypes.byref(pid))
        return int(pid.value) or None


def _load_user32() -> tuple[Any, Callable[..., Any]]:
    """Return ``user32`` with typed signatures and the ``WNDENUMPROC`` type."""

    if not sys.platform.startswith("win"):
        raise EnumerationError("user32 is only available on Windows")
    user32 = ctypes.WinDLL("user32", use_last_error=True)  # type: ignore[attr-defined]
    enum_proc = ctypes.WINFUNCTYPE(wintypes.BOOL, wintypes.HWND, wintypes.LPARAM)  # type: ignore[attr-defined]
    user32.EnumWindows.argtypes = [enum_proc, wintypes.LPARAM]
    user32.EnumWindows.restype = wintypes.BOOL
    user32.GetWindowTextW.argtypes = [wintypes.HWND, wintypes.LPWSTR, ctypes.c_int]
    user32.GetWindowTextW.restype = ctypes.c_int
    user32.GetWindowThreadProcessId.argtypes = [wintypes.HWND, ctypes.POINTER(wintypes.DWORD)]
    user32.GetWindowThreadProcessId.restype = wintypes.DWORD
    return user32, enum_proc


_XPROP_VALUE = re.compile(r'^(?P<name>\w+)\([^)]*\) = "(?P<value>.*)"$')
_XPROP_PID = re.compile(r"= (\d+)")


def _unescape_xprop(value: str) -> str:
    return re.sub(r"\\(.)", r"\1", value)


class X11WindowBackend(WindowBackend):
    """EWMH window list queried through the ``xprop`` utility."""

    name = "x11"
    CLIENT_LIST = "_NET_CLIENT_LIST_STACKING"

    def __init__(
        self,
        *,
        title_max_length: int = DEFAULT_TITLE_MAX_LENGTH,
        xprop: str | None = None,
    ) -> None:
        super().__init__(title_max_length=title_max_length)
        self._xprop = xprop or shutil.which("xprop")

    def _query(self, *args: str) -> str:
        if not self._xprop:
            raise FileNotFoundError("xprop")
        return subprocess.check_output(
            [self._xprop, *args], text=True, stderr=subprocess.PIPE
        )

    def enumerate_windows(self) -> List[int]:
        try:
            out = self._query("-root", self.CLIENT_LIST)
        except FileNotFoundError:
            raise EnumerationError("xprop not found; install x11-utils") from None
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip() or f"xprop exited with status {exc.returncode}"
            raise EnumerationError(detail) from exc
        except OSError as exc:
            raise EnumerationError(str(exc)) from exc
        if "#" not in out:
            raise EnumerationError(
                f"window manager does not publish {self.CLIENT_LIST}"
            )
        ids = [w.strip() for w in out.split("#", 1)[1].split(",")]
        return [int(w, 0) for w in ids if w]

    def get_title(self, handle: int) -> str | None:
        try:
            out = self._query("-id", hex(handle), "_NET_WM_NAME", "WM_NAME")
        except (OSError, subprocess.CalledProcessError):
            return None
        for line in out.splitlines():
            match = _XPROP_VALUE.match(line.strip())
            if match and match.group("value"):
                return self._truncate(_unescape_xprop(match.group("value")))
        return None

    def get_pid(self, handle: int) -> int | None:
        try:
            out = self._query("-id", hex(handle), "_NET_WM_PID")
        except (OSError, subprocess.CalledProcessError):
            return None
        match = _XPROP_PID.search(out)
        return int(match.group(1)) if match else None


class QuartzWindowBackend(WindowBackend):
    """macOS window list from ``CGWindowListCopyWindowInfo``.

    Titles of other applications are only visible once the terminal has been
    granted screen recording permission; without it every title reads as
    ``None`` and the window is skipped.
    """

    name = "quartz"

    def __init__(
        self,
        *,
        title_max_length: int = DEFAULT_TITLE_MAX_LENGTH,
        quartz: Any | None = None,
    ) -> None:
        super().__init__(title_max_length=title_max_length)
        if quartz is None:
            try:
                import Quartz as quartz  # type: ignore[import-not-found]
            except ImportError as exc:
                raise EnumerationError(
                    "Quartz not available. Install with: pip install pyobjc-framework-Quartz"
                ) from exc
        self._quartz = quartz

    def _describe(self, handle: int) -> dict[str, Any] | None:
        q = self._quartz
        info = q.CGWindowListCopyWindowInfo(q.kCGWindowListOptionIncludingWindow, handle)
        if not info:
            return None
        return info[0]

    def enumerate_windows(self) -> List[int]:
        q = self._quartz
        info = q.CGWindowListCopyWindowInfo(
            q.kCGWindowListOptionAll | q.kCGWindowListExcludeDesktopElements,
            q.kCGNullWindowID,
        )
        if info is None:
            raise EnumerationError("CGWindowListCopyWindowInfo returned no window list")
        return [
            int(entry["kCGWindowNumber"])
            for entry in info
            if entry.get("kCGWindowLayer", 0) == 0
        ]

    def get_title(self, handle: int) -> str | None:
        entry = self._describe(handle)
        if entry is None:
            return None
        return self._truncate(entry.get("kCGWindowName"))

    def get_pid(self, handle: int) -> int | None:
        entry = self._describe(handle)
        if entry is None:
            return None
        pid = entry.get("kCGWindowOwnerPID")
        return int(pid) if pid else None


def get_backend(*, title_max_length: int = DEFAULT_TITLE_MAX_LENGTH) -> WindowBackend:
    """Return the window backend for the running platform."""

    if sys.platform.startswith("win"):
        return Win32WindowBackend(title_max_length=title_max_length)
    if sys.platform == "darwin":
        return QuartzWindowBackend(title_max_length=title_max_length)
    return X11WindowBackend(title_max_length=title_max_length)


__all__ = [
    "DEFAULT_TITLE_MAX_LENGTH",
    "QuartzWindowBackend",
    "Win32WindowBackend",
    "WindowBackend",
    "X11WindowBackend",
    "get_backend",
]
