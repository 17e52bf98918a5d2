"""Watch backend capability negotiation.

The native backend uses the platform's push notifications (inotify,
FSEvents, kqueue, ReadDirectoryChangesW) through watchfiles. When it cannot
be used the watcher polls instead. The probe reports which one applies as a
value; callers never see the native backend's failure as an exception.
"""

from __future__ import annotations

import os
import sys
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from watchfiles import watch

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

_NATIVE_PLATFORMS = ("linux", "darwin", "win32", "freebsd", "openbsd", "netbsd")

_FORCE_POLLING_ENV = "WATCHFILES_FORCE_POLLING"


@dataclass(frozen=True, slots=True)
class Available:
    """The native backend can watch the requested directories."""

    backend: Literal["native"] = "native"


@dataclass(frozen=True, slots=True)
class Unavailable:
    """The native backend cannot be used.

    Attributes:
        reason: Human-readable explanation, for diagnostics only.
    """

    reason: str


ProbeResult = Available | Unavailable


def _env_forces_polling() -> bool:
    value = os.environ.get(_FORCE_POLLING_ENV)
    return value is not None and value.lower() not in ("", "0", "false", "disable")


def _try_native_setup(directories: Sequence[Path]) -> ProbeResult:
    # A pre-set stop event makes watch() register every directory with the
    # OS and return without waiting for changes.
    stop = threading.Event()
    stop.set()
    try:
        for _ in watch(
            *directories,
            stop_event=stop,
            force_polling=False,
            raise_interrupt=False,
        ):
            break
    except (OSError, RuntimeError) as e:
        return Unavailable(reason=f"native setup failed: {e}")
    return Available()


def probe_backend(
    directories: Sequence[Path],
    *,
    force_polling: bool = False,
) -> ProbeResult:
    """Decide whether the native watch backend can be used.

    Args:
        directories: Directories that will be watched.
        force_polling: Skip the native backend unconditionally.

    Returns:
        Available when native notification was set up successfully,
        otherwise Unavailable with the reason.
    """
    if force_polling:
        return Unavailable(reason="polling forced by configuration")
    if _env_forces_polling():
        return Unavailable(reason=f"polling forced by {_FORCE_POLLING_ENV}")
    if not sys.platform.startswith(_NATIVE_PLATFORMS):
        return Unavailable(reason=f"no native backend on {sys.platform}")
    return _try_native_setup(directories)
