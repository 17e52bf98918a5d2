"""Directory watcher built on watchfiles.

The watcher negotiates a backend with ``probe_backend`` and then streams
normalized ``ChangeEvent`` values. Events are not filtered here; deciding
what a change means is the router's job.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, final

import anyio.to_thread
from watchfiles import Change, awatch

from respawn.utils import create_null_logger, get_timestamp

from ._backend import Available, Unavailable, probe_backend
from ._models import ChangeEvent, ChangeKind

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence
    from pathlib import Path

    from structlog.typing import FilteringBoundLogger

_CHANGE_KINDS: dict[Change, ChangeKind] = {
    Change.added: ChangeKind.CREATED,
    Change.modified: ChangeKind.MODIFIED,
    Change.deleted: ChangeKind.DELETED,
}


def to_change_event(raw: object, timestamp: str) -> ChangeEvent | None:
    """Convert a raw watchfiles entry into a ChangeEvent.

    Args:
        raw: A ``(Change, path)`` pair as yielded by watchfiles.
        timestamp: ISO 8601 timestamp to attach.

    Returns:
        The event, or None if ``raw`` does not have the expected shape.
    """
    if not isinstance(raw, tuple) or len(raw) != 2:  # noqa: PLR2004
        return None

    change, path = raw
    if not isinstance(path, str) or not path:
        return None

    try:
        kind = _CHANGE_KINDS.get(Change(change), ChangeKind.UNKNOWN)
    except ValueError:
        kind = ChangeKind.UNKNOWN

    return ChangeEvent(kind=kind, path=path, timestamp=timestamp)


@final
class Watcher:
    """Streams change events for a set of directories."""

    __slots__ = (
        "_backend",
        "_debounce",
        "_directories",
        "_force_polling",
        "_logger",
        "_poll_delay",
    )

    def __init__(
        self,
        directories: Sequence[Path],
        *,
        force_polling: bool = False,
        debounce: int = 100,
        poll_delay: int = 300,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the watcher.

        Args:
            directories: Directories to watch recursively.
            force_polling: Skip the native backend.
            debounce: Milliseconds over which raw events are grouped.
            poll_delay: Milliseconds between scans when polling.
            logger: Logger for diagnostics.
        """
        self._directories = tuple(directories)
        self._force_polling = force_polling
        self._debounce = debounce
        self._poll_delay = poll_delay
        self._logger = logger if logger is not None else create_null_logger()
        self._backend: str | None = None

    @property
    def directories(self) -> tuple[Path, ...]:
        """Return the watched directories."""
        return self._directories

    @property
    def backend(self) -> str | None:
        """Return the backend in use ("native" or "polling"), once watching."""
        return self._backend

    def select_backend(self) -> str:
        """Probe for the native backend and record the choice."""
        match probe_backend(self._directories, force_polling=self._force_polling):
            case Available(backend=backend):
                self._backend = backend
                self._logger.debug("watch_backend_selected", backend=backend)
            case Unavailable(reason=reason):
                self._backend = "polling"
                self._logger.debug(
                    "watch_backend_selected", backend="polling", reason=reason
                )
        return self._backend

    async def watch(self) -> AsyncIterator[ChangeEvent]:
        """Yield change events until cancelled.

        The stream is infinite. Cancel the enclosing scope to stop it;
        in-flight events are not drained.
        """
        backend = self._backend or await anyio.to_thread.run_sync(self.select_backend)

        async for changes in awatch(
            *self._directories,
            watch_filter=None,
            debounce=self._debounce,
            force_polling=backend == "polling",
            poll_delay_ms=self._poll_delay,
            recursive=True,
        ):
            timestamp = get_timestamp()
            for raw in changes:
                event = to_change_event(raw, timestamp)
                if event is None:
                    self._logger.warning("watch_event_dropped", raw=repr(raw))
                    continue
                yield event
