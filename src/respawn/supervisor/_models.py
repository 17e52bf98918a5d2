"""Data models for the supervisor.

This module defines the core data types for child process management:
- SupervisorState: Lifecycle states of the supervision loop
- FailureReport: What an exit prints
- ChildHandle: One spawned child and how it ended
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import anyio.abc
    from anyio.streams.memory import MemoryObjectSendStream


class SupervisorState(StrEnum):
    """Supervisor lifecycle states.

    - STOPPED: No supervision loop is running
    - STARTING: A child is being spawned
    - BUFFERING: Running after a fast restart; output is held back
    - CLEAN_RUNNING: Running with output flowing straight through
    - CLOSED: The child exited and a restart is pending
    """

    STOPPED = "stopped"
    STARTING = "starting"
    BUFFERING = "buffering"
    CLEAN_RUNNING = "clean_running"
    CLOSED = "closed"


class FailureReport(StrEnum):
    """How a child exit is reported.

    - FULL_OUTPUT: A new failure; the buffered output is printed
    - MARKER: The same failure again; a single red dot is printed
    - SILENT: Nothing is printed (an intentional restart)
    """

    FULL_OUTPUT = "full_output"
    MARKER = "marker"
    SILENT = "silent"


@dataclass(slots=True, eq=False)
class ChildHandle:
    """A single spawned child process.

    Attributes:
        command: Command the child was started with.
        started_at: ISO 8601 timestamp of the spawn attempt.
        process: The OS process, or None if spawning failed.
        killed_by_us: Set before the supervisor requests termination.
        closed: Set once the exit has been observed.
        exit_code: Exit code, once known.
        stdin_queue: Lines waiting to be written to the child's stdin.
    """

    command: tuple[str, ...]
    started_at: str
    process: anyio.abc.Process | None = None
    killed_by_us: bool = False
    closed: bool = False
    exit_code: int | None = None
    stdin_queue: MemoryObjectSendStream[bytes] | None = None

    @property
    def pid(self) -> int | None:
        """Return the process ID if the child was spawned."""
        return self.process.pid if self.process is not None else None

    @property
    def accepts_changes(self) -> bool:
        """Return True if the child is running and has not been killed."""
        return self.process is not None and not self.closed and not self.killed_by_us
