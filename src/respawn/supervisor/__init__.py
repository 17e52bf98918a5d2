"""Supervision of a single development child process.

This package restarts the child when it exits or when a restart-worthy
file changes, backs off during crash loops, and collapses repeated
identical failures into a single marker.

Key Components:
    - Supervisor: Spawns, restarts and stops the child
    - ChangeRouter: Turns file changes into forwards or restarts
    - RestartState: Pure restart and failure-comparison bookkeeping
    - RestartBackoff: Restart delay escalation
    - canonicalize / is_same_failure: Failure output comparison
    - DirectSink / BufferingSink: Where child output goes

Example:
    >>> from respawn.config import RunConfig
    >>> from respawn.supervisor import Supervisor
    >>> supervisor = Supervisor(("python", "app.py"), RunConfig())
    >>> await supervisor.run()  # Blocks until shutdown
"""

from ._backoff import RestartBackoff
from ._dedupe import PLACEHOLDER, canonicalize, is_same_failure
from ._models import ChildHandle, FailureReport, SupervisorState
from ._output import BufferingSink, DirectSink
from ._protocol import ChildController, OutputSink
from ._router import ChangeRouter, describe_change
from ._state import RestartState
from ._supervisor import Supervisor
from ._timer import Timer

__all__ = [
    "PLACEHOLDER",
    "BufferingSink",
    "ChangeRouter",
    "ChildController",
    "ChildHandle",
    "DirectSink",
    "FailureReport",
    "OutputSink",
    "RestartBackoff",
    "RestartState",
    "Supervisor",
    "SupervisorState",
    "Timer",
    "canonicalize",
    "describe_change",
    "is_same_failure",
]
