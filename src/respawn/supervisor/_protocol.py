"""Protocol definitions for the supervisor.

This module defines the interface that decouples the supervisor core from
where child output ends up.
"""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from respawn.watch import ChangeEvent


@runtime_checkable
class OutputSink(Protocol):
    """Protocol for consuming child output.

    The supervisor holds a reference to the active sink and swaps it
    between a direct and a buffering implementation. Output is looked up
    through that reference on every write, so a swap takes effect for the
    next chunk.
    """

    def write(self, chunk: str) -> None:
        """Write a chunk of output exactly as received.

        Args:
            chunk: Decoded output; not necessarily a whole line.
        """
        ...


@runtime_checkable
class ChildController(Protocol):
    """Protocol for the side of the supervisor that file changes act on."""

    @property
    def accepts_changes(self) -> bool:
        """Return True if a live child can receive changes."""
        ...

    def kill(self) -> bool:
        """Terminate the child so that it restarts."""
        ...

    async def forward(self, event: "ChangeEvent") -> bool:  # noqa: UP037
        """Write a change event to the child."""
        ...
