"""Output sink implementations for the supervisor.

This module provides concrete implementations of the OutputSink protocol:
- DirectSink: Writes to the terminal immediately
- BufferingSink: Holds output in memory until the run proves stable
"""

from __future__ import annotations

from typing import TYPE_CHECKING, final

from rich.console import Console

if TYPE_CHECKING:
    from rich.text import Text


@final
class DirectSink:
    """Output sink that writes straight to the terminal.

    Child output is written verbatim so its own colors and partial lines
    survive. Supervisor notices go through Rich for styling.
    """

    __slots__ = ("_console",)

    def __init__(self, console: Console | None = None) -> None:
        """Initialize the output sink.

        Args:
            console: Rich Console instance for output. If None, creates a new one.
        """
        self._console = console or Console(highlight=False)

    @property
    def console(self) -> Console:
        """Return the underlying console."""
        return self._console

    def write(self, chunk: str) -> None:
        """Write child output verbatim."""
        stream = self._console.file
        _ = stream.write(chunk)
        stream.flush()

    def notice(self, text: Text, *, end: str = "\n") -> None:
        """Write a styled supervisor message.

        Args:
            text: The message.
            end: Terminator; use "" to stay on the same line.
        """
        self._console.print(text, end=end, soft_wrap=True)


@final
class BufferingSink:
    """Output sink that accumulates output in memory."""

    __slots__ = ("_chunks",)

    def __init__(self) -> None:
        self._chunks: list[str] = []

    def write(self, chunk: str) -> None:
        """Hold a chunk of output."""
        self._chunks.append(chunk)

    def getvalue(self) -> str:
        """Return everything written since the last clear."""
        return "".join(self._chunks)

    def clear(self) -> None:
        """Discard the accumulated output."""
        self._chunks.clear()
