"""respawn exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path


class RespawnError(Exception):
    """Base exception for respawn errors."""


class ConfigError(RespawnError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """Raised when configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: Any,  # pyright: ignore[reportAny,reportExplicitAny]
        expected: str,
        source: str | None = None,
    ) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.key: str = key
        self.value: Any = value  # pyright: ignore[reportExplicitAny]
        self.expected: str = expected
        self.source: str | None = source


class EntryPointNotFoundError(RespawnError):
    """Raised when no entry point can be resolved for the child process.

    Attributes:
        search_root: Directory that was searched.
        candidates: Paths that were tried, in order.
    """

    def __init__(
        self,
        message: str,
        *,
        search_root: Path,
        candidates: tuple[str, ...] = (),
    ) -> None:
        """Initialize with error message and search context."""
        super().__init__(message)
        self.search_root: Path = search_root
        self.candidates: tuple[str, ...] = candidates


class SpawnError(RespawnError):
    """Raised when the supervised child cannot be spawned.

    The supervisor converts this into an immediate exit so that the normal
    restart and backoff path applies.

    Attributes:
        command: The command that failed to start.
        cause: The underlying OS error, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        command: tuple[str, ...],
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and command context."""
        super().__init__(message)
        self.command: tuple[str, ...] = command
        self.cause: Exception | None = cause
