"""Shared helpers for the respawn CLI."""

from enum import IntEnum
from typing import TYPE_CHECKING, Never

if TYPE_CHECKING:
    from collections.abc import Sequence

    from rich.console import Console


class ExitCode(IntEnum):
    """Exit codes for the respawn CLI."""

    SUCCESS = 0
    FAILURE = 1
    VALIDATION_ERROR = 2


def get_error_console() -> "Console":  # noqa: UP037
    """Get a Rich console configured for error output to stderr."""
    from rich.console import Console  # noqa: PLC0415

    return Console(stderr=True, highlight=False)


def exit_with_error(
    message: str,
    code: ExitCode = ExitCode.FAILURE,
    *,
    console: "Console | None" = None,  # noqa: UP037
) -> Never:
    """Print an error message and exit with the specified code.

    Raises:
        SystemExit: Always raised with the specified exit code.
    """
    if console is None:
        console = get_error_console()

    console.print(f"[red]Error:[/red] {message}", markup=True)
    raise SystemExit(code)


def split_child_args(tokens: "Sequence[str]") -> tuple[list[str], list[str]]:  # noqa: UP037
    """Split argv at the first ``--``.

    Everything before it is parsed by respawn; everything after is passed
    to the child untouched, including further ``--`` tokens.

    Examples:
        >>> split_child_args(["--clean-time", "1000", "app.py", "--", "-v"])
        (['--clean-time', '1000', 'app.py'], ['-v'])
    """
    items = list(tokens)
    try:
        index = items.index("--")
    except ValueError:
        return items, []
    return items[:index], items[index + 1 :]
