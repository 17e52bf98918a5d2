"""Command-line interface for respawn."""

from ._app import build_cli_overrides, create_app, main
from ._runner import resolve_watch_dirs, run_supervisor, supervise
from ._shared import ExitCode, exit_with_error, split_child_args

__all__ = [
    "ExitCode",
    "build_cli_overrides",
    "create_app",
    "exit_with_error",
    "main",
    "resolve_watch_dirs",
    "run_supervisor",
    "split_child_args",
    "supervise",
]
