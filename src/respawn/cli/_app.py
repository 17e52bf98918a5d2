"""The command-line interface for respawn."""
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing

import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Annotated, Any

from cyclopts import App, Parameter
from rich.console import Console

from respawn.config import LogLevel, safe_load_config
from respawn.exceptions import ConfigValidationError, EntryPointNotFoundError
from respawn.project import resolve_entry_point
from respawn.supervisor import DirectSink
from respawn.utils import create_logger

from ._runner import run_supervisor
from ._shared import ExitCode, exit_with_error, split_child_args

_HELP = "Run a Python program and restart it when its source changes."


def _package_version() -> str:
    try:
        return version("respawn")
    except PackageNotFoundError:
        return "unknown"


def build_cli_overrides(  # noqa: PLR0913
    *,
    watch_dir: list[Path] | None = None,
    ignore: list[str] | None = None,
    live: list[str] | None = None,
    min_restart_delay: float | None = None,
    max_restart_delay: float | None = None,
    restart_delay_backoff: float | None = None,
    clean_time: float | None = None,
    force_polling: bool = False,
    log_level: LogLevel | None = None,
) -> dict[str, Any] | None:  # pyright: ignore[reportExplicitAny]
    """Collect the options that were actually given into a config mapping.

    Returns:
        Nested overrides in config-file shape, or None if nothing was set.
    """
    run: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]
    if watch_dir:
        run["watch_dirs"] = [str(path) for path in watch_dir]
    if ignore:
        run["ignore"] = list(ignore)
    if live:
        run["live"] = list(live)
    if min_restart_delay is not None:
        run["min_restart_delay"] = min_restart_delay
    if max_restart_delay is not None:
        run["max_restart_delay"] = max_restart_delay
    if restart_delay_backoff is not None:
        run["restart_delay_backoff"] = restart_delay_backoff
    if clean_time is not None:
        run["clean_time"] = clean_time
    if force_polling:
        run["force_polling"] = True

    overrides: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]
    if run:
        overrides["run"] = run
    if log_level is not None:
        overrides["logging"] = {"level": log_level.value}
    return overrides or None


def create_app(
    *,
    child_args: tuple[str, ...] = (),
    console: Console | None = None,
    error_console: Console | None = None,
    exit_on_error: bool = True,
) -> App:
    """Create the respawn application.

    Args:
        child_args: Arguments passed verbatim to the child (everything
            after ``--`` on the command line).
        console: Console the child's output and change notices go to.
        error_console: Console for respawn's own errors.
        exit_on_error: Exit on parse errors instead of raising.

    Returns:
        The configured cyclopts App.
    """
    if console is None:
        console = Console(highlight=False)
    if error_console is None:
        error_console = Console(stderr=True, highlight=False)

    app = App(
        name="respawn",
        help=_HELP,
        help_on_error=True,
        version=_package_version,
        console=console,
        error_console=error_console,
        exit_on_error=exit_on_error,
    )

    @app.default
    def run(  # noqa: PLR0913  # pyright: ignore[reportUnusedFunction]
        entry: Annotated[
            str | None,
            Parameter(help="Script to run. Found automatically if omitted."),
        ] = None,
        *,
        config: Annotated[
            Path | None, Parameter(name="--config", help="Path to config file")
        ] = None,
        watch_dir: Annotated[
            list[Path] | None,
            Parameter(name="--watch-dir", help="Directory to watch (repeatable)"),
        ] = None,
        ignore: Annotated[
            list[str] | None,
            Parameter(name="--ignore", help="Pattern whose changes are ignored"),
        ] = None,
        live: Annotated[
            list[str] | None,
            Parameter(name="--live", help="Pattern whose changes are sent to the child"),
        ] = None,
        min_restart_delay: Annotated[
            float | None, Parameter(help="First restart delay in ms")
        ] = None,
        max_restart_delay: Annotated[
            float | None, Parameter(help="Largest restart delay in ms")
        ] = None,
        restart_delay_backoff: Annotated[
            float | None, Parameter(help="Restart delay multiplier")
        ] = None,
        clean_time: Annotated[
            float | None, Parameter(help="Time in ms a run must last to count as stable")
        ] = None,
        force_polling: Annotated[
            bool,
            Parameter(
                name="--force-polling",
                negative="",
                help="Poll instead of using OS notifications",
            ),
        ] = False,
        log_level: Annotated[
            LogLevel | None, Parameter(help="Diagnostic log level")
        ] = None,
    ) -> None:
        """Run a program under supervision.

        Args:
            entry: Script to run.
            config: Explicit path to config file.
            watch_dir: Directories to watch instead of the working directory.
            ignore: Patterns whose changes are ignored.
            live: Patterns whose changes are forwarded to the child.
            min_restart_delay: First restart delay in milliseconds.
            max_restart_delay: Largest restart delay in milliseconds.
            restart_delay_backoff: Restart delay multiplier.
            clean_time: Milliseconds a run must last to count as stable.
            force_polling: Poll instead of using OS notifications.
            log_level: Diagnostic log level.
        """
        overrides = build_cli_overrides(
            watch_dir=watch_dir,
            ignore=ignore,
            live=live,
            min_restart_delay=min_restart_delay,
            max_restart_delay=max_restart_delay,
            restart_delay_backoff=restart_delay_backoff,
            clean_time=clean_time,
            force_polling=force_polling,
            log_level=log_level,
        )
        loaded_config, _config_error = safe_load_config(
            config_path=config,
            cli_overrides=overrides,
        )

        logger = create_logger(
            level=loaded_config.logging.level.value,
            log_format=loaded_config.logging.format.value,  # pyright: ignore[reportArgumentType]
            log_file=loaded_config.logging.file,
            component="respawn",
        )
        logger.debug(
            "config_loaded",
            sources=[s.name.value for s in loaded_config.sources if s.exists],
        )

        root = Path.cwd()
        try:
            entry_point = resolve_entry_point(root, entry)
        except EntryPointNotFoundError as e:
            exit_with_error(str(e), console=error_console)

        command = entry_point.command(loaded_config.run.python, child_args)
        logger.info("entry_point_resolved", entry=entry_point.display, command=command)

        try:
            run_supervisor(
                command,
                loaded_config.run,
                root=root,
                sink=DirectSink(console),
                logger=logger,
            )
        except ConfigValidationError as e:
            exit_with_error(str(e), ExitCode.VALIDATION_ERROR, console=error_console)

    return app


def main(argv: list[str] | None = None) -> None:
    """Default entrypoint for the `respawn` CLI."""
    tokens = sys.argv[1:] if argv is None else argv
    own, child = split_child_args(tokens)
    app = create_app(child_args=tuple(child))
    app(own)
