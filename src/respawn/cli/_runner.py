"""Wiring of the watcher, router and supervisor into one event loop."""

from __future__ import annotations

import signal
from pathlib import Path
from typing import TYPE_CHECKING

import anyio
import anyio.to_thread

from respawn.exceptions import ConfigValidationError
from respawn.supervisor import ChangeRouter, DirectSink, Supervisor
from respawn.watch import PathClassifier, Watcher

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from structlog.typing import FilteringBoundLogger

    from respawn.config import RunConfig


def resolve_watch_dirs(root: Path, watch_dirs: Sequence[Path]) -> tuple[Path, ...]:
    """Resolve configured watch directories against the project root.

    Args:
        root: Working directory of the child.
        watch_dirs: Configured directories; empty means ``root``.

    Returns:
        Absolute, existing directories.

    Raises:
        ConfigValidationError: If a directory does not exist.
    """
    if not watch_dirs:
        return (root,)

    resolved: list[Path] = []
    for directory in watch_dirs:
        path = directory if directory.is_absolute() else root / directory
        if not path.is_dir():
            msg = f"Watch directory does not exist: {path}"
            raise ConfigValidationError(
                msg,
                key="run.watch_dirs",
                value=str(directory),
                expected="an existing directory",
            )
        resolved.append(path)
    return tuple(resolved)


async def supervise(
    command: Sequence[str],
    config: RunConfig,
    *,
    root: Path,
    env: Mapping[str, str] | None = None,
    sink: DirectSink | None = None,
    logger: FilteringBoundLogger | None = None,
) -> None:
    """Run the child under supervision until SIGINT or SIGTERM.

    Args:
        command: Child command.
        config: Run configuration.
        root: Working directory of the child and root for classification.
        env: Child environment; None inherits ours.
        sink: Terminal sink shared by the supervisor and router.
        logger: Logger for diagnostics.
    """
    sink = sink or DirectSink()
    supervisor = Supervisor(command, config, cwd=root, env=env, sink=sink, logger=logger)
    classifier = PathClassifier(config.ignore, config.live, root=root)
    watcher = Watcher(
        resolve_watch_dirs(root, config.watch_dirs),
        force_polling=config.force_polling,
        debounce=config.debounce,
        logger=logger,
    )
    router = ChangeRouter(supervisor, classifier, sink=sink, logger=logger)

    # The probe touches the filesystem, keep it off the loop
    _ = await anyio.to_thread.run_sync(watcher.select_backend)

    async def handle_signals() -> None:
        with anyio.open_signal_receiver(signal.SIGINT, signal.SIGTERM) as signals:
            async for _signum in signals:
                await supervisor.shutdown()
                break

    async with anyio.create_task_group() as tg:
        tg.start_soon(handle_signals)
        tg.start_soon(router.run, watcher)
        await supervisor.run()
        tg.cancel_scope.cancel()


def run_supervisor(
    command: Sequence[str],
    config: RunConfig,
    *,
    root: Path | None = None,
    sink: DirectSink | None = None,
    logger: FilteringBoundLogger | None = None,
) -> None:
    """Blocking entry to ``supervise``."""
    try:
        anyio.run(
            lambda: supervise(
                command, config, root=root or Path.cwd(), sink=sink, logger=logger
            )
        )
    except KeyboardInterrupt:
        # Interrupted before the signal receiver was installed
        pass
