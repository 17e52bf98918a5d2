"""Supervisor for a single development child process.

This module provides the Supervisor class that spawns the child, restarts
it when it exits, and decides what of its output reaches the terminal.
"""

from __future__ import annotations

import contextlib
import subprocess
from typing import TYPE_CHECKING, final

import anyio
import anyio.abc
from anyio.streams.text import TextReceiveStream
from rich.text import Text

from respawn.exceptions import SpawnError
from respawn.utils import create_null_logger, get_timestamp, monotonic_ms

from ._backoff import RestartBackoff
from ._models import ChildHandle, FailureReport, SupervisorState
from ._output import BufferingSink, DirectSink
from ._state import RestartState
from ._timer import Timer

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence
    from pathlib import Path

    from structlog.typing import FilteringBoundLogger

    from respawn.config import RunConfig
    from respawn.watch import ChangeEvent

    from anyio.streams.memory import MemoryObjectReceiveStream

    from ._protocol import OutputSink

_STDIN_ERRORS = (
    anyio.BrokenResourceError,
    anyio.ClosedResourceError,
    BrokenPipeError,
    ConnectionResetError,
)

# Lines held for a child that is slow to read its stdin
_STDIN_QUEUE_SIZE = 64


@final
class Supervisor:
    """Runs one child process and restarts it when it exits.

    A start that follows the previous one within ``clean_time`` is treated
    as part of a crash loop: the child's output is buffered, and when it
    exits the output is compared with the previous failure. A new failure
    is printed in full; a repeat prints a single red dot. A run that
    survives ``clean_time`` flushes its buffer and resets the backoff.

    All state changes happen on the event loop, from task callbacks, so no
    locking is needed.
    """

    __slots__ = (
        "_buffer",
        "_clean_timer",
        "_clock",
        "_command",
        "_config",
        "_cwd",
        "_direct",
        "_env",
        "_handle",
        "_logger",
        "_restart_state",
        "_restart_timer",
        "_shutdown_event",
        "_sink",
        "_state",
        "_task_group",
    )

    def __init__(
        self,
        command: Sequence[str],
        config: RunConfig,
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        sink: DirectSink | None = None,
        logger: FilteringBoundLogger | None = None,
        clock: Callable[[], float] = monotonic_ms,
    ) -> None:
        """Initialize the supervisor.

        Args:
            command: Command and arguments for the child.
            config: Timing configuration.
            cwd: Working directory for the child.
            env: Environment for the child. None inherits ours verbatim.
            sink: Terminal sink. Uses a DirectSink on stdout if None.
            logger: Logger for diagnostics.
            clock: Millisecond clock used to measure time between starts.
        """
        self._command = tuple(command)
        self._config = config
        self._cwd = cwd
        self._env = dict(env) if env is not None else None
        self._direct = sink or DirectSink()
        self._buffer = BufferingSink()
        self._sink: OutputSink = self._direct
        self._logger = logger if logger is not None else create_null_logger()
        self._clock = clock

        self._restart_state = RestartState(
            backoff=RestartBackoff(
                min_delay=config.min_restart_delay,
                max_delay=config.max_restart_delay,
                multiplier=config.restart_delay_backoff,
            ),
            clean_time=config.clean_time,
        )
        # Timer slots live as long as the supervisor, one per kind
        self._clean_timer = Timer("clean")
        self._restart_timer = Timer("restart")

        self._state = SupervisorState.STOPPED
        self._handle: ChildHandle | None = None
        self._task_group: anyio.abc.TaskGroup | None = None
        self._shutdown_event: anyio.Event | None = None

    @property
    def command(self) -> tuple[str, ...]:
        """Return the child command."""
        return self._command

    @property
    def state(self) -> SupervisorState:
        """Return the current lifecycle state."""
        return self._state

    @property
    def restart_state(self) -> RestartState:
        """Return the restart bookkeeping."""
        return self._restart_state

    @property
    def handle(self) -> ChildHandle | None:
        """Return the current or most recent child."""
        return self._handle

    @property
    def sink(self) -> OutputSink:
        """Return the sink child output currently goes to."""
        return self._sink

    @property
    def direct_sink(self) -> DirectSink:
        """Return the terminal sink."""
        return self._direct

    @property
    def buffering(self) -> bool:
        """Return True while child output is being held back."""
        return self._sink is self._buffer

    @property
    def accepts_changes(self) -> bool:
        """Return True if a live child can receive changes."""
        return self._handle is not None and self._handle.accepts_changes

    def _shutting_down(self) -> bool:
        return self._shutdown_event is not None and self._shutdown_event.is_set()

    async def run(self) -> None:
        """Run the supervision loop until shutdown() is called.

        The child is stopped (SIGTERM, then SIGKILL after ``kill_timeout``)
        before this returns, even if the caller is cancelled.
        """
        self._shutdown_event = anyio.Event()
        try:
            async with anyio.create_task_group() as tg:
                self._task_group = tg
                tg.start_soon(self._start)
                await self._shutdown_event.wait()
                tg.cancel_scope.cancel()
        finally:
            self._task_group = None
            self._clean_timer.cancel()
            self._restart_timer.cancel()
            self._restore_direct_output(flush=True)
            with anyio.CancelScope(shield=True):
                await self._stop_child()
            self._state = SupervisorState.STOPPED

    async def shutdown(self) -> None:
        """Trigger shutdown of the supervision loop."""
        if self._shutdown_event is not None:
            self._shutdown_event.set()

    async def _start(self) -> None:
        """Spawn the child and choose the output policy for this run."""
        if self._task_group is None or self._shutting_down():
            return

        clean = self._restart_state.begin_run(self._clock())
        self._state = SupervisorState.STARTING

        if clean:
            self._sink = self._direct
        else:
            # Fast restart: hold output back in case this run fails the same way
            self._sink = self._buffer
            self._clean_timer.arm(
                self._task_group, self._restart_state.clean_time, self._on_clean
            )

        handle = ChildHandle(command=self._command, started_at=get_timestamp())
        self._handle = handle

        try:
            handle.process = await anyio.open_process(
                self._command,
                cwd=self._cwd,
                env=self._env,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            error = SpawnError(
                f"Failed to start {' '.join(self._command)}: {e}",
                command=self._command,
                cause=e,
            )
            self._logger.error("spawn_failed", command=self._command, error=str(e))
            self._sink.write(f"{error}\n")
            await self._on_exit(handle, None)
            return

        send, receive = anyio.create_memory_object_stream[bytes](_STDIN_QUEUE_SIZE)
        handle.stdin_queue = send

        self._state = (
            SupervisorState.CLEAN_RUNNING if clean else SupervisorState.BUFFERING
        )
        self._logger.info(
            "child_started",
            pid=handle.pid,
            clean_start=clean,
            delay=self._restart_state.current_delay,
        )
        self._task_group.start_soon(self._supervise, handle)
        self._task_group.start_soon(self._write_stdin, handle, receive)

    async def _supervise(self, handle: ChildHandle) -> None:
        """Stream a child's output until it exits, then handle the exit."""
        process = handle.process
        if process is None:
            return

        async with anyio.create_task_group() as streams:
            if process.stdout is not None:
                streams.start_soon(
                    self._pump, TextReceiveStream(process.stdout, errors="replace")
                )
            if process.stderr is not None:
                streams.start_soon(
                    self._pump, TextReceiveStream(process.stderr, errors="replace")
                )

        exit_code = await process.wait()
        await process.aclose()
        await self._on_exit(handle, exit_code)

    async def _pump(self, stream: TextReceiveStream) -> None:
        try:
            async for chunk in stream:
                self._sink.write(chunk)
        except (anyio.ClosedResourceError, anyio.BrokenResourceError):
            # Stream closed, which is expected on process exit
            pass

    async def _on_clean(self) -> None:
        """The run outlived the stability window."""
        self._restore_direct_output(flush=True)
        self._restart_state.mark_clean()
        if self._handle is not None and not self._handle.closed:
            self._state = SupervisorState.CLEAN_RUNNING
        self._logger.info("clean_run", pid=self._handle.pid if self._handle else None)

    async def _on_exit(self, handle: ChildHandle, exit_code: int | None) -> None:
        """Report a finished run and schedule the next one."""
        handle.closed = True
        handle.exit_code = exit_code
        if handle.stdin_queue is not None:
            handle.stdin_queue.close()
        self._state = SupervisorState.CLOSED

        self._restore_direct_output(flush=False)
        output = self._buffer.getvalue()
        self._buffer.clear()

        report = self._restart_state.record_exit(
            output, killed_by_us=handle.killed_by_us
        )
        if report is FailureReport.FULL_OUTPUT:
            self._direct.write("\n" + output)
        elif report is FailureReport.MARKER:
            self._direct.notice(Text(".", style="red"), end="")

        self._clean_timer.cancel()
        self._logger.info(
            "child_exited",
            pid=handle.pid,
            exit_code=exit_code,
            killed_by_us=handle.killed_by_us,
            report=report.value,
        )

        if self._task_group is None or self._shutting_down():
            return

        delay = self._restart_state.current_delay
        self._logger.debug("restart_scheduled", delay=delay)
        self._restart_timer.arm(self._task_group, delay, self._restart)

    async def _restart(self) -> None:
        self._restart_state.escalate()
        await self._start()

    def _restore_direct_output(self, *, flush: bool) -> None:
        self._sink = self._direct
        if flush:
            output = self._buffer.getvalue()
            self._buffer.clear()
            if output:
                self._direct.write(output)

    def kill(self) -> bool:
        """Terminate the child so that it restarts.

        The handle is marked as killed by us before the signal is sent, so
        its exit is not reported as a failure. Killing a child that is
        already killed or has exited is a no-op.

        Returns:
            True if a termination request was issued.
        """
        handle = self._handle
        if handle is None or not handle.accepts_changes or handle.process is None:
            return False

        handle.killed_by_us = True
        self._logger.info("child_killed", pid=handle.pid)
        try:
            handle.process.terminate()
        except ProcessLookupError:
            return True

        if self._task_group is not None:
            self._task_group.start_soon(self._force_kill_after_timeout, handle)
        return True

    async def _force_kill_after_timeout(self, handle: ChildHandle) -> None:
        process = handle.process
        if process is None:
            return
        with anyio.move_on_after(self._config.kill_timeout / 1000):
            _ = await process.wait()
        if process.returncode is None:
            self._logger.warning("child_force_killed", pid=handle.pid)
            with contextlib.suppress(ProcessLookupError):
                process.kill()

    async def forward(self, event: ChangeEvent) -> bool:
        """Queue a change event for the child's stdin as one JSON line.

        Never waits on the child. When the child is not reading its stdin
        and the queue is full, the event is dropped.

        Returns:
            True if the event was queued.
        """
        handle = self._handle
        if handle is None or not handle.accepts_changes or handle.stdin_queue is None:
            return False

        try:
            handle.stdin_queue.send_nowait(event.to_json_line())
        except anyio.WouldBlock:
            self._logger.warning("stdin_full", pid=handle.pid, path=event.path)
            return False
        except (anyio.BrokenResourceError, anyio.ClosedResourceError):
            self._logger.warning("stdin_closed", pid=handle.pid, path=event.path)
            return False

        self._logger.debug("live_forwarded", pid=handle.pid, path=event.path)
        return True

    async def _write_stdin(
        self, handle: ChildHandle, lines: MemoryObjectReceiveStream[bytes]
    ) -> None:
        """Copy queued lines to the child's stdin until it exits."""
        process = handle.process
        if process is None or process.stdin is None:
            lines.close()
            return

        async with lines:
            try:
                async for line in lines:
                    await process.stdin.send(line)
            except _STDIN_ERRORS as e:
                self._logger.warning("stdin_closed", pid=handle.pid, error=str(e))

    async def _stop_child(self) -> None:
        """Stop the child on shutdown."""
        handle = self._handle
        if handle is not None and handle.stdin_queue is not None:
            handle.stdin_queue.close()
        if handle is None or handle.closed or handle.process is None:
            return

        process = handle.process
        handle.killed_by_us = True
        with contextlib.suppress(ProcessLookupError):
            process.terminate()
        with anyio.move_on_after(self._config.kill_timeout / 1000):
            _ = await process.wait()
        if process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
        await process.aclose()
        handle.closed = True
        handle.exit_code = process.returncode
        self._logger.info("child_stopped", pid=handle.pid, exit_code=process.returncode)
