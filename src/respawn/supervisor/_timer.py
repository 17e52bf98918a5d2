"""One-shot timers on the anyio event loop."""

from __future__ import annotations

from typing import TYPE_CHECKING, final

import anyio

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    import anyio.abc


@final
class Timer:
    """A single timer slot.

    At most one firing is pending per slot: arming cancels the previous
    one. The callback runs outside the timer's cancel scope, so re-arming
    from within the callback does not cancel the callback itself.
    """

    __slots__ = ("_name", "_scope")

    def __init__(self, name: str) -> None:
        """Initialize an unarmed timer.

        Args:
            name: Label used for the task name.
        """
        self._name = name
        self._scope: anyio.CancelScope | None = None

    @property
    def name(self) -> str:
        """Return the timer label."""
        return self._name

    @property
    def pending(self) -> bool:
        """Return True if the timer is armed and has not fired."""
        return self._scope is not None

    def arm(
        self,
        task_group: anyio.abc.TaskGroup,
        delay_ms: float,
        callback: Callable[[], Awaitable[None]],
    ) -> None:
        """Schedule ``callback`` after ``delay_ms`` milliseconds.

        Args:
            task_group: Task group that owns the timer task.
            delay_ms: Delay in milliseconds; 0 fires on the next loop pass.
            callback: Coroutine function to call when the timer fires.
        """
        self.cancel()
        scope = anyio.CancelScope()
        self._scope = scope
        task_group.start_soon(self._run, scope, delay_ms, callback, name=self._name)

    def cancel(self) -> None:
        """Cancel the pending firing, if any."""
        if self._scope is not None:
            self._scope.cancel()
            self._scope = None

    async def _run(
        self,
        scope: anyio.CancelScope,
        delay_ms: float,
        callback: Callable[[], Awaitable[None]],
    ) -> None:
        with scope:
            await anyio.sleep(max(delay_ms, 0) / 1000)
        if scope.cancel_called:
            return
        self._scope = None
        await callback()
