"""Routing of filesystem changes to the supervised child."""

from __future__ import annotations

from typing import TYPE_CHECKING, final

from rich.text import Text

from respawn.utils import create_null_logger, get_local_time
from respawn.watch import ChangeKind, Classification

from ._output import DirectSink

if TYPE_CHECKING:
    from collections.abc import Callable

    from structlog.typing import FilteringBoundLogger

    from respawn.watch import ChangeEvent, PathClassifier, Watcher

    from ._protocol import ChildController

_VERBS: dict[ChangeKind, str] = {
    ChangeKind.CREATED: "Created",
    ChangeKind.MODIFIED: "Modified",
    ChangeKind.DELETED: "Deleted",
    ChangeKind.RENAMED: "Renamed",
    ChangeKind.UNKNOWN: "Changed",
}


def describe_change(event: ChangeEvent, relative_path: str, local_time: str) -> str:
    """Return the one-line description printed for a change.

    Examples:
        >>> describe_change(event, "src/app.py", "14:03:07")
        'Modified "src/app.py" at 14:03:07'
    """
    return f'{_VERBS[event.kind]} "{relative_path}" at {local_time}'


@final
class ChangeRouter:
    """Sends each change to the child or restarts it.

    Ignored paths are dropped. Live paths are forwarded to the child's
    stdin as JSON lines. Anything else kills the child, which the
    supervisor then restarts. Every change that is not ignored is printed
    straight to the terminal, even while child output is buffered or no
    child is running.
    """

    __slots__ = ("_classifier", "_clock", "_logger", "_sink", "_target")

    def __init__(
        self,
        target: ChildController,
        classifier: PathClassifier,
        *,
        sink: DirectSink | None = None,
        logger: FilteringBoundLogger | None = None,
        clock: Callable[[], str] = get_local_time,
    ) -> None:
        """Initialize the router.

        Args:
            target: The supervisor (or anything that controls the child).
            classifier: Classifier for changed paths.
            sink: Terminal sink for change descriptions.
            logger: Logger for diagnostics.
            clock: Returns the local time shown in descriptions.
        """
        self._target = target
        self._classifier = classifier
        self._sink = sink or DirectSink()
        self._logger = logger if logger is not None else create_null_logger()
        self._clock = clock

    async def route(self, event: ChangeEvent) -> Classification | None:
        """Handle a single change event.

        Returns:
            The classification, or None if the path is ignored. Without a
            live child the change is still printed but not acted on.
        """
        relative = self._classifier.relative(event.path)
        classification = self._classifier.classify(event.path)

        if classification is Classification.IGNORED:
            return None

        accepting = self._target.accepts_changes
        self._logger.debug(
            "change_detected",
            kind=event.kind.value,
            path=relative,
            classification=classification.value,
            child_running=accepting,
        )

        message = describe_change(event, relative, self._clock())
        if classification is Classification.LIVE:
            self._sink.notice(Text(message, style="green"))
        else:
            self._sink.notice(Text(message, style="yellow"), end="\n\n")

        # Killed or exited: a restart is already on its way
        if not accepting:
            return classification

        if classification is Classification.LIVE:
            _ = await self._target.forward(event)
        else:
            _ = self._target.kill()

        return classification

    async def run(self, watcher: Watcher) -> None:
        """Route every event from ``watcher`` until cancelled."""
        async for event in watcher.watch():
            _ = await self.route(event)
