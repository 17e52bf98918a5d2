"""Restart state transitions.

RestartState holds the timing and failure-comparison state that survives
from one child to the next. It has no I/O: the Supervisor feeds it clock
readings and captured output and acts on what it returns.
"""

from dataclasses import dataclass

from ._backoff import RestartBackoff
from ._dedupe import canonicalize
from ._models import FailureReport


@dataclass(slots=True)
class RestartState:
    """Mutable restart bookkeeping owned by one Supervisor.

    Attributes:
        backoff: Delay escalation policy.
        clean_time: Milliseconds a run must last to count as stable.
        current_delay: Milliseconds to wait before the next restart.
        previous_start_time: Clock reading at the last start, if any.
        last_failure_signature: Canonical output of the previous run.
    """

    backoff: RestartBackoff
    clean_time: float
    current_delay: float = 0.0
    previous_start_time: float | None = None
    last_failure_signature: str = ""

    def begin_run(self, now: float) -> bool:
        """Record a start and decide whether it is a clean start.

        Args:
            now: Current clock reading in milliseconds.

        Returns:
            True if enough time passed since the previous start; the delay
            is reset in that case.
        """
        previous = self.previous_start_time
        self.previous_start_time = now

        if previous is None or now - previous >= self.clean_time:
            self.current_delay = 0.0
            return True
        return False

    def mark_clean(self) -> None:
        """Record that the current run outlived the stability window."""
        self.current_delay = 0.0

    def record_exit(self, output: str, *, killed_by_us: bool) -> FailureReport:
        """Compare a finished run's output with the previous one.

        The signature is remembered even when the output is empty, so an
        empty failure after a clean exit compares as the same failure.

        Args:
            output: Output buffered during the run.
            killed_by_us: Whether the supervisor terminated the child.

        Returns:
            How the exit should be reported.
        """
        signature = canonicalize(output)

        if output and signature != self.last_failure_signature:
            report = FailureReport.FULL_OUTPUT
        elif signature == self.last_failure_signature and not killed_by_us:
            report = FailureReport.MARKER
        else:
            # Killed by us, or a quiet exit after a different failure
            report = FailureReport.SILENT

        self.last_failure_signature = signature
        return report

    def escalate(self) -> float:
        """Advance the restart delay by one step and return it."""
        self.current_delay = self.backoff.next_delay(self.current_delay)
        return self.current_delay
