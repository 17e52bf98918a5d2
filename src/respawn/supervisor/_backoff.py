"""Restart delay escalation.

Unlike a retry counter, the restart delay is carried as a value: each
unclean restart multiplies it, a stable run resets it to zero, and the
first escalation from zero jumps to the minimum.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RestartBackoff:
    """Exponential restart delay calculator.

    The delay after ``n`` consecutive unclean restarts is:
        delay = min(min_delay * (multiplier ^ (n - 1)), max_delay)

    Attributes:
        min_delay: Milliseconds used for the first escalation from zero.
        max_delay: Upper bound in milliseconds.
        multiplier: Factor applied per escalation.
    """

    min_delay: float = 500.0
    max_delay: float = 5000.0
    multiplier: float = 2.0

    def next_delay(self, current: float) -> float:
        """Escalate a delay by one step.

        Args:
            current: The delay in effect, 0 after a clean run.

        Returns:
            The escalated delay in milliseconds.
        """
        if current <= 0:
            return self.min_delay
        return min(current * self.multiplier, self.max_delay)

    def delay(self, restarts: int) -> float:
        """Return the delay in effect after ``restarts`` unclean restarts."""
        if restarts <= 0 or self.min_delay <= 0:
            return 0.0
        try:
            uncapped = self.min_delay * (self.multiplier ** (restarts - 1))
        except OverflowError:
            return self.max_delay
        return min(uncapped, self.max_delay)
