import pytest

from respawn.supervisor import RestartBackoff


class TestRestartBackoff:
    def test_escalating_from_zero_gives_min(self) -> None:
        backoff = RestartBackoff(min_delay=500, max_delay=5000, multiplier=2)

        assert backoff.next_delay(0) == 500

    def test_sequence_is_capped(self) -> None:
        backoff = RestartBackoff(min_delay=500, max_delay=5000, multiplier=2)
        delays: list[float] = []
        current = 0.0

        for _ in range(6):
            current = backoff.next_delay(current)
            delays.append(current)

        assert delays == [500, 1000, 2000, 4000, 5000, 5000]

    @pytest.mark.parametrize(
        ("restarts", "expected"),
        [(0, 0), (1, 500), (2, 1000), (3, 2000), (4, 4000), (5, 5000), (50, 5000)],
    )
    def test_delay_formula(self, restarts: int, expected: float) -> None:
        backoff = RestartBackoff(min_delay=500, max_delay=5000, multiplier=2)

        assert backoff.delay(restarts) == expected

    def test_delay_survives_overflow(self) -> None:
        backoff = RestartBackoff(min_delay=1, max_delay=10, multiplier=1e300)

        assert backoff.delay(10_000) == 10

    def test_zero_min_delay_never_waits(self) -> None:
        backoff = RestartBackoff(min_delay=0, max_delay=1000, multiplier=2)

        assert backoff.next_delay(0) == 0
        assert backoff.delay(5) == 0
