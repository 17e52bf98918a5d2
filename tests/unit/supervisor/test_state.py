from respawn.supervisor import FailureReport, RestartBackoff, RestartState


def _state(clean_time: float = 2000) -> RestartState:
    return RestartState(
        backoff=RestartBackoff(min_delay=500, max_delay=5000, multiplier=2),
        clean_time=clean_time,
    )


class TestBeginRun:
    def test_first_run_is_clean(self) -> None:
        state = _state()

        assert state.begin_run(10_000) is True
        assert state.previous_start_time == 10_000

    def test_fast_restart_is_not_clean(self) -> None:
        state = _state()
        _ = state.begin_run(10_000)

        assert state.begin_run(10_500) is False

    def test_restart_after_clean_time_resets_delay(self) -> None:
        state = _state()
        _ = state.begin_run(0)
        state.current_delay = 4000

        assert state.begin_run(2000) is True
        assert state.current_delay == 0

    def test_fast_restart_keeps_delay(self) -> None:
        state = _state()
        _ = state.begin_run(0)
        state.current_delay = 1000

        _ = state.begin_run(100)

        assert state.current_delay == 1000


class TestRecordExit:
    def test_new_output_is_reported_in_full(self) -> None:
        state = _state()

        report = state.record_exit("boom 1\n", killed_by_us=False)

        assert report is FailureReport.FULL_OUTPUT
        assert state.last_failure_signature == "boom #"

    def test_same_output_gets_marker(self) -> None:
        state = _state()
        _ = state.record_exit("boom 1\n", killed_by_us=False)

        assert state.record_exit("boom 2\n", killed_by_us=False) is FailureReport.MARKER

    def test_different_output_is_reported_again(self) -> None:
        state = _state()
        _ = state.record_exit("boom 1\n", killed_by_us=False)
        _ = state.record_exit("boom 2\n", killed_by_us=False)

        report = state.record_exit("bang\n", killed_by_us=False)

        assert report is FailureReport.FULL_OUTPUT

    def test_empty_output_gets_marker(self) -> None:
        state = _state()

        assert state.record_exit("", killed_by_us=False) is FailureReport.MARKER

    def test_quiet_exit_after_a_failure_is_silent(self) -> None:
        state = _state()
        _ = state.record_exit("Traceback: boom\n", killed_by_us=False)

        assert state.record_exit("", killed_by_us=False) is FailureReport.SILENT
        assert state.last_failure_signature == ""

    def test_killed_run_is_silent(self) -> None:
        state = _state()
        _ = state.record_exit("boom\n", killed_by_us=False)

        assert state.record_exit("boom\n", killed_by_us=True) is FailureReport.SILENT
        assert state.record_exit("", killed_by_us=True) is FailureReport.SILENT

    def test_killed_run_with_new_output_is_still_shown(self) -> None:
        state = _state()

        report = state.record_exit("partial\n", killed_by_us=True)

        assert report is FailureReport.FULL_OUTPUT

    def test_signature_is_stored_even_when_empty(self) -> None:
        state = _state()
        _ = state.record_exit("boom\n", killed_by_us=False)

        _ = state.record_exit("", killed_by_us=False)

        assert state.last_failure_signature == ""
        report = state.record_exit("boom\n", killed_by_us=False)

        assert report is FailureReport.FULL_OUTPUT


class TestEscalation:
    def test_escalates_through_the_documented_sequence(self) -> None:
        state = _state(clean_time=1_000_000)

        delays = [state.escalate() for _ in range(5)]

        assert delays == [500, 1000, 2000, 4000, 5000]

    def test_clean_run_resets_escalation(self) -> None:
        state = _state()
        _ = state.escalate()
        _ = state.escalate()

        state.mark_clean()

        assert state.current_delay == 0
        assert state.escalate() == 500

    def test_crash_loop_scenario(self) -> None:
        # Starts 100ms apart with a long stability window: every start after
        # the first is a fast restart and output is compared run to run.
        state = _state(clean_time=10_000)
        reports: list[FailureReport] = []
        now = 0.0

        for output in ("crash at 1\n", "crash at 2\n", "other failure\n"):
            _ = state.begin_run(now)
            reports.append(state.record_exit(output, killed_by_us=False))
            _ = state.escalate()
            now += 100

        assert reports == [
            FailureReport.FULL_OUTPUT,
            FailureReport.MARKER,
            FailureReport.FULL_OUTPUT,
        ]
        assert state.current_delay == 2000
