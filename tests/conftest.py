"""Shared test fixtures for respawn tests."""

import io
from collections.abc import Callable

import pytest
from rich.console import Console

from respawn.config import RunConfig
from respawn.supervisor import DirectSink


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def capture_sink() -> DirectSink:
    """Create a DirectSink writing to an in-memory console."""
    console = Console(file=io.StringIO(), force_terminal=False, width=200, highlight=False)
    return DirectSink(console)


@pytest.fixture
def sink_text() -> Callable[[DirectSink], str]:
    """Return a reader for sinks created by ``capture_sink``."""

    def _read(sink: DirectSink) -> str:
        stream = sink.console.file
        assert isinstance(stream, io.StringIO)
        return stream.getvalue()

    return _read


@pytest.fixture
def fast_run_config() -> Callable[..., RunConfig]:
    """Return a factory for RunConfig with short timings."""

    def _make(**overrides: object) -> RunConfig:
        values: dict[str, object] = {
            "min_restart_delay": 50,
            "max_restart_delay": 200,
            "restart_delay_backoff": 2,
            "clean_time": 10_000,
            "kill_timeout": 2000,
        }
        values.update(overrides)
        return RunConfig.model_validate(values)

    return _make

