from collections.abc import Awaitable, Callable
from pathlib import Path

import anyio
import pytest


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.integration)


WaitFor = Callable[..., Awaitable[None]]


@pytest.fixture
def wait_for() -> WaitFor:
    """Return a coroutine that polls ``predicate`` until it holds."""

    async def _wait(predicate: Callable[[], bool], timeout: float = 15.0) -> None:
        with anyio.fail_after(timeout):
            while not predicate():
                await anyio.sleep(0.02)

    return _wait
