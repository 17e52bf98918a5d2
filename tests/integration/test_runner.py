import sys
from collections.abc import Awaitable, Callable
from functools import partial
from pathlib import Path

import anyio
import pytest

from respawn.cli import supervise
from respawn.config import RunConfig
from respawn.supervisor import DirectSink

pytestmark = pytest.mark.anyio

WaitFor = Callable[..., Awaitable[None]]

APP = """\
import sys, time
print("up", flush=True)
for line in sys.stdin:
    print("live " + line.strip(), flush=True)
time.sleep(60)
"""


async def test_file_changes_reach_the_child(
    tmp_path: Path,
    capture_sink: DirectSink,
    sink_text: Callable[[DirectSink], str],
    fast_run_config: Callable[..., RunConfig],
    wait_for: WaitFor,
) -> None:
    root = tmp_path / "project"
    (root / "public").mkdir(parents=True)
    _ = (root / "app.py").write_text(APP)
    config = fast_run_config(clean_time=0, force_polling=True, debounce=50)

    def text() -> str:
        return sink_text(capture_sink)

    async with anyio.create_task_group() as tg:
        tg.start_soon(
            partial(
                supervise,
                (sys.executable, "app.py"),
                config,
                root=root,
                sink=capture_sink,
            )
        )
        await wait_for(lambda: "up\n" in text())
        # Let the polling watcher take its first snapshot
        await anyio.sleep(0.5)

        _ = (root / "public" / "site.css").write_text("body {}")
        await wait_for(lambda: "live " in text())
        assert '"public/site.css" at' in text()

        (root / "__pycache__").mkdir()
        _ = (root / "__pycache__" / "app.cpython.pyc").write_bytes(b"\0")
        _ = (root / "server.py").write_text("x = 1\n")
        await wait_for(lambda: text().count("up\n") >= 2)
        assert '"server.py" at' in text()
        assert "__pycache__" not in text()

        tg.cancel_scope.cancel()
