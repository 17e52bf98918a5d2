from __future__ import annotations

import threading
from collections.abc import AsyncIterator
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from watchfiles import Change

from respawn.watch import (
    Available,
    ChangeEvent,
    ChangeKind,
    Unavailable,
    Watcher,
    to_change_event,
)

if TYPE_CHECKING:
    from pytest_mock import MockerFixture

TIMESTAMP = "2026-01-02T03:04:05+00:00"


class TestToChangeEvent:
    @pytest.mark.parametrize(
        ("change", "kind"),
        [
            (Change.added, ChangeKind.CREATED),
            (Change.modified, ChangeKind.MODIFIED),
            (Change.deleted, ChangeKind.DELETED),
        ],
    )
    def test_maps_change_kinds(self, change: Change, kind: ChangeKind) -> None:
        event = to_change_event((change, "/p/a.py"), TIMESTAMP)

        assert event == ChangeEvent(kind=kind, path="/p/a.py", timestamp=TIMESTAMP)

    def test_unknown_change_value_is_unknown_kind(self) -> None:
        event = to_change_event((99, "/p/a.py"), TIMESTAMP)

        assert event is not None
        assert event.kind is ChangeKind.UNKNOWN

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            "a.py",
            (Change.added,),
            (Change.added, "/p/a.py", "extra"),
            (Change.added, ""),
            (Change.added, 42),
        ],
    )
    def test_malformed_entries_are_rejected(self, raw: object) -> None:
        assert to_change_event(raw, TIMESTAMP) is None


def _fake_awatch(*batches: set[object]):
    async def _awatch(*_paths: object, **_kwargs: object) -> AsyncIterator[set[object]]:
        for batch in batches:
            yield batch

    return _awatch


class TestWatcher:
    def test_select_backend_native(self, mocker: MockerFixture) -> None:
        mocker.patch("respawn.watch._watcher.probe_backend", return_value=Available())
        watcher = Watcher([Path("/p")])

        assert watcher.select_backend() == "native"
        assert watcher.backend == "native"

    def test_select_backend_falls_back_to_polling(self, mocker: MockerFixture) -> None:
        mocker.patch(
            "respawn.watch._watcher.probe_backend",
            return_value=Unavailable(reason="nope"),
        )
        watcher = Watcher([Path("/p")])

        assert watcher.select_backend() == "polling"

    def test_select_backend_passes_force_polling(self, mocker: MockerFixture) -> None:
        probe = mocker.patch(
            "respawn.watch._watcher.probe_backend",
            return_value=Unavailable(reason="forced"),
        )
        watcher = Watcher([Path("/p")], force_polling=True)

        _ = watcher.select_backend()

        probe.assert_called_once_with((Path("/p"),), force_polling=True)

    @pytest.mark.anyio
    async def test_watch_yields_events(self, mocker: MockerFixture) -> None:
        mocker.patch("respawn.watch._watcher.probe_backend", return_value=Available())
        mocker.patch(
            "respawn.watch._watcher.awatch",
            _fake_awatch({(Change.modified, "/p/a.py")}, {(Change.added, "/p/b.py")}),
        )
        watcher = Watcher([Path("/p")])

        events = [event async for event in watcher.watch()]

        assert [(e.kind, e.path) for e in events] == [
            (ChangeKind.MODIFIED, "/p/a.py"),
            (ChangeKind.CREATED, "/p/b.py"),
        ]

    @pytest.mark.anyio
    async def test_watch_drops_malformed_entries(self, mocker: MockerFixture) -> None:
        mocker.patch("respawn.watch._watcher.probe_backend", return_value=Available())
        mocker.patch(
            "respawn.watch._watcher.awatch",
            _fake_awatch({"garbage", (Change.deleted, "/p/c.py")}),
        )
        logger = mocker.MagicMock()
        watcher = Watcher([Path("/p")], logger=logger)

        events = [event async for event in watcher.watch()]

        assert [e.path for e in events] == ["/p/c.py"]
        logger.warning.assert_called_once()
        assert logger.warning.call_args.args[0] == "watch_event_dropped"

    @pytest.mark.anyio
    async def test_watch_uses_polling_when_unavailable(
        self, mocker: MockerFixture
    ) -> None:
        mocker.patch(
            "respawn.watch._watcher.probe_backend",
            return_value=Unavailable(reason="nope"),
        )
        calls: list[dict[str, object]] = []

        async def _awatch(*_paths: object, **kwargs: object) -> AsyncIterator[set[object]]:
            calls.append(kwargs)
            yield {(Change.modified, "/p/a.py")}

        mocker.patch("respawn.watch._watcher.awatch", _awatch)
        watcher = Watcher([Path("/p")], debounce=50)

        _ = [event async for event in watcher.watch()]

        assert calls[0]["force_polling"] is True
        assert calls[0]["debounce"] == 50
        assert calls[0]["watch_filter"] is None

    @pytest.mark.anyio
    async def test_events_in_a_batch_share_a_timestamp(
        self, mocker: MockerFixture
    ) -> None:
        mocker.patch("respawn.watch._watcher.probe_backend", return_value=Available())
        mocker.patch(
            "respawn.watch._watcher.awatch",
            _fake_awatch({(Change.modified, "/p/a.py"), (Change.modified, "/p/b.py")}),
        )
        watcher = Watcher([Path("/p")])

        events = [event async for event in watcher.watch()]

        assert len({e.timestamp for e in events}) == 1

    @pytest.mark.anyio
    async def test_backend_is_selected_off_the_event_loop(
        self, mocker: MockerFixture
    ) -> None:
        threads: list[int] = []

        def _check_native(*_args: object, **_kwargs: object) -> Available:
            threads.append(threading.get_ident())
            return Available()

        mocker.patch("respawn.watch._watcher.probe_backend", _check_native)
        mocker.patch(
            "respawn.watch._watcher.awatch",
            _fake_awatch({(Change.modified, "/p/a.py")}),
        )
        watcher = Watcher([Path("/p")])

        _ = [event async for event in watcher.watch()]

        assert watcher.backend == "native"
        assert len(threads) == 1
        assert threads[0] != threading.get_ident()
