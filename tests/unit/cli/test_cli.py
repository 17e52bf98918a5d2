from __future__ import annotations

import os
import sys
from io import StringIO
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from rich.console import Console

from respawn.cli import (
    ExitCode,
    build_cli_overrides,
    create_app,
    exit_with_error,
    resolve_watch_dirs,
    split_child_args,
)
from respawn.config import LogLevel
from respawn.exceptions import ConfigValidationError

if TYPE_CHECKING:
    from unittest.mock import MagicMock

    from cyclopts import App
    from pytest_mock import MockerFixture


def _invoke(app: App, tokens: list[str]) -> int:
    try:
        app(tokens)
    except SystemExit as e:
        return int(e.code or 0)
    return 0


@pytest.fixture(autouse=True)
def _isolate_config(
    monkeypatch: pytest.MonkeyPatch, mocker: MockerFixture, tmp_path: Path
) -> None:
    for key in list(os.environ):
        if key.startswith("RESPAWN_"):
            monkeypatch.delenv(key)
    _ = mocker.patch(
        "respawn.config._discovery.get_user_config_path",
        return_value=tmp_path / "user" / "config.toml",
    )


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    _ = (root / "respawn.toml").write_text("[run]\nclean_time = 300\n")
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def run_supervisor(mocker: MockerFixture) -> MagicMock:
    return mocker.patch("respawn.cli._app.run_supervisor")


@pytest.fixture
def error_output() -> StringIO:
    return StringIO()


def _app(error_output: StringIO, child_args: tuple[str, ...] = ()) -> App:
    return create_app(
        child_args=child_args,
        console=Console(file=StringIO()),
        error_console=Console(file=error_output, width=200),
    )


class TestSplitChildArgs:
    def test_without_separator(self) -> None:
        assert split_child_args(["app.py", "--clean-time", "5"]) == (
            ["app.py", "--clean-time", "5"],
            [],
        )

    def test_splits_at_first_separator(self) -> None:
        assert split_child_args(["app.py", "--", "-v", "--", "x"]) == (
            ["app.py"],
            ["-v", "--", "x"],
        )

    def test_trailing_separator(self) -> None:
        assert split_child_args(["--"]) == ([], [])


class TestBuildCliOverrides:
    def test_nothing_set(self) -> None:
        assert build_cli_overrides() is None

    def test_run_section(self) -> None:
        overrides = build_cli_overrides(
            watch_dir=[Path("src"), Path("public")],
            ignore=["*.tmp"],
            live=["assets/**"],
            min_restart_delay=10,
            clean_time=0,
            force_polling=True,
        )

        assert overrides == {
            "run": {
                "watch_dirs": ["src", "public"],
                "ignore": ["*.tmp"],
                "live": ["assets/**"],
                "min_restart_delay": 10,
                "clean_time": 0,
                "force_polling": True,
            }
        }

    def test_log_level(self) -> None:
        assert build_cli_overrides(log_level=LogLevel.DEBUG) == {
            "logging": {"level": "debug"}
        }


class TestResolveWatchDirs:
    def test_empty_means_root(self, tmp_path: Path) -> None:
        assert resolve_watch_dirs(tmp_path, ()) == (tmp_path,)

    def test_relative_to_root(self, tmp_path: Path) -> None:
        (tmp_path / "src").mkdir()

        assert resolve_watch_dirs(tmp_path, (Path("src"),)) == (tmp_path / "src",)

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            _ = resolve_watch_dirs(tmp_path, (Path("nope"),))

        assert exc_info.value.key == "run.watch_dirs"


class TestExitWithError:
    def test_prints_and_exits(self) -> None:
        output = StringIO()

        with pytest.raises(SystemExit) as exc_info:
            exit_with_error(
                "boom", ExitCode.VALIDATION_ERROR, console=Console(file=output)
            )

        assert exc_info.value.code == ExitCode.VALIDATION_ERROR
        assert "Error: boom" in output.getvalue()


@pytest.mark.usefixtures("project")
class TestRunCommand:
    def test_runs_discovered_entry(
        self, project: Path, run_supervisor: MagicMock, error_output: StringIO
    ) -> None:
        _ = (project / "app.py").write_text("print('hi')\n")

        code = _invoke(_app(error_output, ("--port", "8000")), [])

        assert code == 0
        run_supervisor.assert_called_once()
        command, config = run_supervisor.call_args.args
        assert command == (sys.executable, "app.py", "--port", "8000")
        assert config.clean_time == 300
        assert run_supervisor.call_args.kwargs["root"] == project

    def test_cli_options_override_project_config(
        self, project: Path, run_supervisor: MagicMock, error_output: StringIO
    ) -> None:
        _ = (project / "main.py").write_text("")

        code = _invoke(
            _app(error_output),
            ["--clean-time", "0", "--min-restart-delay", "5", "--force-polling"],
        )

        assert code == 0
        config = run_supervisor.call_args.args[1]
        assert config.clean_time == 0
        assert config.min_restart_delay == 5
        assert config.force_polling is True

    def test_explicit_entry(
        self, run_supervisor: MagicMock, error_output: StringIO
    ) -> None:
        code = _invoke(_app(error_output), ["server.py"])

        assert code == 0
        assert run_supervisor.call_args.args[0][1:] == ("server.py",)

    def test_missing_entry_point_exits_with_failure(
        self, run_supervisor: MagicMock, error_output: StringIO
    ) -> None:
        code = _invoke(_app(error_output), [])

        assert code == ExitCode.FAILURE
        assert "No entry point found" in error_output.getvalue()
        run_supervisor.assert_not_called()

    def test_invalid_watch_dir_exits_with_validation_error(
        self, run_supervisor: MagicMock, error_output: StringIO
    ) -> None:
        run_supervisor.side_effect = ConfigValidationError(
            "Watch directory does not exist: nope",
            key="run.watch_dirs",
            value="nope",
            expected="an existing directory",
        )

        code = _invoke(_app(error_output), ["app.py"])

        assert code == ExitCode.VALIDATION_ERROR
        assert "Watch directory does not exist" in error_output.getvalue()

    def test_cli_options_override_explicit_config_file(
        self,
        tmp_path: Path,
        run_supervisor: MagicMock,
        error_output: StringIO,
        mocker: MockerFixture,
    ) -> None:
        config_file = tmp_path / "other.toml"
        _ = config_file.write_text("[run]\nclean_time = 700\nmin_restart_delay = 50\n")
        create_logger = mocker.patch("respawn.cli._app.create_logger")

        code = _invoke(
            _app(error_output),
            ["--config", str(config_file), "--min-restart-delay", "5", "app.py"],
        )

        assert code == 0
        config = run_supervisor.call_args.args[1]
        assert config.clean_time == 700
        assert config.min_restart_delay == 5
        create_logger.return_value.debug.assert_any_call(
            "config_loaded", sources=["cli", "project"]
        )
