"""Project root and config path discovery utilities.

This module provides functions for locating the project root by searching
upward through the directory tree for a ``respawn.toml`` or ``pyproject.toml``
marker file, and for determining the platform-specific user config path.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import platformdirs

from ._defaults import DEFAULT_CONFIG
from ._loader import read_toml_file
from ._models._common import ConfigSource, ConfigSourceName

PROJECT_CONFIG_FILENAME = "respawn.toml"
PYPROJECT_FILENAME = "pyproject.toml"


def find_project_root(start: Path | None = None) -> Path | None:
    """Find the project root by searching upward for a marker file.

    Args:
        start: Directory to start searching from. Defaults to current
            working directory if not specified.

    Returns:
        The first directory containing ``respawn.toml`` or ``pyproject.toml``,
        or None if the filesystem root is reached.
    """
    current = (start or Path.cwd()).resolve()

    while True:
        if (current / PROJECT_CONFIG_FILENAME).is_file() or (
            current / PYPROJECT_FILENAME
        ).is_file():
            return current
        parent = current.parent
        if parent == current:
            return None
        current = parent


def get_user_config_path() -> Path:
    r"""Get platform-specific user config file path.

    - Linux: ``~/.config/respawn/config.toml``
    - macOS: ``~/Library/Application Support/respawn/config.toml``
    - Windows: ``%APPDATA%\respawn\config.toml``

    The path is returned regardless of whether the file exists.
    """
    return platformdirs.user_config_path("respawn") / "config.toml"


def read_pyproject_section(path: Path) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Read the ``[tool.respawn]`` table from a pyproject file.

    Returns:
        The table contents, or an empty dict if the table is absent.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigLoadError: If the file cannot be parsed.
    """
    tool = read_toml_file(path).get("tool", {})
    section = tool.get("respawn", {}) if isinstance(tool, dict) else {}
    return section if isinstance(section, dict) else {}


def discover_sources(
    *,
    project_root: Path | None = None,
    include_env: bool = True,
    cli_overrides: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny]
) -> list[ConfigSource]:
    """Discover configuration sources.

    File-backed sources carry empty values; the caller loads them. Sources
    are returned in precedence order, highest first.

    Args:
        project_root: Project root override. Auto-detected when None.
        include_env: Whether to include the environment source.
        cli_overrides: Values given on the command line, if any.

    Returns:
        List of ConfigSource objects, highest precedence first.
    """
    root = project_root if project_root is not None else find_project_root()
    sources: list[ConfigSource] = []

    if cli_overrides:
        sources.append(
            ConfigSource(
                name=ConfigSourceName.CLI,
                path=None,
                exists=True,
                values=cli_overrides,
            )
        )

    if include_env:
        sources.append(
            ConfigSource(name=ConfigSourceName.ENV, path=None, exists=True, values={})
        )

    if root is not None:
        project_path = root / PROJECT_CONFIG_FILENAME
        sources.append(
            ConfigSource(
                name=ConfigSourceName.PROJECT,
                path=project_path,
                exists=project_path.is_file(),
                values={},
            )
        )
        pyproject_path = root / PYPROJECT_FILENAME
        sources.append(
            ConfigSource(
                name=ConfigSourceName.PYPROJECT,
                path=pyproject_path,
                exists=pyproject_path.is_file(),
                values={},
            )
        )

    user_path = get_user_config_path()
    sources.append(
        ConfigSource(
            name=ConfigSourceName.USER,
            path=user_path,
            exists=user_path.is_file(),
            values={},
        )
    )

    sources.append(
        ConfigSource(
            name=ConfigSourceName.DEFAULT,
            path=None,
            exists=True,
            values=DEFAULT_CONFIG,
        )
    )

    return sources
