# pyright: reportExplicitAny=false, reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""Configuration container with typed access.

This module provides the main Config class that serves as the primary
interface for accessing respawn configuration values.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from pydantic import BaseModel, ConfigDict, PrivateAttr, ValidationError

from respawn.config._defaults import DEFAULT_CONFIG
from respawn.config._loader import deep_merge, parse_env_vars, read_toml_file
from respawn.config._models._common import ConfigSource, ConfigSourceName
from respawn.config._models._logging import LoggingConfig
from respawn.config._models._run import RunConfig
from respawn.exceptions import ConfigValidationError

if TYPE_CHECKING:
    from pathlib import Path
    from typing import Self

M = TypeVar("M", bound=BaseModel)


def _validate_section(
    model: type[M],
    section: str,
    data: dict[str, Any],
    source: str | None,
) -> M:
    try:
        return model.model_validate(data.get(section, {}))
    except ValidationError as e:
        error = e.errors()[0]
        key = ".".join(str(part) for part in (section, *error["loc"]))
        msg = f"Invalid configuration value for '{key}': {error['msg']}"
        raise ConfigValidationError(
            msg,
            key=key,
            value=error.get("input"),
            expected=error["msg"],
            source=source,
        ) from e


def _validate(
    data: dict[str, Any], *, source: str | None = None
) -> tuple[LoggingConfig, RunConfig]:
    """Validate merged configuration data and parse its sections.

    Raises:
        ConfigValidationError: On the first schema violation.
    """
    return (
        _validate_section(LoggingConfig, "logging", data, source),
        _validate_section(RunConfig, "run", data, source),
    )


class Config(BaseModel):
    """Configuration container with typed access.

    This class provides immutable, type-safe access to respawn configuration.
    Use factory methods to create instances rather than the constructor.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    _sources: tuple[ConfigSource, ...] = PrivateAttr(default=())
    _logging: LoggingConfig = PrivateAttr(default_factory=LoggingConfig)
    _run: RunConfig = PrivateAttr(default_factory=RunConfig)

    def __init__(
        self,
        *,
        _sources: tuple[ConfigSource, ...] = (),
        _logging: LoggingConfig | None = None,
        _run: RunConfig | None = None,
    ) -> None:
        """Initialize configuration container.

        This constructor is intended for internal use. Use factory methods
        like from_dict(), from_file(), or load() to create Config instances.

        Args:
            _sources: Sources that contributed to this configuration.
            _logging: Parsed logging configuration section.
            _run: Parsed run configuration section.
        """
        super().__init__()
        self._sources = _sources
        self._logging = _logging if _logging is not None else LoggingConfig()
        self._run = _run if _run is not None else RunConfig()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create configuration from a dictionary.

        Args:
            data: Dictionary of configuration values.

        Returns:
            Configuration object from the dictionary merged over defaults.

        Raises:
            ConfigValidationError: If validation fails.
        """
        merged = deep_merge(DEFAULT_CONFIG, data)
        logging_config, run_config = _validate(merged)
        return cls(_logging=logging_config, _run=run_config)

    @classmethod
    def from_file(
        cls, path: Path, *, cli_overrides: dict[str, Any] | None = None
    ) -> Self:
        """Load configuration from a specific file.

        A ``pyproject.toml`` file contributes its ``[tool.respawn]`` table;
        any other file is read as a whole.

        Args:
            path: Path to the TOML config file.
            cli_overrides: Dict of CLI argument overrides applied over the file.

        Returns:
            Configuration object from the specified file and overrides only.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigLoadError: If the file cannot be parsed.
            ConfigValidationError: If validation fails.
        """
        from respawn.config._discovery import read_pyproject_section  # noqa: PLC0415

        if path.name == "pyproject.toml":
            data = read_pyproject_section(path)
            name = ConfigSourceName.PYPROJECT
        else:
            data = read_toml_file(path)
            name = ConfigSourceName.PROJECT

        sources = [ConfigSource(name=name, path=path, exists=True, values=data)]
        merged = deep_merge(DEFAULT_CONFIG, data)
        if cli_overrides:
            sources.insert(
                0,
                ConfigSource(
                    name=ConfigSourceName.CLI,
                    path=None,
                    exists=True,
                    values=cli_overrides,
                ),
            )
            merged = deep_merge(merged, cli_overrides)
        logging_config, run_config = _validate(merged, source=str(path))

        return cls(
            _sources=tuple(sources),
            _logging=logging_config,
            _run=run_config,
        )

    @classmethod
    def load(
        cls,
        *,
        project_root: Path | None = None,
        include_env: bool = True,
        cli_overrides: dict[str, Any] | None = None,
    ) -> Self:
        """Load merged configuration from all sources.

        Discovers all configuration sources and merges them in precedence order
        (defaults -> user -> pyproject -> project -> env -> cli).

        Args:
            project_root: Project root directory. If None, auto-detect by
                searching upward for a project marker file.
            include_env: Include environment variables as a source.
            cli_overrides: Dict of CLI argument overrides.

        Returns:
            Merged configuration object.

        Raises:
            ConfigLoadError: If config files cannot be loaded.
            ConfigValidationError: If merged config fails validation.
        """
        from respawn.config._discovery import (  # noqa: PLC0415
            discover_sources,
            read_pyproject_section,
        )

        sources = discover_sources(
            project_root=project_root,
            include_env=include_env,
            cli_overrides=cli_overrides,
        )

        # Sources are discovered highest-to-lowest, so reverse for merging
        merged: dict[str, Any] = {}
        loaded_sources: list[ConfigSource] = []

        for source in reversed(sources):
            values: dict[str, Any] = {}

            if source.name in (ConfigSourceName.DEFAULT, ConfigSourceName.CLI):
                values = source.values
            elif source.name == ConfigSourceName.ENV:
                values = parse_env_vars()
            elif source.path and source.exists:
                if source.name == ConfigSourceName.PYPROJECT:
                    values = read_pyproject_section(source.path)
                else:
                    values = read_toml_file(source.path)

            loaded_sources.append(
                ConfigSource(
                    name=source.name,
                    path=source.path,
                    exists=source.exists,
                    values=values,
                )
            )

            if values:
                merged = deep_merge(merged, values)

        logging_config, run_config = _validate(merged)

        return cls(
            _sources=tuple(reversed(loaded_sources)),
            _logging=logging_config,
            _run=run_config,
        )

    @property
    def sources(self) -> list[ConfigSource]:
        """Return the sources that contributed to this configuration."""
        return list(self._sources)

    @property
    def logging(self) -> LoggingConfig:
        """Return the logging configuration section."""
        return self._logging

    @property
    def run(self) -> RunConfig:
        """Return the run configuration section."""
        return self._run

