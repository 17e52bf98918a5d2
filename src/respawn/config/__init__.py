"""respawn configuration.

This module provides the public API for respawn configuration management,
including loading, validation, and typed access to configuration values.

Example:
    >>> from respawn.config import Config
    >>> config = Config.load()
    >>> config.run.clean_time
    2000.0
"""

from respawn.exceptions import (
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
)

from ._defaults import DEFAULT_CONFIG, DEFAULT_IGNORE_PATTERNS, DEFAULT_LIVE_PATTERNS
from ._discovery import (
    PROJECT_CONFIG_FILENAME,
    PYPROJECT_FILENAME,
    discover_sources,
    find_project_root,
    get_user_config_path,
    read_pyproject_section,
)
from ._load import safe_load_config
from ._loader import deep_merge, parse_env_vars, read_toml_file, set_nested_key
from ._models import (
    Config,
    ConfigSource,
    ConfigSourceName,
    LogFormat,
    LoggingConfig,
    LogLevel,
    RunConfig,
)

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_IGNORE_PATTERNS",
    "DEFAULT_LIVE_PATTERNS",
    "PROJECT_CONFIG_FILENAME",
    "PYPROJECT_FILENAME",
    "Config",
    "ConfigError",
    "ConfigLoadError",
    "ConfigSource",
    "ConfigSourceName",
    "ConfigValidationError",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "RunConfig",
    "deep_merge",
    "discover_sources",
    "find_project_root",
    "get_user_config_path",
    "parse_env_vars",
    "read_pyproject_section",
    "read_toml_file",
    "safe_load_config",
    "set_nested_key",
]
