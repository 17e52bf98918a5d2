"""Default configuration values.

This module defines the built-in default configuration values that are used
when no other configuration sources provide values. Durations are in
milliseconds.

Note: DEFAULT_CONFIG is intentionally a plain dict for type compatibility
with functions like deep_merge. The merge functions create copies, so mutation
of the original is not a concern in practice.
"""

from typing import Any

DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = (
    ".DS_Store",
    ".cache",
    ".git",
    ".idea",
    ".project",
    "coverage",
    "data",
    "log",
    "__pycache__",
    "*.pyc",
    ".venv",
    ".pytest_cache",
)
"""Paths whose changes are never reported."""

DEFAULT_LIVE_PATTERNS: tuple[str, ...] = (
    "public",
    "scripts",
    "styles",
    "views",
    "static",
    "templates",
)
"""Paths whose changes are forwarded to the child instead of restarting it."""

DEFAULT_CONFIG: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
    "logging": {
        "level": "warning",
        "format": "text",
        "file": "",
    },
    "run": {
        "min_restart_delay": 500,
        "max_restart_delay": 5000,
        "restart_delay_backoff": 2,
        "clean_time": 2000,
        "kill_timeout": 5000,
        "debounce": 100,
        "force_polling": False,
        "watch_dirs": [],
        "ignore": list(DEFAULT_IGNORE_PATTERNS),
        "live": list(DEFAULT_LIVE_PATTERNS),
        "python": "",
    },
}
