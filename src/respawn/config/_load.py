from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

from respawn.exceptions import ConfigError

from ._models import Config

if TYPE_CHECKING:
    from pathlib import Path


def _fail_or_warn(error_msg: str, *, strict_mode: bool, label: str) -> None:
    if strict_mode:
        print(f"Error: {error_msg}", file=sys.stderr)  # noqa: T201
        sys.exit(1)
    print(f"Warning: {label}: {error_msg}", file=sys.stderr)  # noqa: T201


def safe_load_config(
    *,
    config_path: Path | None = None,
    project_root: Path | None = None,
    cli_overrides: dict[str, object] | None = None,
) -> tuple[Config, str | None]:
    """Load configuration with error handling.

    Attempts to load configuration and handles errors based on the
    RESPAWN_STRICT_CONFIG environment variable:
    - If unset or "0": warn to stderr and return the defaults
    - If "1": fail fast with sys.exit(1)

    When config_path is provided, the file must exist (explicit user request).
    CLI overrides are merged over the explicit file in that case too.

    Args:
        config_path: Explicit path to config file (--config flag).
        project_root: Project root directory override.
        cli_overrides: CLI argument overrides.

    Returns:
        Tuple of (Config, error_message). On success, error_message is None.
        On failure (non-strict mode), returns the default Config with the
        error message.
    """
    strict_mode = os.environ.get("RESPAWN_STRICT_CONFIG", "0") == "1"

    try:
        if config_path is not None:
            if not config_path.exists():
                print(  # noqa: T201
                    f"Error: Config file not found: {config_path}", file=sys.stderr
                )
                sys.exit(1)
            config = Config.from_file(config_path, cli_overrides=cli_overrides)
            return config, None

        config = Config.load(
            project_root=project_root,
            include_env=True,
            cli_overrides=cli_overrides,
        )
    except ConfigError as e:
        _fail_or_warn(str(e), strict_mode=strict_mode, label="Failed to load config")
        return Config.from_dict({}), str(e)
    except OSError as e:
        error_msg = f"Failed to load config: {e}"
        _fail_or_warn(error_msg, strict_mode=strict_mode, label="Config unavailable")
        return Config.from_dict({}), error_msg
    else:
        return config, None
