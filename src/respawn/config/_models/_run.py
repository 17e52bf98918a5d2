"""Run configuration model.

This module provides the RunConfig Pydantic model holding the supervisor's
timing parameters and the path patterns used to classify changes.
"""

from pathlib import Path  # noqa: TC003 - Used at runtime by pydantic
from typing import ClassVar, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from respawn.config._defaults import DEFAULT_IGNORE_PATTERNS, DEFAULT_LIVE_PATTERNS


class RunConfig(BaseModel):
    """Supervisor configuration section.

    All durations are milliseconds.

    Attributes:
        min_restart_delay: Delay used for the first escalation after a clean run.
        max_restart_delay: Upper bound on the restart delay.
        restart_delay_backoff: Multiplier applied to the delay per unclean restart.
        clean_time: How long a run must survive to count as stable.
        kill_timeout: Grace period between SIGTERM and SIGKILL.
        debounce: Window in which the watch backend groups raw events.
        force_polling: Skip the native watch backend.
        watch_dirs: Directories to watch (empty means the working directory).
        ignore: Patterns whose changes are ignored.
        live: Patterns whose changes are forwarded to the child.
        python: Interpreter used to run the entry point (empty means the
            interpreter running respawn).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    min_restart_delay: float = Field(default=500, ge=0)
    max_restart_delay: float = Field(default=5000, ge=0)
    restart_delay_backoff: float = Field(default=2, gt=1)
    clean_time: float = Field(default=2000, ge=0)
    kill_timeout: float = Field(default=5000, ge=0)
    debounce: int = Field(default=100, ge=0)
    force_polling: bool = False
    watch_dirs: tuple[Path, ...] = ()
    ignore: tuple[str, ...] = DEFAULT_IGNORE_PATTERNS
    live: tuple[str, ...] = DEFAULT_LIVE_PATTERNS
    python: str = ""

    @field_validator("ignore", "live", "watch_dirs", mode="before")
    @classmethod
    def _single_value_as_list(cls, value: object) -> object:
        """Treat a single string as a one-element list."""
        if isinstance(value, str):
            return [value]
        return value

    @model_validator(mode="after")
    def _check_delay_bounds(self) -> Self:
        if self.min_restart_delay > self.max_restart_delay:
            msg = (
                f"min_restart_delay ({self.min_restart_delay}) must not exceed "
                f"max_restart_delay ({self.max_restart_delay})"
            )
            raise ValueError(msg)
        return self
