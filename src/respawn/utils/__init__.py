"""Shared utilities for respawn."""

from ._logging import LogFormatType, create_logger, create_null_logger
from ._time import get_local_time, get_timestamp, monotonic_ms

__all__ = [
    "LogFormatType",
    "create_logger",
    "create_null_logger",
    "get_local_time",
    "get_timestamp",
    "monotonic_ms",
]
