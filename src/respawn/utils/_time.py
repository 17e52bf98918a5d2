"""Timestamp helpers."""

import time

import pendulum


def get_timestamp() -> str:
    """Get current timestamp in ISO 8601 format."""
    return pendulum.now("UTC").to_iso8601_string()


def get_local_time() -> str:
    """Get the current local wall-clock time for change descriptions."""
    return pendulum.now().format("HH:mm:ss")


def monotonic_ms() -> float:
    """Return a monotonic clock reading in milliseconds."""
    return time.monotonic() * 1000
