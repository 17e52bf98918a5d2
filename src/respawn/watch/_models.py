"""Data models for filesystem change events."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

import orjson


class ChangeKind(StrEnum):
    """Kinds of filesystem change reported by the watcher."""

    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """Immutable filesystem change record.

    This is also the payload forwarded to the child for live reloads, one
    JSON object per line: ``{"kind": ..., "path": ..., "timestamp": ...}``.

    Attributes:
        kind: What happened to the path.
        path: Absolute path as reported by the watch backend.
        timestamp: ISO 8601 formatted timestamp of when it was observed.
    """

    kind: ChangeKind
    path: str
    timestamp: str

    def to_json_line(self) -> bytes:
        """Serialize the event as a newline-terminated JSON object."""
        return orjson.dumps(
            {"kind": self.kind.value, "path": self.path, "timestamp": self.timestamp}
        ) + b"\n"

    @classmethod
    def from_json_line(cls, line: str | bytes) -> ChangeEvent:
        """Parse an event previously produced by ``to_json_line``.

        Raises:
            ValueError: If the line is not a valid event object.
        """
        try:
            data = orjson.loads(line)
            return cls(
                kind=ChangeKind(data["kind"]),
                path=str(data["path"]),
                timestamp=str(data["timestamp"]),
            )
        except (ValueError, KeyError, TypeError) as e:
            msg = f"Invalid change event: {line!r}"
            raise ValueError(msg) from e
