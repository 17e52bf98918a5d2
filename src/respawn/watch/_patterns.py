"""Path pattern compilation and change classification.

Patterns are case-insensitive path fragments. ``*`` matches one or more
characters and everything else is literal. A pattern matches when it covers
whole path segments: ``log`` matches ``log`` and ``app/log/today.txt`` but
not ``catalog.py``. A leading ``/`` anchors the pattern to the start of the
relative path.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, final

if TYPE_CHECKING:
    from collections.abc import Iterable


class Classification(StrEnum):
    """How a change to a path should be handled.

    - IGNORED: Not reported at all
    - LIVE: Forwarded to the running child
    - RESTART: The child is restarted
    """

    IGNORED = "ignored"
    LIVE = "live"
    RESTART = "restart"


@dataclass(frozen=True, slots=True)
class Matcher:
    """A compiled set of path patterns.

    Attributes:
        patterns: The source patterns, in configuration order.
        regex: The combined expression, or None when there are no patterns.
    """

    patterns: tuple[str, ...]
    regex: re.Pattern[str] | None

    def matches(self, path: str) -> bool:
        """Return True if any pattern matches somewhere in ``path``."""
        return self.regex is not None and self.regex.search(path) is not None


def _translate(pattern: str) -> str:
    if pattern.startswith("/"):
        prefix = "^"
        pattern = pattern[1:]
    else:
        prefix = "(?:^|/)"
    body = ".+".join(re.escape(piece) for piece in pattern.split("*"))
    return f"{prefix}{body}(?:$|/)"


def compile_patterns(patterns: str | Iterable[str]) -> Matcher:
    """Compile glob-like patterns into a single matcher.

    Args:
        patterns: A pattern or an iterable of patterns. Empty strings are
            skipped.

    Returns:
        A Matcher. With no usable patterns it never matches.
    """
    items = (patterns,) if isinstance(patterns, str) else tuple(patterns)
    usable = tuple(item for item in items if item)

    if not usable:
        return Matcher(patterns=(), regex=None)

    combined = "|".join(_translate(item) for item in usable)
    return Matcher(patterns=usable, regex=re.compile(f"(?:{combined})", re.IGNORECASE))


def classify(relative_path: str, ignore: Matcher, live: Matcher) -> Classification:
    """Classify a relative path.

    Ignore patterns are checked before live patterns regardless of how
    either set was configured.
    """
    if ignore.matches(relative_path):
        return Classification.IGNORED
    if live.matches(relative_path):
        return Classification.LIVE
    return Classification.RESTART


@final
class PathClassifier:
    """Classifies changed paths relative to a project root."""

    __slots__ = ("_ignore", "_live", "_root")

    def __init__(
        self,
        ignore: str | Iterable[str],
        live: str | Iterable[str],
        root: Path | None = None,
    ) -> None:
        """Initialize the classifier.

        Args:
            ignore: Patterns whose changes are ignored.
            live: Patterns whose changes are live-reloadable.
            root: Directory that paths are made relative to. Defaults to
                the current working directory.
        """
        self._ignore = compile_patterns(ignore)
        self._live = compile_patterns(live)
        self._root = _normalize(str(root if root is not None else Path.cwd()))

    @property
    def root(self) -> str:
        """Return the normalized project root."""
        return self._root

    def relative(self, path: str | Path) -> str:
        """Return ``path`` relative to the root, with ``/`` separators.

        Paths outside the root are returned normalized but otherwise
        unchanged.
        """
        text = _normalize(str(path))
        prefix = self._root.rstrip("/") + "/"
        if text.startswith(prefix):
            return text[len(prefix) :]
        return text

    def classify(self, path: str | Path) -> Classification:
        """Classify an absolute or root-relative path."""
        return classify(self.relative(path), self._ignore, self._live)


def _normalize(path: str) -> str:
    return path.replace("\\", "/")
