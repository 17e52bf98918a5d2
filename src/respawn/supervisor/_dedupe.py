"""Failure output canonicalization.

Two crash-loop runs rarely print byte-identical output: ports, pids,
durations and timestamps change, and concurrent loggers interleave lines
differently. Canonical text masks the first number on each line and sorts
the lines, so runs that differ only in that noise compare equal.
"""

import re

PLACEHOLDER = "#"

# The placeholder is part of the run so that canonical text is a fixed point.
_FIRST_NUMBER = re.compile(r"[0-9#]+")


def canonicalize(text: str) -> str:
    """Return the canonical form of captured output.

    Each line is trimmed and its first run of digits becomes ``#``. Empty
    lines are dropped and the rest are sorted.

    Examples:
        >>> canonicalize("listening on 3000\\nerror at 12:01")
        'error at #:01\\nlistening on #'
    """
    lines = (
        _FIRST_NUMBER.sub(PLACEHOLDER, line.strip(), count=1)
        for line in text.splitlines()
    )
    return "\n".join(sorted(line for line in lines if line))


def is_same_failure(previous: str, current: str) -> bool:
    """Return True if two raw outputs describe the same failure."""
    return canonicalize(previous) == canonicalize(current)
