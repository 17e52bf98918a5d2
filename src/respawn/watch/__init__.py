"""Filesystem watching and change classification.

Key Components:
    - Watcher: Streams ChangeEvents for a set of directories
    - probe_backend: Native-versus-polling capability negotiation
    - PathClassifier: Classifies paths as ignored, live, or restart
    - compile_patterns / classify: The functional core of PathClassifier
"""

from ._backend import Available, ProbeResult, Unavailable, probe_backend
from ._models import ChangeEvent, ChangeKind
from ._patterns import Classification, Matcher, PathClassifier, classify, compile_patterns
from ._watcher import Watcher, to_change_event

__all__ = [
    "Available",
    "ChangeEvent",
    "ChangeKind",
    "Classification",
    "Matcher",
    "PathClassifier",
    "ProbeResult",
    "Unavailable",
    "Watcher",
    "classify",
    "compile_patterns",
    "probe_backend",
    "to_change_event",
]
