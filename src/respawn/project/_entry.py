"""Entry point resolution for the supervised child.

When no entry is given on the command line, the project directory is
searched for something runnable, in order:

1. ``__main__.py`` in the directory itself
2. The package named by ``[project].name`` in ``pyproject.toml``, if it
   has a ``__main__.py`` (at the root or under ``src/``), run with ``-m``
3. ``main.py``
4. ``app.py``

A package found under ``src/`` is run as ``python -m package`` from the
project directory, so it is importable only once the project is installed
into the child's interpreter (for example with ``pip install -e .``).
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from respawn.config import PYPROJECT_FILENAME, read_toml_file
from respawn.exceptions import ConfigLoadError, EntryPointNotFoundError

if TYPE_CHECKING:
    from collections.abc import Sequence

_SCRIPT_CANDIDATES = ("main.py", "app.py")


@dataclass(frozen=True, slots=True)
class EntryPoint:
    """Something the child interpreter can run.

    Exactly one of ``script`` and ``module`` is set.

    Attributes:
        script: Script path, run as ``python script``.
        module: Module name, run as ``python -m module``.
    """

    script: str | None = None
    module: str | None = None

    def __post_init__(self) -> None:
        if (self.script is None) == (self.module is None):
            msg = "EntryPoint needs exactly one of script and module"
            raise ValueError(msg)

    @property
    def display(self) -> str:
        """Return a short human-readable form."""
        return self.script if self.script is not None else f"-m {self.module}"

    def command(self, python: str = "", args: Sequence[str] = ()) -> tuple[str, ...]:
        """Build the child's argument vector.

        Args:
            python: Interpreter to use. Empty means the one running respawn.
            args: Extra arguments passed verbatim to the child.

        Returns:
            The full command.
        """
        interpreter = python or sys.executable
        if self.module is not None:
            return (interpreter, "-m", self.module, *args)
        return (interpreter, str(self.script), *args)


def normalize_package_name(name: str) -> str:
    """Map a distribution name to its likely import name.

    Examples:
        >>> normalize_package_name("My-Web.App")
        'my_web_app'
    """
    return name.strip().replace("-", "_").replace(".", "_").lower()


def _project_name(root: Path) -> str | None:
    pyproject = root / PYPROJECT_FILENAME
    if not pyproject.is_file():
        return None
    try:
        data = read_toml_file(pyproject)
    except ConfigLoadError:
        return None
    project = data.get("project")
    if not isinstance(project, dict):
        return None
    name = project.get("name")  # pyright: ignore[reportUnknownMemberType, reportUnknownVariableType]
    return name if isinstance(name, str) and name.strip() else None


def resolve_entry_point(root: Path, explicit: str | None = None) -> EntryPoint:
    """Find the entry point to supervise.

    Args:
        root: Project directory to search.
        explicit: Entry given by the user. Passed through without checks.

    Returns:
        The entry point.

    Raises:
        EntryPointNotFoundError: If nothing runnable is found.
    """
    if explicit:
        return EntryPoint(script=explicit)

    tried: list[str] = []

    tried.append("__main__.py")
    if (root / "__main__.py").is_file():
        return EntryPoint(script="__main__.py")

    name = _project_name(root)
    if name is not None:
        package = normalize_package_name(name)
        for base in (root, root / "src"):
            main_file = base / package / "__main__.py"
            tried.append(str(main_file.relative_to(root)))
            if main_file.is_file():
                return EntryPoint(module=package)

    for candidate in _SCRIPT_CANDIDATES:
        tried.append(candidate)
        if (root / candidate).is_file():
            return EntryPoint(script=candidate)

    msg = f"No entry point found in {root} (tried: {', '.join(tried)})"
    if name is not None:
        msg += (
            ". A package under src/ also needs the project installed"
            " (pip install -e .) to run with -m"
        )
    raise EntryPointNotFoundError(msg, search_root=root, candidates=tuple(tried))
