"""Locating what to run."""

from ._entry import EntryPoint, normalize_package_name, resolve_entry_point

__all__ = ["EntryPoint", "normalize_package_name", "resolve_entry_point"]
