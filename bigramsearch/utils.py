"""
Path filter and formatting helpers.
"""

import re
from typing import Callable, Optional

PathPredicate = Callable[[str], bool]


def compile_path_filter(pattern: Optional[str]) -> Optional[PathPredicate]:
    """Compile a regex into a predicate searched anywhere in the full path.

    An empty pattern yields None (no filtering). Raises re.error for an
    invalid pattern.
    """
    if not pattern:
        return None
    cre = re.compile(pattern)
    return lambda path: cre.search(path) is not None


def should_skip_path(path, exclude: Optional[PathPredicate]) -> bool:
    """Return True if path is excluded."""
    return exclude is not None and exclude(path)


def should_index_file(path, include: Optional[PathPredicate], exclude: Optional[PathPredicate]) -> bool:
    """Exclusion first, then inclusion; files only."""
    if should_skip_path(path, exclude):
        return False
    return include is None or include(path)


def compress_path(path: str, width: int = 50) -> str:
    """Keep the tail of a long path for one-line status output."""
    if len(path) <= width:
        return path
    return path[len(path) - width:]


def format_size(size):
    """Format file size."""
    if size <= 0:
        return "-"
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} PB"


__all__ = [
    "PathPredicate",
    "compile_path_filter",
    "should_skip_path",
    "should_index_file",
    "compress_path",
    "format_size",
]
