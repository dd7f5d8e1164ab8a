"""
Exceptions raised by the index core.
"""


class BigramSearchError(Exception):
    """Base class for index errors."""


class IndexLoadError(BigramSearchError):
    """The persisted index is missing, unreadable or malformed."""


class IndexBuildError(BigramSearchError):
    """The index could not be built (e.g. the root path is inaccessible)."""


__all__ = ["BigramSearchError", "IndexLoadError", "IndexBuildError"]
