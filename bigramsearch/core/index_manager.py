"""
Index persistence and the load-or-rebuild lifecycle.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional

import psutil

from .bigram_index import BigramIndex
from .errors import IndexLoadError
from .indexer import IndexBuildReport, count_files, make_index
from .searcher import SearchOutcome, Searcher

logger = logging.getLogger(__name__)


def save_index(index: BigramIndex, fpath) -> None:
    """Write the index document via a temp file and atomic rename."""
    fpath = Path(fpath)
    fpath.parent.mkdir(parents=True, exist_ok=True)
    content = json.dumps(index.serialize())
    fd, tmp = tempfile.mkstemp(prefix=fpath.name + ".", suffix=".tmp", dir=str(fpath.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp, fpath)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise
    logger.info(f"Index saved: {index.number_of_files} files to {fpath}")


def load_index(fpath) -> BigramIndex:
    """Read an index document; IndexLoadError if absent or malformed."""
    try:
        with open(fpath, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise IndexLoadError(f"Cannot read index file {fpath}: {e}") from e
    except ValueError as e:
        raise IndexLoadError(f"Index file {fpath} is not valid JSON: {e}") from e
    index = BigramIndex.deserialize(data)
    logger.info(f"Index loaded: {index.number_of_files} files from {fpath}")
    return index


class IndexManager:
    """Owns the in-process index for one configured root."""

    def __init__(self, config_mgr, progress=False):
        self.config_mgr = config_mgr
        self.progress = progress
        self.index: Optional[BigramIndex] = None
        self.is_ready = False
        self.last_build_report: Optional[IndexBuildReport] = None

    @property
    def index_path(self) -> Path:
        return self.config_mgr.get_index_path()

    def _filters(self):
        return (
            self.config_mgr.get_include_filter(),
            self.config_mgr.get_exclude_filter(),
        )

    def load(self) -> BigramIndex:
        """Load the saved index; IndexLoadError if it belongs to another root."""
        root = self.config_mgr.get_root_path()
        indexed_root = self.config_mgr.get_indexed_root(self.index_path)
        if indexed_root is not None and indexed_root != root:
            raise IndexLoadError(f"{self.index_path} was built for {indexed_root}, not {root}")
        self.index = load_index(self.index_path)
        self.is_ready = True
        return self.index

    def rebuild(self) -> BigramIndex:
        """Build from the configured root and persist; IndexBuildError on failure."""
        root = self.config_mgr.get_root_path()
        include, exclude = self._filters()
        index, report = make_index(
            root,
            include,
            exclude,
            follow_symlinks=self.config_mgr.get_follow_symlinks(),
            progress=self.progress,
        )
        self.index = index
        self.is_ready = True
        self.last_build_report = report
        try:
            save_index(index, self.index_path)
        except OSError as e:
            # the in-memory index stays usable
            logger.error(f"Failed to save index to {self.index_path}: {e}")
        else:
            self.config_mgr.set_indexed_root(self.index_path, root)
        return index

    def get_index(self) -> BigramIndex:
        if self.index is not None:
            return self.index
        try:
            logger.info("Loading index ...")
            return self.load()
        except IndexLoadError as e:
            logger.info(f"Index load unsuccessful ({e}). Creating new index ...")
        return self.rebuild()

    def searcher(self) -> Searcher:
        return Searcher(self.get_index())

    def search(self, query: str) -> List[str]:
        return self.searcher().search(query)

    def search_with_stats(self, query: str) -> SearchOutcome:
        return self.searcher().search_with_stats(query)

    def count_files(self) -> int:
        include, exclude = self._filters()
        return count_files(
            self.config_mgr.get_root_path(),
            include,
            exclude,
            follow_symlinks=self.config_mgr.get_follow_symlinks(),
            progress=self.progress,
        )

    def stats(self) -> dict:
        index = self.get_index()
        path = self.index_path
        try:
            index_size = path.stat().st_size
        except OSError:
            index_size = 0
        return {
            "root": self.config_mgr.get_root_path(),
            "index_file": str(path),
            "index_size": index_size,
            "files": index.number_of_files,
            "code_entries": index.number_of_code_entries,
            "entries": index.number_of_entries,
            "memory_rss": psutil.Process().memory_info().rss,
        }


__all__ = ["IndexManager", "save_index", "load_index"]
