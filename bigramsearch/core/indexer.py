"""
Index construction: filesystem traversal and per-file bigram scanning.
"""

import logging
import os
import time
from typing import Iterator, List, Optional, Tuple

from tqdm import tqdm

from ..utils import PathPredicate, compress_path, should_index_file, should_skip_path
from .bigram_index import BigramIndex, scan_bigrams
from .errors import IndexBuildError

logger = logging.getLogger(__name__)


class IndexBuildReport:
    """Outcome of one indexing run."""

    def __init__(self, root: str):
        self.root = root
        self.files_indexed = 0
        self.skipped: List[Tuple[str, str]] = []
        self.elapsed = 0.0
        self.code_entries = 0
        self.entries = 0

    def to_dict(self):
        return {
            "root": self.root,
            "files_indexed": self.files_indexed,
            "skipped": [path for path, _ in self.skipped],
            "elapsed": self.elapsed,
            "code_entries": self.code_entries,
            "entries": self.entries,
        }


def iter_file_entries(
    root: str,
    include: Optional[PathPredicate] = None,
    exclude: Optional[PathPredicate] = None,
    follow_symlinks: bool = False,
) -> Iterator[str]:
    """Yield file paths under root, depth first, in sorted name order.

    `exclude` is tested on directories and files and prunes whole subtrees;
    `include` is tested on files only. Errors listing `root` itself
    propagate; unreadable subdirectories are logged and skipped. Symlinked
    files are indexed through their target; symlinked directories are
    descended only with `follow_symlinks`, each real directory once.
    """
    visited = set()

    def walk(path: str, is_root: bool) -> Iterator[str]:
        if follow_symlinks:
            real = os.path.realpath(path)
            if real in visited:
                return
            visited.add(real)
        try:
            with os.scandir(path) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            if is_root:
                raise
            logger.warning(f"Cannot list directory {path}: {e}")
            return

        for entry in entries:
            fpath = os.path.join(path, entry.name)
            try:
                is_dir = entry.is_dir()
                # file links are read through; directory links only when asked
                if is_dir and not follow_symlinks and entry.is_symlink():
                    continue
            except OSError as e:
                logger.warning(f"Cannot stat {fpath}: {e}")
                continue
            if is_dir:
                if should_skip_path(fpath, exclude):
                    continue
                yield from walk(fpath, False)
            elif should_index_file(fpath, include, exclude):
                yield fpath

    return walk(root, True)


def read_text(path: str) -> str:
    # newline="" keeps \r so bigrams match the raw bytes seen at verification
    with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
        return f.read()


def index_file(index: BigramIndex, path: str) -> int:
    """Add every low-ASCII bigram of one file; returns its file id."""
    logger.debug(f"Indexing {path}")
    file_id = index.get_file_id(path)
    content = read_text(path)
    for code in scan_bigrams(content):
        index.add_entry(code, file_id)
    return file_id


def _check_root(root: str) -> str:
    if not os.path.isdir(root):
        raise IndexBuildError(f"Search root is not a directory: {root}")
    return root


def make_index(
    root: str,
    include: Optional[PathPredicate] = None,
    exclude: Optional[PathPredicate] = None,
    follow_symlinks: bool = False,
    progress: bool = False,
) -> Tuple[BigramIndex, IndexBuildReport]:
    """Build a fresh index of every selected file under root.

    Unreadable files are skipped and listed in the report instead of
    aborting the run.
    """
    _check_root(root)
    logger.info(f"Search path: {root}")
    start = time.time()
    index = BigramIndex()
    report = IndexBuildReport(root)

    entries = iter_file_entries(root, include, exclude, follow_symlinks)
    try:
        for fpath in tqdm(entries, desc="Indexing", unit="files", disable=not progress):
            try:
                index_file(index, fpath)
            except OSError as e:
                logger.warning(f"Skipping unreadable file {fpath}: {e}")
                report.skipped.append((fpath, str(e)))
                continue
            report.files_indexed += 1
    except OSError as e:
        raise IndexBuildError(f"Cannot read search root {root}: {e}") from e

    report.elapsed = time.time() - start
    report.code_entries = index.number_of_code_entries
    report.entries = index.number_of_entries
    logger.info(f"Total files: {report.files_indexed} ({len(report.skipped)} skipped)")
    logger.info(f"Total index entries: {report.code_entries} -> {report.entries}")
    return index, report


def count_files(
    root: str,
    include: Optional[PathPredicate] = None,
    exclude: Optional[PathPredicate] = None,
    follow_symlinks: bool = False,
    progress: bool = False,
) -> int:
    """Count the files a build would index, without reading them."""
    _check_root(root)
    total = 0
    try:
        with tqdm(desc="Counting", unit="files", disable=not progress) as bar:
            for fpath in iter_file_entries(root, include, exclude, follow_symlinks):
                total += 1
                bar.update(1)
                if total % 100 == 0:
                    bar.set_postfix_str(compress_path(fpath), refresh=False)
    except OSError as e:
        raise IndexBuildError(f"Cannot read search root {root}: {e}") from e
    return total


__all__ = [
    "IndexBuildReport",
    "iter_file_entries",
    "read_text",
    "index_file",
    "make_index",
    "count_files",
]
