"""
Two-stage substring search: bigram candidates, then exact byte verification.
"""

import logging
import time
from typing import Iterable, List, Optional

from .bigram_index import BigramIndex

logger = logging.getLogger(__name__)


class SearchOutcome:
    """Verified results plus the numbers the console reports."""

    def __init__(self, query: str, candidates: List[str], results: List[str], elapsed: float):
        self.query = query
        self.candidates = candidates
        self.results = results
        self.elapsed = elapsed

    @property
    def candidate_count(self) -> int:
        return len(self.candidates)


class Searcher:
    """Query pipeline over a BigramIndex.

    Candidates from the bigram intersection are necessary but not
    sufficient matches; each one is re-read and kept only if it contains
    the query literally.
    """

    def __init__(self, index: BigramIndex):
        self.index = index

    def read_file_bytes(self, file_path: str) -> Optional[bytes]:
        """Read raw file content, None if it vanished or cannot be read."""
        try:
            with open(file_path, "rb") as f:
                return f.read()
        except OSError as e:
            logger.debug(f"Error reading file {file_path}: {e}")
            return None

    def find_candidates(self, query: str) -> List[str]:
        return self.index.search(query)

    def verify(self, candidates: Iterable[str], query: str) -> List[str]:
        needle = query.encode("utf-8")
        results = []
        for path in candidates:
            content = self.read_file_bytes(path)
            if content is not None and needle in content:
                results.append(path)
        return results

    def search(self, query: str) -> List[str]:
        if len(query) < 2:
            return []
        return self.verify(self.find_candidates(query), query)

    def search_with_stats(self, query: str) -> SearchOutcome:
        start = time.time()
        if len(query) < 2:
            return SearchOutcome(query, [], [], time.time() - start)
        candidates = self.find_candidates(query)
        results = self.verify(candidates, query)
        logger.debug(f"Query {query!r}: {len(candidates)} candidates, {len(results)} results")
        return SearchOutcome(query, candidates, results, time.time() - start)


__all__ = ["Searcher", "SearchOutcome"]
