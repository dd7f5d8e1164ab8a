"""In-memory inverted bigram index over file contents.

Each ordered pair of adjacent character codes in the range 0..127 maps to
the set of file ids containing that pair somewhere in the file. No
positions or frequencies are kept, so a lookup only yields candidates;
exact matching is done afterwards by the searcher.

APIs:

- get_file_id(path) / get_path(file_id): id allocation through IdMap
- add_entry(bigram, file_id): idempotent postings insert
- search(query): candidate paths whose postings contain every query bigram
- serialize() / deserialize(doc): the persisted document shape

Persisted document:
  { 'fileIdMap': [[path, id], ...], 'index': [[[a, b], [id, ...]], ...] }
"""

from typing import Dict, Iterator, List, Optional, Tuple

from ..constants import MAX_INDEXED_CODE
from .errors import IndexLoadError
from .id_map import IdMap

Bigram = Tuple[int, int]


class PostingSet(set):
    """Set of file ids whose insert reports whether the id was new."""

    def insert(self, file_id: int) -> bool:
        before = len(self)
        self.add(file_id)
        return len(self) != before


def bigrams_of(text: str) -> Iterator[Bigram]:
    """Overlapping code pairs of `text`, codes not clipped."""
    for i in range(len(text) - 1):
        yield (ord(text[i]), ord(text[i + 1]))


def scan_bigrams(text: str) -> Iterator[Bigram]:
    """Code pairs as recorded at indexing time.

    Any code above MAX_INDEXED_CODE resets the cursor, so pairs never span
    a non-ASCII character.
    """
    prev = None
    for ch in text:
        code = ord(ch)
        if code <= MAX_INDEXED_CODE:
            if prev is not None:
                yield (prev, code)
            prev = code
        else:
            prev = None


class BigramIndex:
    def __init__(self, file_id_map: Optional[IdMap] = None):
        self._file_id_map = file_id_map if file_id_map is not None else IdMap()
        # bigram -> PostingSet(file_id)
        self._code_map: Dict[Bigram, PostingSet] = {}
        self._num_entries = 0

    def get_file_id(self, path: str) -> int:
        return self._file_id_map.get_id(path)

    def get_path(self, file_id: int) -> str:
        return self._file_id_map.get_key(file_id)

    def add_entry(self, bigram: Bigram, file_id: int) -> None:
        postings = self._code_map.get(bigram)
        if postings is None:
            postings = self._code_map[bigram] = PostingSet()
        if postings.insert(file_id):
            self._num_entries += 1

    def postings(self, bigram: Bigram) -> frozenset:
        return frozenset(self._code_map.get(bigram, ()))

    @property
    def number_of_code_entries(self) -> int:
        return len(self._code_map)

    @property
    def number_of_entries(self) -> int:
        return self._num_entries

    @property
    def number_of_files(self) -> int:
        return len(self._file_id_map)

    def search(self, query: str) -> List[str]:
        """Return paths of files containing every bigram of `query`.

        A single character forms no bigram and matches nothing. The result
        is a superset of the true matches.
        """
        if len(query) < 2:
            return []

        result = None
        for code in bigrams_of(query):
            current = self._code_map.get(code)
            if not current:
                return []
            if result is None:
                # copy, the index's own postings must stay untouched
                result = set(current)
            else:
                result &= current
            if not result:
                return []
        return [self._file_id_map.get_key(file_id) for file_id in sorted(result)]

    def serialize(self) -> dict:
        return {
            "fileIdMap": self._file_id_map.serialize(),
            "index": [[list(code), sorted(ids)] for code, ids in self._code_map.items()],
        }

    @classmethod
    def deserialize(cls, data) -> "BigramIndex":
        """Rebuild from a persisted document.

        Postings are replayed through add_entry, so counters are recomputed
        and duplicate ids collapse.
        """
        if not isinstance(data, dict):
            raise IndexLoadError("index document is not an object")
        try:
            raw_ids = data["fileIdMap"]
            raw_index = data["index"]
        except KeyError as e:
            raise IndexLoadError(f"index document lacks field {e}") from e
        if not isinstance(raw_ids, list) or not isinstance(raw_index, list):
            raise IndexLoadError("fileIdMap and index must be lists")

        pairs = []
        seen_paths, seen_ids = set(), set()
        for entry in raw_ids:
            if not _is_pair(entry) or not isinstance(entry[0], str) or not _is_id(entry[1]):
                raise IndexLoadError(f"bad fileIdMap entry: {entry!r}")
            path, file_id = entry
            # both directions must stay exact inverses
            if path in seen_paths or file_id in seen_ids:
                raise IndexLoadError(f"duplicate fileIdMap entry: {entry!r}")
            seen_paths.add(path)
            seen_ids.add(file_id)
            pairs.append((path, file_id))
        fi = cls(IdMap.deserialize(pairs))

        for entry in raw_index:
            if not _is_pair(entry):
                raise IndexLoadError(f"bad index entry: {entry!r}")
            code, ids = entry
            if not _is_pair(code) or not all(_is_code(c) for c in code):
                raise IndexLoadError(f"bad bigram: {code!r}")
            if not isinstance(ids, list):
                raise IndexLoadError(f"bad postings for {code!r}")
            bigram = (code[0], code[1])
            for file_id in ids:
                if not _is_id(file_id) or not fi._file_id_map.has_id(file_id):
                    raise IndexLoadError(f"unknown file id {file_id!r} for {code!r}")
                fi.add_entry(bigram, file_id)
        return fi


def _is_pair(value) -> bool:
    return isinstance(value, (list, tuple)) and len(value) == 2


def _is_id(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _is_code(value) -> bool:
    return _is_id(value) and value <= MAX_INDEXED_CODE


__all__ = ["Bigram", "PostingSet", "BigramIndex", "bigrams_of", "scan_bigrams"]
