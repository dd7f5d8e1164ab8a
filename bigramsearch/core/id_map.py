"""Bidirectional mapping between keys (file paths) and dense integer ids."""

from typing import Dict, Hashable, Iterable, List, Sequence


class IdMap:
    def __init__(self):
        self._map: Dict[Hashable, int] = {}
        self._rmap: Dict[int, Hashable] = {}
        self._id_counter = 0

    def get_id(self, key) -> int:
        """Return the id of `key`, allocating the next one on first sight."""
        existing = self._map.get(key)
        if existing is not None:
            return existing
        new_id = self._id_counter
        self._id_counter += 1
        self._map[key] = new_id
        self._rmap[new_id] = key
        return new_id

    def get_key(self, id_: int):
        # KeyError here means the id was never allocated
        return self._rmap[id_]

    def __contains__(self, key) -> bool:
        return key in self._map

    def __len__(self) -> int:
        return len(self._map)

    @property
    def next_id(self) -> int:
        return self._id_counter

    def has_id(self, id_: int) -> bool:
        return id_ in self._rmap

    def serialize(self) -> List[list]:
        return [[key, value] for key, value in self._map.items()]

    @classmethod
    def deserialize(cls, data: Iterable[Sequence]) -> "IdMap":
        """Rebuild from [key, id] pairs; the counter resumes past the largest id."""
        result = cls()
        max_id = -1
        for key, value in data:
            result._map[key] = value
            result._rmap[value] = key
            max_id = max(max_id, value)
        result._id_counter = max_id + 1
        return result


__all__ = ["IdMap"]
