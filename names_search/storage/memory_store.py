from __future__ import annotations

from typing import Dict, List, Tuple

from names_search.storage.sorted_set_store import SortedSetBatch, SortedSetStore


class MemorySortedSetBatch(SortedSetBatch):
    def __init__(self, store: "MemorySortedSetStore"):
        self._store = store
        self._ops: List[Tuple[str, str, float]] = []

    def add(self, key: str, member: str, score: float = 0.0) -> None:
        self._ops.append((key, member, score))

    async def execute(self) -> int:
        ops, self._ops = self._ops, []
        for key, member, score in ops:
            self._store.sets.setdefault(key, {})[member] = score
        return len(ops)

    async def close(self) -> None:
        self._ops = []


class MemorySortedSetStore(SortedSetStore):
    """
    In-process sorted-set store for local runs and tests.

    Ordering matches Redis: ascending score, ties broken by member. Python
    compares strings by code point, which agrees with Redis' byte order on UTF-8.
    """

    def __init__(self):
        self.sets: Dict[str, Dict[str, float]] = {}

    async def ping(self) -> None:
        return None

    async def range_by_rank(self, key: str, start: int, stop: int) -> List[str]:
        members = self.sets.get(key)
        if not members:
            return []
        ordered = sorted(members.items(), key=lambda item: (item[1], item[0]))
        end = None if stop == -1 else stop + 1
        return [member for member, _ in ordered[start:end]]

    def batch(self) -> MemorySortedSetBatch:
        return MemorySortedSetBatch(self)

    async def close(self) -> None:
        return None
