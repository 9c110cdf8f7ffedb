"""
Sorted-set storage backends for the prefix index.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from names_search.storage.memory_store import MemorySortedSetStore
from names_search.storage.redis_store import RedisSortedSetStore
from names_search.storage.sorted_set_store import SortedSetBatch, SortedSetStore

if TYPE_CHECKING:
    from names_search.core.config import Settings


def create_store(settings: "Settings") -> SortedSetStore:
    """Create the store selected by `settings.store_backend`."""
    if settings.store_backend == "memory":
        return MemorySortedSetStore()
    return RedisSortedSetStore.from_url(settings.store_address, timeout=settings.store_timeout_seconds)


__all__ = [
    "SortedSetBatch",
    "SortedSetStore",
    "MemorySortedSetStore",
    "RedisSortedSetStore",
    "create_store",
]
