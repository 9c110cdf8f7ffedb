from __future__ import annotations

import logging

from names_search.storage.sorted_set_store import SortedSetBatch, SortedSetStore

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000


class BatchedIndexWriter:
    """
    Queue (prefix, name) additions and flush them to the store in bounded batches.

    Batch boundaries only bound memory and round-trips; where they fall has no
    effect on the resulting index. Every member is added with score 0 so the
    store orders names lexicographically.
    """

    def __init__(self, store: SortedSetStore, batch_size: int = DEFAULT_BATCH_SIZE):
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.batch_size = batch_size
        self._batch: SortedSetBatch = store.batch()
        self.pending = 0
        self.pairs_written = 0
        self.batches_flushed = 0

    async def __aenter__(self) -> "BatchedIndexWriter":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def add(self, prefix: str, name: str) -> None:
        self._batch.add(prefix, name, 0)
        self.pending += 1

    async def flush_if_needed(self) -> bool:
        """Flush when enough additions are queued. Returns True if a flush happened."""
        if self.pending < self.batch_size:
            return False
        await self._flush()
        return True

    async def flush_remaining(self) -> bool:
        """Flush whatever is still queued at the end of a build."""
        if self.pending == 0:
            return False
        await self._flush()
        return True

    async def close(self) -> None:
        if self.pending:
            logger.debug(f"Discarding {self.pending} unflushed index additions")
        self.pending = 0
        await self._batch.close()

    async def _flush(self) -> None:
        # A failed flush raises FlushError and drops the queued additions with it.
        pending, self.pending = self.pending, 0
        await self._batch.execute()
        self.pairs_written += pending
        self.batches_flushed += 1
        logger.debug(f"Flushed {pending} index additions")
