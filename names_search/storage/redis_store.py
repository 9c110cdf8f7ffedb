from __future__ import annotations

import logging
from typing import List

import redis.asyncio as redis
from redis.exceptions import RedisError

from names_search.domain.errors import FlushError, QueryStoreError, StoreUnavailableError
from names_search.storage.sorted_set_store import SortedSetBatch, SortedSetStore

logger = logging.getLogger(__name__)


class RedisSortedSetBatch(SortedSetBatch):
    """Batch backed by a MULTI/EXEC pipeline so a flush lands all-or-nothing."""

    def __init__(self, client: redis.Redis):
        self._pipeline = client.pipeline(transaction=True)
        self._queued = 0

    def add(self, key: str, member: str, score: float = 0.0) -> None:
        self._pipeline.zadd(key, {member: score})
        self._queued += 1

    async def execute(self) -> int:
        if self._queued == 0:
            return 0
        queued = self._queued
        try:
            await self._pipeline.execute()
        except RedisError as e:
            raise FlushError(f"There was an error executing the insertion pipeline: {e}") from e
        finally:
            self._queued = 0
        return queued

    async def close(self) -> None:
        self._queued = 0
        await self._pipeline.reset()


class RedisSortedSetStore(SortedSetStore):
    """Sorted-set store on a pooled redis.asyncio client shared by the whole process."""

    def __init__(self, client: redis.Redis):
        self._client = client

    @classmethod
    def from_url(cls, url: str, timeout: float = 5.0) -> "RedisSortedSetStore":
        client = redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )
        return cls(client)

    async def ping(self) -> None:
        try:
            await self._client.ping()
        except RedisError as e:
            raise StoreUnavailableError(f"Redis did not answer PING: {e}") from e

    async def range_by_rank(self, key: str, start: int, stop: int) -> List[str]:
        try:
            return list(await self._client.zrange(key, start, stop))
        except RedisError as e:
            raise QueryStoreError(f"ZRANGE {key!r} failed: {e}") from e

    def batch(self) -> RedisSortedSetBatch:
        return RedisSortedSetBatch(self._client)

    async def close(self) -> None:
        logger.debug("Closing Redis connection pool")
        await self._client.aclose()
