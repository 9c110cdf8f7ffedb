"""
Background task that keeps the prefix index rebuilt from the upstream catalog.
"""
from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Callable, Optional

from names_search.core.config import Settings
from names_search.data.index_status import IndexBuildStatusTracker
from names_search.domain.errors import StoreUnavailableError
from names_search.domain.models import BuildStats
from names_search.services.indexer.catalog_source import DocumentSource, create_document_source
from names_search.services.indexer.index_builder import build_search_index
from names_search.storage.sorted_set_store import SortedSetStore

logger = logging.getLogger(__name__)

SourceFactory = Callable[[], DocumentSource]


async def repeating_timer(interval: float) -> AsyncIterator[int]:
    """
    Yield the tick number every `interval` seconds at a fixed rate.

    If the consumer was busy past one or more ticks, a single tick fires as
    soon as it asks for the next one; the remaining missed ticks are dropped.
    """
    loop = asyncio.get_running_loop()
    next_tick = loop.time() + interval
    tick = 0
    while True:
        await asyncio.sleep(max(0.0, next_tick - loop.time()))
        tick += 1
        yield tick
        next_tick += interval
        now = loop.time()
        while next_tick + interval <= now:
            next_tick += interval


class IndexBuildScheduler:
    """
    Runs a full index build once the store is reachable, then again on every
    tick of a fixed timer. A failed build is logged and the next tick retries;
    the scheduler itself only stops when stop() is called.
    """

    def __init__(
        self,
        store: SortedSetStore,
        settings: Settings,
        source_factory: Optional[SourceFactory] = None,
        status: Optional[IndexBuildStatusTracker] = None,
    ):
        self.store = store
        self.settings = settings
        self.source_factory = source_factory or (
            lambda: create_document_source(settings.catalog_url, timeout=settings.fetch_timeout_seconds)
        )
        self.status = status or IndexBuildStatusTracker()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def wait_for_store(self) -> None:
        """Block until the store answers a ping, polling at a fixed interval forever."""
        while True:
            try:
                await self.store.ping()
                return
            except StoreUnavailableError as e:
                logger.info(f"Waiting for the store to load... ({e})")
            await asyncio.sleep(self.settings.readiness_poll_interval_seconds)

    async def run_once(self) -> BuildStats:
        """
        Run a single build and record its outcome.

        Errors propagate to the caller after being recorded.
        """
        self.status.mark_started()
        source = self.source_factory()
        try:
            stats = await build_search_index(source, self.store, batch_size=self.settings.batch_size)
        except BaseException as e:
            # Cancellation from stop() counts as a failed build too.
            self.status.mark_failed(e)
            raise
        self.status.mark_succeeded(stats)
        return stats

    async def _build_and_log(self) -> None:
        try:
            await self.run_once()
        except Exception as e:
            logger.error(f"Building the search index failed: {e}", exc_info=True)

    async def _run(self) -> None:
        await self.wait_for_store()
        await self._build_and_log()
        async for _ in repeating_timer(self.settings.rebuild_interval_seconds):
            await self._build_and_log()

    def start(self) -> asyncio.Task:
        """Launch the scheduler as a background task. Calling it twice is a no-op."""
        if not self.running:
            logger.info(
                f"Starting index build scheduler (rebuild every {self.settings.rebuild_interval_seconds}s)"
            )
            self._task = asyncio.create_task(self._run(), name="index-build-scheduler")
        return self._task

    async def stop(self) -> None:
        """Cancel the timer and any build in progress, and wait for the task to end."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Index build scheduler stopped")
