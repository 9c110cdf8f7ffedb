"""Unit tests for names_search.data.index_build_scheduler."""

from __future__ import annotations

import asyncio

import pytest

from conftest import StaticCatalogSource, catalog_lines
from names_search.core.config import Settings
from names_search.data.index_build_scheduler import IndexBuildScheduler, repeating_timer
from names_search.domain.errors import FetchError, StoreUnavailableError
from names_search.services.indexer.catalog_source import DocumentSource
from names_search.storage.memory_store import MemorySortedSetStore


class FlakyStore(MemorySortedSetStore):
    """Memory store that refuses the first `failures` pings."""

    def __init__(self, failures: int):
        super().__init__()
        self.failures = failures
        self.pings = 0

    async def ping(self) -> None:
        self.pings += 1
        if self.pings <= self.failures:
            raise StoreUnavailableError("connection refused")


class UnreachableSource(DocumentSource):
    async def _read_lines(self):
        raise FetchError("catalog unreachable")
        yield  # pragma: no cover


async def _wait_until(predicate, timeout: float = 2.0) -> None:
    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.005)

    await asyncio.wait_for(_poll(), timeout)


# ---------------------------------------------------------------------------
# repeating_timer
# ---------------------------------------------------------------------------


class TestRepeatingTimer:
    async def test_ticks_in_order(self) -> None:
        ticks = []
        async for tick in repeating_timer(0.001):
            ticks.append(tick)
            if len(ticks) == 3:
                break
        assert ticks == [1, 2, 3]

    async def test_waits_one_interval_before_first_tick(self) -> None:
        loop = asyncio.get_running_loop()
        started = loop.time()
        timer = repeating_timer(0.05)
        await timer.__anext__()
        await timer.aclose()
        assert loop.time() - started >= 0.04

    async def test_slow_consumer_gets_one_tick_right_away(self) -> None:
        loop = asyncio.get_running_loop()
        started = loop.time()
        timer = repeating_timer(0.1)
        await timer.__anext__()
        # Busy past ticks at 0.2 and 0.3.
        await asyncio.sleep(0.25)
        busy_until = loop.time()
        await timer.__anext__()
        caught_up = loop.time()
        await timer.__anext__()
        back_on_grid = loop.time()
        await timer.aclose()

        assert caught_up - busy_until < 0.05
        # The other missed tick is dropped; the next one waits for the 0.4 mark.
        assert back_on_grid - caught_up >= 0.03
        assert back_on_grid - started >= 0.39


# ---------------------------------------------------------------------------
# IndexBuildScheduler
# ---------------------------------------------------------------------------


class TestWaitForStore:
    async def test_polls_until_store_answers(self, settings: Settings) -> None:
        store = FlakyStore(failures=3)
        scheduler = IndexBuildScheduler(store, settings)
        await asyncio.wait_for(scheduler.wait_for_store(), 1.0)
        assert store.pings == 4


class TestRunOnce:
    async def test_success_records_stats(self, memory_store: MemorySortedSetStore, settings: Settings) -> None:
        scheduler = IndexBuildScheduler(
            memory_store, settings, source_factory=lambda: StaticCatalogSource(catalog_lines(["redis"]))
        )
        stats = await scheduler.run_once()

        assert stats.pairs_written == 2
        status = scheduler.status.get_status()
        assert status.state == "idle"
        assert status.last_outcome == "succeeded"
        assert status.last_stats == stats
        assert status.builds_attempted == 1

    async def test_failure_is_recorded_and_raised(self, memory_store: MemorySortedSetStore, settings: Settings) -> None:
        scheduler = IndexBuildScheduler(memory_store, settings, source_factory=UnreachableSource)
        with pytest.raises(FetchError):
            await scheduler.run_once()

        status = scheduler.status.get_status()
        assert status.state == "idle"
        assert status.last_outcome == "failed"
        assert status.last_error == "catalog unreachable"


class HangingSource(DocumentSource):
    """Source that never finishes reading, so a build stays in progress."""

    def __init__(self):
        super().__init__()
        self.reading = asyncio.Event()

    async def _read_lines(self):
        yield '{"total_rows":1,"offset":0,"rows":['
        self.reading.set()
        await asyncio.Event().wait()
        yield "]}"  # pragma: no cover


class TestSchedule:
    async def test_stop_during_build_leaves_status_idle(
        self, memory_store: MemorySortedSetStore, settings: Settings
    ) -> None:
        source = HangingSource()
        scheduler = IndexBuildScheduler(memory_store, settings, source_factory=lambda: source)
        scheduler.start()
        await asyncio.wait_for(source.reading.wait(), 1.0)
        assert scheduler.status.get_status().state == "building"

        await scheduler.stop()

        status = scheduler.status.get_status()
        assert status.state == "idle"
        assert status.last_outcome == "failed"
        assert status.last_error == "CancelledError"

    async def test_builds_immediately_then_periodically(self, settings: Settings) -> None:
        store = FlakyStore(failures=2)
        sources = []

        def factory() -> StaticCatalogSource:
            source = StaticCatalogSource(catalog_lines(["redis"]))
            sources.append(source)
            return source

        scheduler = IndexBuildScheduler(store, settings, source_factory=factory)
        scheduler.start()
        try:
            await _wait_until(lambda: len(sources) >= 3)
        finally:
            await scheduler.stop()

        assert store.pings == 3
        assert store.sets["red"] == {"redis": 0}
        assert not scheduler.running

    async def test_failed_build_does_not_stop_schedule(
        self, memory_store: MemorySortedSetStore, settings: Settings
    ) -> None:
        attempts = []

        def factory() -> DocumentSource:
            attempts.append(len(attempts))
            if len(attempts) == 1:
                return UnreachableSource()
            return StaticCatalogSource(catalog_lines(["redis"]))

        scheduler = IndexBuildScheduler(memory_store, settings, source_factory=factory)
        scheduler.start()
        try:
            await _wait_until(lambda: scheduler.status.get_status().last_outcome == "succeeded")
            assert scheduler.running
        finally:
            await scheduler.stop()

        assert len(attempts) >= 2
        assert memory_store.sets["red"] == {"redis": 0}

    async def test_start_twice_keeps_one_task(self, memory_store: MemorySortedSetStore) -> None:
        settings = Settings(store_backend="memory", rebuild_interval_seconds=3600)
        scheduler = IndexBuildScheduler(
            memory_store, settings, source_factory=lambda: StaticCatalogSource(catalog_lines([]))
        )
        first = scheduler.start()
        second = scheduler.start()
        try:
            assert first is second
        finally:
            await scheduler.stop()
        assert first.cancelled() or first.done()

    async def test_stop_without_start_is_noop(self, memory_store: MemorySortedSetStore, settings: Settings) -> None:
        await IndexBuildScheduler(memory_store, settings).stop()
