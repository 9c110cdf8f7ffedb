"""Shared fixtures: in-memory store, settings and canned catalog snapshots."""

from __future__ import annotations

import os
from pathlib import Path
from typing import AsyncIterator, Iterable, List

import pytest

from names_search.core.config import Settings
from names_search.domain.prefixes import expand_prefixes
from names_search.services.indexer.catalog_source import DocumentSource
from names_search.storage.memory_store import MemorySortedSetStore

CATALOG_HEADER = '{"total_rows":4,"offset":0,"rows":['

SAMPLE_CATALOG_LINES = [
    CATALOG_HEADER,
    '{"id":"redis","key":"redis","value":{"rev":"1-a"}},',
    '{"id":"abc","key":"abc","value":{"rev":"1-b"}},',
    "not-json",
    '{"id":"react","key":"react","value":{"rev":"1-c"}}',
    "]}",
]

SAMPLE_CATALOG = "\n".join(SAMPLE_CATALOG_LINES) + "\n"


class StaticCatalogSource(DocumentSource):
    """Catalog source replaying a fixed list of lines."""

    def __init__(self, lines: Iterable[str]):
        super().__init__()
        self.lines: List[str] = list(lines)
        self.fetch_count = 0

    async def _read_lines(self) -> AsyncIterator[str]:
        self.fetch_count += 1
        for line in self.lines:
            yield line


def catalog_lines(names: Iterable[str]) -> List[str]:
    """Render names as an `_all_docs` feed, header and closing fragment included."""
    rows = [f'{{"id":"{name}","key":"{name}","value":{{"rev":"1-x"}}}},' for name in names]
    if rows:
        rows[-1] = rows[-1].rstrip(",")
    return [CATALOG_HEADER, *rows, "]}"]


def index_names(store: MemorySortedSetStore, names: Iterable[str]) -> None:
    """Populate a memory store directly, bypassing the build pipeline."""
    for name in names:
        for prefix, member in expand_prefixes(name):
            store.sets.setdefault(prefix, {})[member] = 0


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep NAMES_SEARCH_* variables of the outer shell out of Settings."""
    for name in list(os.environ):
        if name.startswith("NAMES_SEARCH_"):
            monkeypatch.delenv(name)


@pytest.fixture()
def memory_store() -> MemorySortedSetStore:
    return MemorySortedSetStore()


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        store_backend="memory",
        readiness_poll_interval_seconds=0,
        rebuild_interval_seconds=0.01,
        run_indexer=False,
    )


@pytest.fixture()
def sample_catalog_file(tmp_path: Path) -> Path:
    path = tmp_path / "all_docs.json"
    path.write_text(SAMPLE_CATALOG, encoding="utf-8")
    return path
