"""
Build the prefix search index from a full catalog snapshot.
"""
from __future__ import annotations

import logging
from contextlib import aclosing

from names_search.domain.models import BuildStats
from names_search.domain.prefixes import expand_prefixes
from names_search.services.indexer.batch_writer import DEFAULT_BATCH_SIZE, BatchedIndexWriter
from names_search.services.indexer.catalog_source import DocumentSource
from names_search.storage.sorted_set_store import SortedSetStore

logger = logging.getLogger(__name__)


async def build_search_index(
    source: DocumentSource,
    store: SortedSetStore,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> BuildStats:
    """
    Run one full build: every name of the catalog is expanded into its
    prefixes and added to the sorted set of each prefix.

    Args:
        source: Catalog snapshot to read.
        store: Store receiving the index.
        batch_size: Additions queued before a flush.

    Returns:
        Counters describing the build.

    Raises:
        FetchError: The catalog could not be read.
        FlushError: A batch failed to land. Batches flushed before the
            failure stay in the store.
    """
    logger.info("Started building the search index")
    stats = BuildStats()

    async with BatchedIndexWriter(store, batch_size=batch_size) as writer:
        async with aclosing(source.fetch()) as documents:
            async for document in documents:
                stats.names_seen += 1
                pairs = expand_prefixes(document.name)
                if not pairs:
                    continue
                stats.names_indexed += 1
                for prefix, name in pairs:
                    writer.add(prefix, name)
                await writer.flush_if_needed()

        await writer.flush_remaining()
        stats.pairs_written = writer.pairs_written
        stats.batches_flushed = writer.batches_flushed

    stats.malformed_records = source.malformed_records
    logger.info(
        f"The search index is successfully built: "
        f"names_seen={stats.names_seen}, names_indexed={stats.names_indexed}, "
        f"pairs_written={stats.pairs_written}, batches={stats.batches_flushed}, "
        f"malformed={stats.malformed_records}"
    )
    return stats
