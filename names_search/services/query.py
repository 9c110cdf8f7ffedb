from __future__ import annotations

import logging
from typing import List

from names_search.storage.sorted_set_store import SortedSetStore

logger = logging.getLogger(__name__)

DEFAULT_QUERY_LIMIT = 11
DEFAULT_CACHE_MAX_AGE_SECONDS = 5 * 60


class PrefixQueryService:
    """
    Look up name suggestions for a typed prefix.

    The prefix is used verbatim as the store key: no case folding and no
    trimming, so it only matches prefixes exactly as they were indexed.
    """

    def __init__(
        self,
        store: SortedSetStore,
        limit: int = DEFAULT_QUERY_LIMIT,
        cache_max_age_seconds: int = DEFAULT_CACHE_MAX_AGE_SECONDS,
    ):
        self.store = store
        self.limit = limit
        self.cache_max_age_seconds = cache_max_age_seconds

    @property
    def cache_control(self) -> str:
        """Caching directive attached to every successful answer."""
        return f"max-age={self.cache_max_age_seconds}"

    async def query(self, raw_prefix: str) -> List[str]:
        """
        Return up to `limit` names indexed under `raw_prefix`, in store order.

        An unknown prefix yields an empty list. Store failures raise QueryStoreError.
        """
        suggestions = await self.store.range_by_rank(raw_prefix, 0, self.limit - 1)
        logger.debug(f"Query {raw_prefix!r} returned {len(suggestions)} suggestions")
        return suggestions
