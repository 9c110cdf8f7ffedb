from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, FastAPI

from names_search.api.names import router as names_router
from names_search.core.config import Settings, load_settings
from names_search.core.dependencies import get_index_status, get_store
from names_search.data.index_build_scheduler import IndexBuildScheduler
from names_search.data.index_status import IndexBuildStatusTracker
from names_search.domain.errors import StoreUnavailableError
from names_search.services.query import PrefixQueryService
from names_search.storage import create_store
from names_search.storage.sorted_set_store import SortedSetStore

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[SortedSetStore] = None,
) -> FastAPI:
    """
    Build the names search application.

    The store is created here once and shared by the index builder and every
    request for the lifetime of the process. A store passed in by the caller
    stays owned by the caller and is not closed on shutdown.
    """
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    owns_store = store is None
    store = store or create_store(settings)
    index_status = IndexBuildStatusTracker()

    app = FastAPI(
        title="Package names search",
        version="0.1.0",
        description="Prefix autocomplete over a catalog of package names.",
    )
    app.state.settings = settings
    app.state.store = store
    app.state.index_status = index_status
    app.state.query_service = PrefixQueryService(
        store,
        limit=settings.query_limit,
        cache_max_age_seconds=settings.cache_max_age_seconds,
    )
    app.state.scheduler = IndexBuildScheduler(store, settings, status=index_status)

    @app.on_event("startup")
    async def startup_event() -> None:
        """Start the periodic index builder unless this process only serves queries."""
        logger.info("Starting names-search-service")
        if settings.run_indexer:
            app.state.scheduler.start()

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        await app.state.scheduler.stop()
        if owns_store:
            await store.close()

    @app.get("/health")
    async def health(
        store: SortedSetStore = Depends(get_store),
        index_status: IndexBuildStatusTracker = Depends(get_index_status),
    ) -> dict:
        """
        Lightweight health check endpoint.
        """
        try:
            await store.ping()
            store_ok = True
        except StoreUnavailableError as e:
            logger.warning(f"Health check could not reach the store: {e}")
            store_ok = False

        return {
            "status": "ok" if store_ok else "degraded",
            "store": store_ok,
            "index": index_status.get_status().model_dump(mode="json"),
        }

    app.include_router(names_router, prefix="/v1", tags=["names"])
    return app


if __name__ == "__main__":
    """
    Allow running `python -m names_search.main` to start the server.
    """
    from names_search.cli import main

    main(["serve"])
