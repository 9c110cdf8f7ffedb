"""
Command line entry point.

    names-search serve   # HTTP API, with the periodic index builder unless --no-indexer
    names-search index   # periodic index builder only
    names-search build   # a single index build, then exit
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from names_search.core.config import Settings, load_settings
from names_search.data.index_build_scheduler import IndexBuildScheduler
from names_search.domain.errors import ConfigurationError, NamesSearchError
from names_search.main import configure_logging, create_app
from names_search.storage import create_store

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="names-search", description="Package names prefix search.")
    parser.add_argument("--catalog-url", help="Catalog snapshot URL or local file path.")
    parser.add_argument("--store-address", help="Redis connection URL.")
    parser.add_argument("--store-backend", choices=["redis", "memory"])
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP query service.")
    serve.add_argument("--host")
    serve.add_argument("--port", type=int)
    serve.add_argument(
        "--no-indexer",
        dest="run_indexer",
        action="store_const",
        const=False,
        help="Serve queries only; another process builds the index.",
    )

    sub.add_parser("index", help="Build the index now and then on every rebuild interval.")
    sub.add_parser("build", help="Build the index once and exit.")
    return parser


def _serve(settings: Settings) -> None:
    import uvicorn

    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


async def _index_forever(settings: Settings) -> None:
    store = create_store(settings)
    scheduler = IndexBuildScheduler(store, settings)
    try:
        await scheduler.start()
    finally:
        await scheduler.stop()
        await store.close()


async def _build_once(settings: Settings) -> int:
    store = create_store(settings)
    scheduler = IndexBuildScheduler(store, settings)
    try:
        await scheduler.wait_for_store()
        stats = await scheduler.run_once()
    except NamesSearchError as e:
        logger.error(f"Building the search index failed: {e}")
        return 1
    finally:
        await store.close()
    print(stats.model_dump_json(indent=2))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    overrides = {
        "catalog_url": args.catalog_url,
        "store_address": args.store_address,
        "store_backend": args.store_backend,
        "host": getattr(args, "host", None),
        "port": getattr(args, "port", None),
        "run_indexer": getattr(args, "run_indexer", None),
    }
    try:
        settings = load_settings(overrides)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    if args.command == "serve":
        _serve(settings)
        return 0
    if args.command == "index":
        try:
            asyncio.run(_index_forever(settings))
        except KeyboardInterrupt:
            pass
        return 0
    return asyncio.run(_build_once(settings))
