from fastapi import Request

from names_search.core.config import Settings
from names_search.data.index_status import IndexBuildStatusTracker
from names_search.services.query import PrefixQueryService
from names_search.storage.sorted_set_store import SortedSetStore

# Everything here is created once per process by create_app() and lives on
# app.state; handlers only borrow it.


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> SortedSetStore:
    return request.app.state.store


def get_index_status(request: Request) -> IndexBuildStatusTracker:
    return request.app.state.index_status


def get_query_service(request: Request) -> PrefixQueryService:
    return request.app.state.query_service
