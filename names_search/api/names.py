from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from names_search.core.dependencies import get_query_service
from names_search.domain.errors import QueryStoreError
from names_search.services.query import PrefixQueryService

logger = logging.getLogger(__name__)
router = APIRouter()


# ---------------------------------------------------------------------------
# GET /v1/{prefix}
# ---------------------------------------------------------------------------

@router.get("/{prefix:path}")
async def search_names(
    prefix: str,
    service: PrefixQueryService = Depends(get_query_service),
) -> JSONResponse:
    """
    Return up to 11 package names starting with `prefix`, sorted
    lexicographically. Scoped names such as `@babel/core` contain a slash,
    hence the path converter.
    """
    try:
        suggestions = await service.query(prefix)
    except QueryStoreError as e:
        logger.error(f"There was an error requesting the suggestions for the query: {prefix!r} {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to read suggestions",
        ) from e

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=suggestions,
        headers={"Cache-Control": service.cache_control},
    )
