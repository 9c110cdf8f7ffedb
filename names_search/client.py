"""
Client for the names search HTTP API.

Editors and other tools use this to fetch package name suggestions while the
user types an import path.
"""
from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_URL = "http://localhost:8080/v1/"


class NamesSearchClient:
    """Thin async wrapper around `GET /v1/<prefix>`."""

    def __init__(
        self,
        base_url: str = DEFAULT_SERVICE_URL,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self._client = client or httpx.AsyncClient(timeout=timeout, headers={"Accept": "application/json"})
        self._owns_client = client is None

    async def __aenter__(self) -> "NamesSearchClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def search_package_names(self, query: str) -> List[str]:
        """
        Return the suggestions for `query`.

        Slashes and `@` are kept as-is so scoped names like `@babel/co` reach the
        service unchanged. Raises httpx.HTTPStatusError on a non-2xx answer.
        """
        url = self.base_url + quote(query, safe="/@")
        response = await self._client.get(url)
        response.raise_for_status()
        suggestions = response.json()
        if not isinstance(suggestions, list):
            raise ValueError(f"Unexpected suggestions payload for {query!r}: {suggestions!r}")
        return [str(s) for s in suggestions]
