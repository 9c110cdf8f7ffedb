"""
Stream package names out of a catalog snapshot.

The snapshot is the CouchDB `_all_docs` replication feed: one row per line inside
a `{"total_rows":N,"offset":N,"rows":[ ... ]}` envelope, e.g.

    {"total_rows":1161662,"offset":0,"rows":[
    {"id":"redis","key":"redis","value":{"rev":"1-abc"}},
    ...
    ]}

The feed is far too large to parse as one document, so it is read line by line.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import aclosing
from pathlib import Path
from typing import AsyncIterator, Optional

import aiofiles
import httpx
from pydantic import ValidationError

from names_search.domain.errors import FetchError, MalformedRecordError
from names_search.domain.models import SourceDocument

logger = logging.getLogger(__name__)

END_OF_ROWS_MARKER = "]}"


def parse_catalog_line(line: str) -> Optional[SourceDocument]:
    """
    Parse one row line of the feed.

    Returns None for lines that carry no record (blank lines and the closing
    `]}` fragment). Raises MalformedRecordError for anything else that is not
    a JSON object.
    """
    line = line.strip()
    if line.endswith(","):
        line = line[:-1]
    if not line:
        return None

    try:
        return SourceDocument.model_validate_json(line)
    except ValidationError as e:
        # The closing fragment of the envelope is expected to fail.
        if line.startswith(END_OF_ROWS_MARKER):
            return None
        raise MalformedRecordError(line, reason=str(e.errors()[0]["msg"])) from e


class DocumentSource(ABC):
    """
    Produces the documents of one catalog snapshot.

    Every call to fetch() starts a fresh pass over the snapshot.
    """

    def __init__(self):
        self.malformed_records = 0

    @abstractmethod
    def _read_lines(self) -> AsyncIterator[str]:
        """Yield raw lines of the snapshot, header included."""

    async def fetch(self) -> AsyncIterator[SourceDocument]:
        """
        Yield every well-formed document of the snapshot.

        Raises:
            FetchError: If the snapshot cannot be read. Documents already
                yielded stay yielded; nothing is retried.
        """
        self.malformed_records = 0
        async with aclosing(self._read_lines()) as lines:
            # The first line is the envelope header, e.g. `{"total_rows":1161662,"offset":0,"rows":[`
            header_skipped = False
            async for line in lines:
                if not header_skipped:
                    header_skipped = True
                    continue
                try:
                    document = parse_catalog_line(line)
                except MalformedRecordError as e:
                    self.malformed_records += 1
                    logger.error(f"There was an error parsing the catalog line: {e.line} ({e.reason})")
                    continue
                if document is not None:
                    yield document


class HttpCatalogSource(DocumentSource):
    """Catalog snapshot streamed over HTTP."""

    def __init__(self, url: str, timeout: float = 60.0, client: Optional[httpx.AsyncClient] = None):
        super().__init__()
        self.url = url
        self.timeout = timeout
        self._client = client

    async def _read_lines(self) -> AsyncIterator[str]:
        logger.info(f"Fetching all packages data from {self.url}...")
        try:
            if self._client is not None:
                async for line in self._stream_lines(self._client):
                    yield line
            else:
                async with httpx.AsyncClient(follow_redirects=True, timeout=self.timeout) as client:
                    async for line in self._stream_lines(client):
                        yield line
        except httpx.HTTPError as e:
            raise FetchError(f"There was an error querying {self.url}: {e}") from e

    async def _stream_lines(self, client: httpx.AsyncClient) -> AsyncIterator[str]:
        async with client.stream("GET", self.url, follow_redirects=True, timeout=self.timeout) as response:
            response.raise_for_status()
            async for line in response.aiter_lines():
                yield line


class FileCatalogSource(DocumentSource):
    """Catalog snapshot previously downloaded to local disk."""

    def __init__(self, path: Path):
        super().__init__()
        self.path = path

    async def _read_lines(self) -> AsyncIterator[str]:
        logger.info(f"Reading all packages data from {self.path}...")
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                async for line in f:
                    yield line
        except (OSError, UnicodeDecodeError) as e:
            raise FetchError(f"There was an error reading {self.path}: {e}") from e


def create_document_source(location: str, timeout: float = 60.0) -> DocumentSource:
    """Pick the source for `location`: http(s) URLs are streamed, anything else is a file path."""
    if location.startswith(("http://", "https://")):
        return HttpCatalogSource(location, timeout=timeout)
    if location.startswith("file://"):
        location = location[len("file://"):]
    return FileCatalogSource(Path(location).expanduser())
