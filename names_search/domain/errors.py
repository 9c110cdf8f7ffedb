"""
Exception hierarchy for the names search service.

Record-level errors are logged and skipped, build-level errors abort only the
current build, and query-level errors are reported to the HTTP caller.
"""
from __future__ import annotations


class NamesSearchError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(NamesSearchError):
    """The configuration file or environment could not be loaded."""


class FetchError(NamesSearchError):
    """The catalog snapshot could not be fetched or read."""


class MalformedRecordError(NamesSearchError):
    """A single catalog line could not be parsed into a document."""

    def __init__(self, line: str, reason: str = ""):
        self.line = line
        self.reason = reason
        super().__init__(f"Malformed catalog line: {line!r} ({reason})" if reason else f"Malformed catalog line: {line!r}")


class FlushError(NamesSearchError):
    """A batch of index writes failed to land in the store."""


class StoreUnavailableError(NamesSearchError):
    """The sorted-set store did not answer a readiness probe."""


class QueryStoreError(NamesSearchError):
    """Reading suggestions from the store failed."""
