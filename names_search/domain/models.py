"""
Pydantic models for the names search service.

This module defines the data flowing through an index build:
- Catalog documents parsed from the upstream snapshot
- Per-build counters
- The status of the most recent build attempt
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Catalog Models
# ---------------------------------------------------------------------------


class SourceDocument(BaseModel):
    """
    One row of the catalog snapshot.

    The upstream feed identifies packages by their `id`; everything else on the
    row (`key`, `value.rev`, ...) is ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(default="", alias="id", description="Full package name.")


# ---------------------------------------------------------------------------
# Build Models
# ---------------------------------------------------------------------------


class BuildStats(BaseModel):
    """Counters collected while running one index build."""

    names_seen: int = Field(default=0, description="Documents read from the catalog.")
    names_indexed: int = Field(default=0, description="Documents that produced at least one prefix.")
    pairs_written: int = Field(default=0, description="(prefix, name) additions flushed to the store.")
    batches_flushed: int = Field(default=0, description="Number of batches executed against the store.")
    malformed_records: int = Field(default=0, description="Catalog lines skipped because they failed to parse.")


BuildState = Literal["idle", "building"]
BuildOutcome = Literal["succeeded", "failed"]


class IndexBuildStatus(BaseModel):
    """Status information for the index builder."""

    state: BuildState = Field(default="idle", description="Whether a build is currently running.")
    builds_attempted: int = Field(default=0, description="Builds started since the process came up.")
    last_started: Optional[datetime] = Field(default=None, description="When the last build started")
    last_finished: Optional[datetime] = Field(default=None, description="When the last build finished")
    last_outcome: Optional[BuildOutcome] = Field(default=None, description="Result of the last finished build")
    last_error: Optional[str] = Field(default=None, description="Error message of the last failed build")
    last_stats: Optional[BuildStats] = Field(default=None, description="Counters of the last finished build")
