"""
Track index build status for the health endpoint.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from names_search.domain.models import BuildStats, IndexBuildStatus


class IndexBuildStatusTracker:
    """Keeps the status of the most recent build attempt in memory."""

    def __init__(self):
        self._status = IndexBuildStatus()

    def get_status(self) -> IndexBuildStatus:
        """Return a snapshot of the current status."""
        return self._status.model_copy(deep=True)

    def mark_started(self) -> None:
        self._status.state = "building"
        self._status.builds_attempted += 1
        self._status.last_started = datetime.now(timezone.utc)

    def mark_succeeded(self, stats: BuildStats) -> None:
        self._finish("succeeded", stats=stats)

    def mark_failed(self, error: BaseException, stats: Optional[BuildStats] = None) -> None:
        self._finish("failed", stats=stats, error=str(error) or type(error).__name__)

    def _finish(self, outcome: str, stats: Optional[BuildStats] = None, error: Optional[str] = None) -> None:
        self._status.state = "idle"
        self._status.last_finished = datetime.now(timezone.utc)
        self._status.last_outcome = outcome
        self._status.last_error = error
        self._status.last_stats = stats
