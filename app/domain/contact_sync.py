"""
app/domain/contact_sync.py

Run states and the run result produced by every contact sync.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from app.domain.contacts import SkippedContact


class SyncRunState:
    """
    Steps of one run, in order:
    start -> fetching -> (empty -> done) | normalizing -> upserting -> done.
    Any failing step moves the run to failed.
    """

    START = "start"
    FETCHING = "fetching"
    EMPTY = "empty"
    NORMALIZING = "normalizing"
    UPSERTING = "upserting"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class SyncRunResult:
    """
    Outcome of one sync run. Returned on success and on failure alike.

    ``timestamp`` is the run start time, which is also the ``last_synced_at``
    of every contact the run wrote.
    ``steps`` lists the states the run passed through and ends with ``state``.
    """

    succeeded: bool
    written_count: int
    skipped_count: int
    timestamp: datetime
    state: str
    fetched_count: int = 0
    failed_step: str | None = None
    error_type: str | None = None
    error_message: str | None = None
    error_details: str | None = None
    retryable: bool | None = None
    fetch_attempts: int = 0
    completed_at: datetime | None = None
    skipped: list[SkippedContact] = field(default_factory=list)
    steps: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.succeeded and self.fetched_count == 0

    def to_payload(self) -> dict[str, Any]:
        """
        JSON-safe dict for structured logs and the run history table.
        """

        payload = asdict(self)
        payload["timestamp"] = self.timestamp.isoformat()
        payload["completed_at"] = self.completed_at.isoformat() if self.completed_at else None
        payload["steps"] = list(self.steps)
        return payload
