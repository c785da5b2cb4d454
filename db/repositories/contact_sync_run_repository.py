"""
Repository for contact sync run history.
"""

from __future__ import annotations

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from app.domain.contact_sync import SyncRunResult
from db.models.contact_sync_run import ContactSyncRun, ContactSyncRunStatus


class ContactSyncRunRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def record_run(self, result: SyncRunResult, *, trigger: str = "api") -> ContactSyncRun:
        run = ContactSyncRun(
            status=ContactSyncRunStatus.COMPLETED if result.succeeded else ContactSyncRunStatus.FAILED,
            trigger=trigger,
            started_at=result.timestamp,
            completed_at=result.completed_at,
            fetched_count=result.fetched_count,
            written_count=result.written_count,
            skipped_count=result.skipped_count,
            error_type=result.error_type,
            error_message=result.error_message,
            retryable=result.retryable,
            result_payload=result.to_payload(),
        )
        self._session.add(run)
        self._session.flush()
        return run

    def list_runs(
        self,
        *,
        limit: int = 10,
        status: str | None = None,
    ) -> list[ContactSyncRun]:
        stmt: Select[tuple[ContactSyncRun]] = select(ContactSyncRun)
        if status:
            stmt = stmt.where(ContactSyncRun.status == status)

        stmt = stmt.order_by(ContactSyncRun.started_at.desc()).limit(max(1, limit))
        return list(self._session.scalars(stmt).all())
