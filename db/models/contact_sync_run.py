"""
db/models/contact_sync_run.py

One row per contact sync run, read by the run log viewer.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, JSONType, TimestampMixin


class ContactSyncRunStatus:
    COMPLETED = "completed"
    FAILED = "failed"


class ContactSyncRun(Base, TimestampMixin):
    __tablename__ = "contact_sync_runs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="completed, failed",
    )
    trigger: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="api",
        comment="api, scheduler, cli",
    )
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    fetched_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    written_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    skipped_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    retryable: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    result_payload: Mapped[dict[str, Any] | None] = mapped_column(
        JSONType,
        nullable=True,
        comment="Full run result including per-record skip reasons",
    )

    __table_args__ = (
        Index("ix_contact_sync_runs_started_at", "started_at"),
        Index("ix_contact_sync_runs_status", "status"),
    )
