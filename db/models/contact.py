"""
db/models/contact.py

Canonical contact row merged from the external CRM.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Index, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, JSONType, TimestampMixin


class ContactRecord(Base, TimestampMixin):
    __tablename__ = "contacts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    external_id: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Stable identifier assigned by the external CRM; merge key",
    )
    source: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="Provider the contact was synced from, e.g. monday",
    )
    # Unbounded text: profile values are stored exactly as the CRM sends them.
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    first_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone: Mapped[str | None] = mapped_column(Text, nullable=True)
    company: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[str | None] = mapped_column(Text, nullable=True)
    contact_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_metadata: Mapped[dict[str, Any] | None] = mapped_column(
        JSONType,
        nullable=True,
        comment="Source-specific data not mapped to a canonical field",
    )
    last_synced_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="Start time of the sync run that last wrote this row",
    )

    __table_args__ = (
        UniqueConstraint("external_id", name="uq_contacts_external_id"),
        Index("ix_contacts_last_synced_at", "last_synced_at"),
        Index("ix_contacts_email", "email"),
    )
