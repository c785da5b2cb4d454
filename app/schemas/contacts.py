"""
app/schemas/contacts.py

Response schemas for the contact sync and contact list endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ContactResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    external_id: str
    source: str
    name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    role: str | None = None
    contact_type: str | None = None
    source_metadata: dict[str, Any] | None = None
    last_synced_at: datetime


class ContactListResponse(BaseModel):
    success: bool = True
    data: list[ContactResponse] = Field(default_factory=list)


class SkippedContactResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    index: int
    reason: str
    external_id: str | None = None
    field: str | None = None


class ContactSyncResponse(BaseModel):
    """
    Successful sync run. ``inserted`` counts every row written, new or updated.
    """

    success: bool = True
    inserted: int = Field(..., ge=0)
    skipped: int = Field(0, ge=0)
    message: str | None = None
    timestamp: datetime
    skipped_records: list[SkippedContactResponse] = Field(default_factory=list)


class ContactSyncFailureResponse(BaseModel):
    success: bool = False
    error: str
    details: str | None = None
    retryable: bool = False
    failed_step: str | None = None
    timestamp: datetime | None = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


class ContactSyncRunResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    status: str
    trigger: str
    started_at: datetime
    completed_at: datetime | None = None
    fetched_count: int
    written_count: int
    skipped_count: int
    error_type: str | None = None
    error_message: str | None = None
    retryable: bool | None = None


class ContactSyncRunListResponse(BaseModel):
    success: bool = True
    data: list[ContactSyncRunResponse] = Field(default_factory=list)
