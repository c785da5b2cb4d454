"""
app/schemas package marker.
"""

from app.schemas.contacts import (
    ContactListResponse,
    ContactResponse,
    ContactSyncFailureResponse,
    ContactSyncResponse,
    ContactSyncRunListResponse,
    ContactSyncRunResponse,
    ErrorResponse,
    SkippedContactResponse,
)

__all__ = [
    "ContactListResponse",
    "ContactResponse",
    "ContactSyncFailureResponse",
    "ContactSyncResponse",
    "ContactSyncRunListResponse",
    "ContactSyncRunResponse",
    "ErrorResponse",
    "SkippedContactResponse",
]
