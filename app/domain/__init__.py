"""
app/domain package marker.
"""

from app.domain.contact_sync import SyncRunResult, SyncRunState
from app.domain.contacts import CanonicalContact, ExternalContactRecord, SkippedContact
from app.domain.errors import (
    ContactSyncError,
    ContactValidationError,
    SourceProtocolError,
    SourceUnavailableError,
    StorageError,
)

__all__ = [
    "CanonicalContact",
    "ContactSyncError",
    "ContactValidationError",
    "ExternalContactRecord",
    "SkippedContact",
    "SourceProtocolError",
    "SourceUnavailableError",
    "StorageError",
    "SyncRunResult",
    "SyncRunState",
]
