"""
app/services package marker.
"""

from app.services.contact_read_service import ContactReadService, get_contact_read_service
from app.services.contact_sync_service import ContactSyncService, get_contact_sync_service

__all__ = [
    "ContactReadService",
    "get_contact_read_service",
    "ContactSyncService",
    "get_contact_sync_service",
]
