"""
Repository layer exports.
"""

from db.repositories.contact_sync_run_repository import ContactSyncRunRepository

__all__ = [
    "ContactSyncRunRepository",
]
