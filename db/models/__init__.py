"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.contact import ContactRecord
from db.models.contact_sync_run import ContactSyncRun, ContactSyncRunStatus

__all__ = [
    "ContactRecord",
    "ContactSyncRun",
    "ContactSyncRunStatus",
]
