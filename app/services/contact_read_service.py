"""
app/services/contact_read_service.py

Read access to merged contacts and to sync run history.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.contacts import CanonicalContact
from app.domain.errors import StorageError
from app.repositories.contact_repository import ContactRepository
from db.base import ensure_utc
from db.models.contact import ContactRecord
from db.models.contact_sync_run import ContactSyncRun
from db.repositories.contact_sync_run_repository import ContactSyncRunRepository

logger = logging.getLogger(__name__)


class ContactReadService:
    """
    Pure reads over the contact store. Nothing here mutates state.
    """

    def list_all(self, *, db: Session) -> list[CanonicalContact]:
        """
        Every stored contact ordered by ``last_synced_at`` descending, ties by
        ``external_id``. An empty store yields an empty list.
        """

        try:
            rows = ContactRepository(db).list_all()
        except SQLAlchemyError as exc:
            logger.exception("Failed to list contacts error=%s", exc)
            raise StorageError("Could not read contacts.", details=str(exc)) from exc
        return [_to_canonical(row) for row in rows]

    def list_runs(self, *, db: Session, limit: int = 10) -> list[ContactSyncRun]:
        try:
            return ContactSyncRunRepository(db).list_runs(limit=limit)
        except SQLAlchemyError as exc:
            logger.exception("Failed to list contact sync runs error=%s", exc)
            raise StorageError("Could not read contact sync runs.", details=str(exc)) from exc


def _to_canonical(row: ContactRecord) -> CanonicalContact:
    return CanonicalContact(
        external_id=row.external_id,
        source=row.source,
        last_synced_at=ensure_utc(row.last_synced_at),
        name=row.name,
        first_name=row.first_name,
        last_name=row.last_name,
        email=row.email,
        phone=row.phone,
        company=row.company,
        role=row.role,
        contact_type=row.contact_type,
        source_metadata=row.source_metadata,
    )


def get_contact_read_service() -> ContactReadService:
    return ContactReadService()
