"""
app/repositories/contact_repository.py

Persistence layer for canonical contacts.

The repository never commits. A whole ``upsert_batch`` call runs inside the
caller's transaction, so the caller's single commit (or rollback) decides
whether all of the batch lands or none of it.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from app.domain.contacts import CanonicalContact
from app.domain.errors import StorageError
from db.base import utc_now
from db.models.contact import ContactRecord

_DEFAULT_BATCH_SIZE = 500

# Every canonical column is replaced on conflict; id and created_at are kept.
_OVERWRITE_COLUMNS = (
    "source",
    "name",
    "first_name",
    "last_name",
    "email",
    "phone",
    "company",
    "role",
    "contact_type",
    "source_metadata",
    "last_synced_at",
)

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class ContactRepository:
    """
    Repository for merging and reading canonical contacts.

    Upsert semantics: a contact whose ``external_id`` already exists replaces
    every canonical field of the stored row (last write wins). Rows absent
    from a batch are never touched.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def upsert_batch(
        self,
        contacts: Sequence[CanonicalContact],
        *,
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> int:
        """
        Insert-or-replace contacts keyed by ``external_id``.

        Contacts repeating an ``external_id`` within the call are collapsed
        before hitting the database; the last occurrence wins.

        Returns
        -------
        int
            Number of rows written (inserted + updated). Zero for an empty
            batch, which does not touch the session at all.
        """

        if not contacts:
            return 0

        insert = self._insert_for_dialect()
        payloads = _deduplicate(contacts)
        size = max(1, batch_size)
        written = 0

        for start in range(0, len(payloads), size):
            chunk = payloads[start : start + size]
            stmt = insert(ContactRecord).values(chunk)
            update_set: dict[str, Any] = {column: stmt.excluded[column] for column in _OVERWRITE_COLUMNS}
            update_set["updated_at"] = utc_now()
            stmt = stmt.on_conflict_do_update(
                index_elements=[ContactRecord.external_id],
                set_=update_set,
            ).returning(ContactRecord.external_id)
            written += len(self._session.scalars(stmt).all())

        return written

    def list_all(self) -> list[ContactRecord]:
        """
        All contacts, most recently synced first; ties ordered by external id.
        """

        stmt = select(ContactRecord).order_by(
            ContactRecord.last_synced_at.desc(),
            ContactRecord.external_id.asc(),
        )
        return list(self._session.scalars(stmt).all())

    def get_by_external_id(self, external_id: str) -> ContactRecord | None:
        stmt = select(ContactRecord).where(ContactRecord.external_id == external_id)
        return self._session.scalars(stmt).one_or_none()

    def _insert_for_dialect(self) -> Any:
        dialect_name = self._session.get_bind().dialect.name
        insert = _INSERT_BY_DIALECT.get(dialect_name)
        if insert is None:
            raise StorageError(f"Contact upsert is not supported on dialect '{dialect_name}'.")
        return insert


def _deduplicate(contacts: Sequence[CanonicalContact]) -> list[dict[str, Any]]:
    by_external_id: dict[str, dict[str, Any]] = {}
    for contact in contacts:
        # Re-inserting moves a repeated id to its last position.
        by_external_id.pop(contact.external_id, None)
        by_external_id[contact.external_id] = {
            "id": uuid.uuid4(),
            "external_id": contact.external_id,
            "source": contact.source,
            "name": contact.name,
            "first_name": contact.first_name,
            "last_name": contact.last_name,
            "email": contact.email,
            "phone": contact.phone,
            "company": contact.company,
            "role": contact.role,
            "contact_type": contact.contact_type,
            "source_metadata": contact.source_metadata,
            "last_synced_at": contact.last_synced_at,
        }
    return list(by_external_id.values())
