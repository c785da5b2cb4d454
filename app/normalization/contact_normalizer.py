"""
Normalization of external contact records into canonical contacts.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from app.domain.contacts import CanonicalContact, ExternalContactRecord
from app.domain.errors import ContactValidationError

_PROFILE_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "company",
    "role",
    "contact_type",
)


class ContactNormalizer:
    """
    Convert one external record into the store's contact schema.

    Only the external id is required. Every other field is passed through best
    effort: the source owns the shape, and a partial contact beats a dropped one.
    """

    def __init__(self, *, source: str) -> None:
        self._source = source

    def normalize(
        self,
        record: ExternalContactRecord,
        *,
        synced_at: datetime,
    ) -> CanonicalContact:
        if synced_at.tzinfo is None:
            synced_at = synced_at.replace(tzinfo=timezone.utc)

        external_id = self._clean_text(record.external_id)
        if external_id is None:
            raise ContactValidationError(
                "Record has no external identifier.",
                field="external_id",
            )

        profile = {name: self._clean_text(getattr(record, name)) for name in _PROFILE_FIELDS}
        name = self._clean_text(record.name) or self._full_name(profile["first_name"], profile["last_name"])

        return CanonicalContact(
            external_id=external_id,
            source=self._source,
            last_synced_at=synced_at,
            name=name,
            source_metadata=dict(record.metadata) if isinstance(record.metadata, dict) and record.metadata else None,
            **profile,
        )

    @staticmethod
    def _clean_text(value: Any) -> str | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return str(value)
        if isinstance(value, str):
            stripped = value.strip()
            return stripped or None
        return None

    @staticmethod
    def _full_name(first_name: str | None, last_name: str | None) -> str | None:
        parts = [part for part in (first_name, last_name) if part]
        return " ".join(parts) if parts else None
