"""
app/domain/contacts.py

Contact records as they travel through the sync pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class ExternalContactRecord:
    """
    One contact as returned by the external source, before validation.

    Values are whatever the source sent; the normalizer decides what is usable.
    """

    external_id: Any
    name: Any = None
    first_name: Any = None
    last_name: Any = None
    email: Any = None
    phone: Any = None
    company: Any = None
    role: Any = None
    contact_type: Any = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CanonicalContact:
    """
    Contact in the store's schema, stamped with the run that produced it.
    """

    external_id: str
    source: str
    last_synced_at: datetime
    name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    role: str | None = None
    contact_type: str | None = None
    source_metadata: dict[str, Any] | None = None


@dataclass(frozen=True)
class SkippedContact:
    """
    A fetched record that failed normalization.
    """

    index: int
    reason: str
    external_id: str | None = None
    field: str | None = None
