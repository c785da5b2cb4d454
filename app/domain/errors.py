"""
app/domain/errors.py

Error taxonomy for the contact sync pipeline.

Every error carries a ``retryable`` flag so callers can tell a transient
failure (try the whole run again later) from one that needs a fix first.
"""

from __future__ import annotations


class ContactSyncError(Exception):
    """Base exception for contact sync failures."""

    retryable: bool = False

    def __init__(self, message: str, *, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class SourceUnavailableError(ContactSyncError):
    """Network, timeout or authentication failure reaching the external CRM."""

    retryable = True


class SourceProtocolError(ContactSyncError):
    """The external CRM answered with a payload that cannot be read as contacts."""

    retryable = False


class ContactValidationError(ContactSyncError):
    """One external record cannot become a canonical contact."""

    retryable = False

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        external_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.field = field
        self.external_id = external_id


class StorageError(ContactSyncError):
    """The contact store rejected or could not complete a write or read."""

    retryable = True
