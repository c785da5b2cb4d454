"""
app/services/contact_sync_service.py

Orchestration of one contact sync run: fetch, normalize, upsert, report.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_contact_sync_settings, get_external_http_settings, get_monday_settings
from app.connectors import BaseContactConnector, MondayContactConnector
from app.domain.contact_sync import SyncRunResult, SyncRunState
from app.domain.contacts import CanonicalContact, ExternalContactRecord, SkippedContact
from app.domain.errors import (
    ContactSyncError,
    ContactValidationError,
    SourceProtocolError,
    SourceUnavailableError,
    StorageError,
)
from app.logging_utils import log_sync_run
from app.normalization import ContactNormalizer
from app.repositories.contact_repository import ContactRepository
from db.base import utc_now
from db.repositories.contact_sync_run_repository import ContactSyncRunRepository

logger = logging.getLogger(__name__)


class ContactSyncService:
    """
    Runs the contact sync pipeline as one linear pass.

    start -> fetching -> (empty -> done) | normalizing -> upserting -> done;
    a failing step moves the run to ``failed`` and skips the rest. The run
    start time is read once and stamped on every contact the run writes.

    Fetch retries live here, not in the connector: only
    ``SourceUnavailableError`` is retried, with exponential backoff.
    """

    def __init__(
        self,
        *,
        connector: BaseContactConnector,
        batch_size: int,
        normalizer: ContactNormalizer | None = None,
        fetch_max_retries: int = 0,
        backoff_initial_seconds: float = 0.5,
        backoff_multiplier: float = 2.0,
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._connector = connector
        self._normalizer = normalizer or ContactNormalizer(source=connector.source)
        self._batch_size = max(1, batch_size)
        self._fetch_max_retries = max(0, fetch_max_retries)
        self._backoff_initial_seconds = backoff_initial_seconds
        self._backoff_multiplier = backoff_multiplier
        self._clock = clock
        self._sleep = sleep

    @property
    def source(self) -> str:
        return self._connector.source

    def run(self, *, db: Session, trigger: str = "api") -> SyncRunResult:
        """
        Execute one full sync run and return its result. Never raises for
        pipeline failures; they are reported in the result.
        """

        started_at = self._clock()
        logger.info(
            "Contact sync starting source=%s trigger=%s started_at=%s",
            self.source,
            trigger,
            started_at.isoformat(),
        )
        result = self._execute(db=db, started_at=started_at)
        self._report(db=db, result=result, trigger=trigger)
        return result

    def _execute(self, *, db: Session, started_at: datetime) -> SyncRunResult:
        fetched: list[ExternalContactRecord] = []
        steps = [SyncRunState.START, SyncRunState.FETCHING]
        attempt = 0

        while True:
            attempt += 1
            try:
                fetched = self._connector.fetch_all()
                break
            except SourceUnavailableError as exc:
                if attempt > self._fetch_max_retries:
                    return self._failed(
                        started_at=started_at,
                        step=SyncRunState.FETCHING,
                        error=exc,
                        fetch_attempts=attempt,
                        steps=steps,
                    )
                backoff_seconds = self._backoff_initial_seconds * (self._backoff_multiplier ** (attempt - 1))
                logger.warning(
                    "Contact fetch retry source=%s attempt=%s/%s wait_seconds=%.2f error=%s",
                    self.source,
                    attempt,
                    self._fetch_max_retries,
                    backoff_seconds,
                    exc,
                )
                self._sleep(backoff_seconds)
            except SourceProtocolError as exc:
                return self._failed(
                    started_at=started_at,
                    step=SyncRunState.FETCHING,
                    error=exc,
                    fetch_attempts=attempt,
                    steps=steps,
                )
            except Exception as exc:  # noqa: BLE001
                logger.exception("Unhandled contact source failure source=%s error=%s", self.source, exc)
                return self._failed(
                    started_at=started_at,
                    step=SyncRunState.FETCHING,
                    error=exc,
                    fetch_attempts=attempt,
                    steps=steps,
                )

        if not fetched:
            logger.info("Contact source returned no records source=%s", self.source)
            return SyncRunResult(
                succeeded=True,
                written_count=0,
                skipped_count=0,
                timestamp=started_at,
                state=SyncRunState.DONE,
                fetch_attempts=attempt,
                completed_at=utc_now(),
                steps=(*steps, SyncRunState.EMPTY, SyncRunState.DONE),
            )

        steps.append(SyncRunState.NORMALIZING)
        contacts, skipped = self._normalize(fetched, synced_at=started_at)
        steps.append(SyncRunState.UPSERTING)

        try:
            written = ContactRepository(db).upsert_batch(contacts, batch_size=self._batch_size)
            db.commit()
        except (SQLAlchemyError, StorageError) as exc:
            db.rollback()
            logger.exception(
                "Failed to persist contacts source=%s contacts=%s error=%s",
                self.source,
                len(contacts),
                exc,
            )
            error = exc if isinstance(exc, StorageError) else StorageError(
                "Contact upsert failed.",
                details=str(exc.__cause__ or exc),
            )
            return self._failed(
                started_at=started_at,
                step=SyncRunState.UPSERTING,
                error=error,
                fetch_attempts=attempt,
                fetched_count=len(fetched),
                skipped=skipped,
                steps=steps,
            )

        return SyncRunResult(
            succeeded=True,
            written_count=written,
            skipped_count=len(skipped),
            timestamp=started_at,
            state=SyncRunState.DONE,
            fetched_count=len(fetched),
            fetch_attempts=attempt,
            completed_at=utc_now(),
            skipped=skipped,
            steps=(*steps, SyncRunState.DONE),
        )

    def _normalize(
        self,
        records: list[ExternalContactRecord],
        *,
        synced_at: datetime,
    ) -> tuple[list[CanonicalContact], list[SkippedContact]]:
        contacts: list[CanonicalContact] = []
        skipped: list[SkippedContact] = []

        for index, record in enumerate(records):
            try:
                contacts.append(self._normalizer.normalize(record, synced_at=synced_at))
            except ContactValidationError as exc:
                skipped.append(
                    SkippedContact(
                        index=index,
                        reason=exc.message,
                        external_id=exc.external_id,
                        field=exc.field,
                    )
                )
                logger.warning(
                    "Skipping contact record source=%s index=%s field=%s reason=%s",
                    self.source,
                    index,
                    exc.field,
                    exc.message,
                )

        return contacts, skipped

    def _failed(
        self,
        *,
        started_at: datetime,
        step: str,
        error: Exception,
        fetch_attempts: int,
        fetched_count: int = 0,
        skipped: list[SkippedContact] | None = None,
        steps: list[str],
    ) -> SyncRunResult:
        skipped = skipped or []
        if isinstance(error, ContactSyncError):
            message, details, retryable = error.message, error.details, error.retryable
        else:
            message, details, retryable = str(error) or type(error).__name__, None, False

        return SyncRunResult(
            succeeded=False,
            written_count=0,
            skipped_count=len(skipped),
            timestamp=started_at,
            state=SyncRunState.FAILED,
            fetched_count=fetched_count,
            failed_step=step,
            error_type=type(error).__name__,
            error_message=message,
            error_details=details,
            retryable=retryable,
            fetch_attempts=fetch_attempts,
            completed_at=utc_now(),
            skipped=skipped,
            steps=(*steps, SyncRunState.FAILED),
        )

    def _report(self, *, db: Session, result: SyncRunResult, trigger: str) -> None:
        log_sync_run(logger, result, source=self.source, trigger=trigger)

        # Run history feeds the log viewer only; a failure here never changes the result.
        try:
            ContactSyncRunRepository(db).record_run(result, trigger=trigger)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Failed to record contact sync run source=%s error=%s", self.source, exc)


@lru_cache(maxsize=1)
def get_contact_sync_service() -> ContactSyncService:
    """
    Build and cache the contact sync service for the configured Monday board.
    """

    settings = get_contact_sync_settings()
    connector = MondayContactConnector(
        settings=get_monday_settings(),
        http_settings=get_external_http_settings(),
    )
    return ContactSyncService(
        connector=connector,
        batch_size=settings.batch_size,
        fetch_max_retries=settings.fetch_max_retries,
        backoff_initial_seconds=settings.backoff_initial_seconds,
        backoff_multiplier=settings.backoff_multiplier,
    )
