"""
app/api/routers/contacts.py

Contact sync trigger, contact list and run history endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.dependencies import require_api_key
from app.config import ContactSyncSettings, get_contact_sync_settings
from app.domain.contact_sync import SyncRunResult
from app.domain.errors import StorageError
from app.schemas.contacts import (
    ContactListResponse,
    ContactResponse,
    ContactSyncFailureResponse,
    ContactSyncResponse,
    ContactSyncRunListResponse,
    ContactSyncRunResponse,
    ErrorResponse,
    SkippedContactResponse,
)
from app.services.contact_read_service import ContactReadService, get_contact_read_service
from app.services.contact_sync_service import ContactSyncService, get_contact_sync_service
from db.session import get_db

router = APIRouter(
    prefix="/api/contacts",
    tags=["contacts"],
    dependencies=[Depends(require_api_key)],
)

_FAILURE_STATUS_BY_ERROR = {
    "SourceUnavailableError": status.HTTP_503_SERVICE_UNAVAILABLE,
    "SourceProtocolError": status.HTTP_502_BAD_GATEWAY,
    "StorageError": status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_SOURCE_LABELS = {"monday": "Monday.com"}


@router.post(
    "/sync",
    response_model=ContactSyncResponse,
    responses={
        500: {"model": ContactSyncFailureResponse},
        502: {"model": ContactSyncFailureResponse},
        503: {"model": ContactSyncFailureResponse},
    },
)
def sync_contacts(
    db: Session = Depends(get_db),
    sync_service: ContactSyncService = Depends(get_contact_sync_service),
):
    """
    Run one full contact sync and report what it wrote.
    """

    result = sync_service.run(db=db, trigger="api")
    if not result.succeeded:
        return _failure_response(result)

    return ContactSyncResponse(
        inserted=result.written_count,
        skipped=result.skipped_count,
        message=_success_message(result, source=sync_service.source),
        timestamp=result.timestamp,
        skipped_records=[
            SkippedContactResponse.model_validate(skipped) for skipped in result.skipped
        ],
    )


@router.get(
    "",
    response_model=ContactListResponse,
    responses={500: {"model": ErrorResponse}},
)
def list_contacts(
    db: Session = Depends(get_db),
    read_service: ContactReadService = Depends(get_contact_read_service),
):
    """
    Return every synced contact, most recently synced first.
    """

    try:
        contacts = read_service.list_all(db=db)
    except StorageError as exc:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error=exc.message).model_dump(mode="json"),
        )

    return ContactListResponse(
        data=[ContactResponse.model_validate(contact) for contact in contacts],
    )


@router.get(
    "/sync/runs",
    response_model=ContactSyncRunListResponse,
    responses={500: {"model": ErrorResponse}},
)
def list_sync_runs(
    limit: int | None = Query(default=None, ge=1, le=100, description="Number of runs to return"),
    db: Session = Depends(get_db),
    read_service: ContactReadService = Depends(get_contact_read_service),
    settings: ContactSyncSettings = Depends(get_contact_sync_settings),
):
    """
    Return recent sync run results, newest first, for the run log viewer.
    """

    try:
        runs = read_service.list_runs(db=db, limit=limit or settings.run_history_limit)
    except StorageError as exc:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error=exc.message).model_dump(mode="json"),
        )

    return ContactSyncRunListResponse(
        data=[ContactSyncRunResponse.model_validate(run) for run in runs],
    )


def _success_message(result: SyncRunResult, *, source: str) -> str | None:
    if result.fetched_count == 0:
        return f"No contacts found on {_SOURCE_LABELS.get(source, source)} to sync."
    if result.skipped_count:
        return f"Skipped {result.skipped_count} contact record(s) that failed validation."
    return None


def _failure_response(result: SyncRunResult) -> JSONResponse:
    body = ContactSyncFailureResponse(
        error=result.error_message or "Contact sync failed.",
        details=result.error_details,
        retryable=bool(result.retryable),
        failed_step=result.failed_step,
        timestamp=result.timestamp,
    )
    return JSONResponse(
        status_code=_FAILURE_STATUS_BY_ERROR.get(
            result.error_type or "",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        ),
        content=body.model_dump(mode="json"),
    )
