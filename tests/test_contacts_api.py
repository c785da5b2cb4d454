"""
tests/test_contacts_api.py

HTTP contract of the contacts routes through FastAPI's TestClient.
The lifespan (DB checks, scheduler) is not entered; storage is the
in-memory SQLite fixture wired in through dependency overrides.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.config import APISecuritySettings, get_api_security_settings
from app.domain.errors import SourceProtocolError, SourceUnavailableError
from app.main import app
from app.repositories import ContactRepository
from app.services.contact_sync_service import ContactSyncService, get_contact_sync_service
from conftest import FakeClock, ScriptedConnector, record
from db.session import get_db


@pytest.fixture()
def connector() -> ScriptedConnector:
    return ScriptedConnector([record("A1", name="Jane Doe", email="jane@x.com")])


@pytest.fixture()
def client(db_session: Session, connector: ScriptedConnector, clock: FakeClock) -> Iterator[TestClient]:
    service = ContactSyncService(connector=connector, batch_size=500, clock=clock, sleep=lambda _s: None)

    def _get_db() -> Iterator[Session]:
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_contact_sync_service] = lambda: service
    app.dependency_overrides[get_api_security_settings] = lambda: APISecuritySettings()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_sync_reports_written_contacts(client: TestClient) -> None:
    response = client.post("/api/contacts/sync")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["inserted"] == 1
    assert body["skipped"] == 0
    assert body["message"] is None
    assert body["timestamp"].startswith("2026-10-19T09:00:00")


def test_sync_then_list_returns_contact(client: TestClient) -> None:
    client.post("/api/contacts/sync")

    response = client.get("/api/contacts")

    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data) == 1
    assert data[0]["external_id"] == "A1"
    assert data[0]["name"] == "Jane Doe"
    assert data[0]["email"] == "jane@x.com"
    assert data[0]["source"] == "monday"


@pytest.mark.parametrize("connector", [ScriptedConnector([])])
def test_empty_board_is_a_successful_sync(client: TestClient) -> None:
    response = client.post("/api/contacts/sync")

    assert response.status_code == 200
    body = response.json()
    assert body["inserted"] == 0
    assert body["message"] == "No contacts found on Monday.com to sync."


@pytest.mark.parametrize(
    "connector",
    [ScriptedConnector([record("A1", name="Jane"), record("", name="Blank")])],
)
def test_skipped_records_are_reported(client: TestClient) -> None:
    body = client.post("/api/contacts/sync").json()

    assert body["inserted"] == 1
    assert body["skipped"] == 1
    assert body["message"] == "Skipped 1 contact record(s) that failed validation."
    assert body["skipped_records"][0]["index"] == 1


@pytest.mark.parametrize(
    ("connector", "expected_status", "retryable"),
    [
        (ScriptedConnector(SourceUnavailableError("monday: request timed out after 15s.")), 503, True),
        (ScriptedConnector(SourceProtocolError("monday: GraphQL query returned errors.")), 502, False),
    ],
)
def test_sync_failure_maps_to_status(client: TestClient, expected_status: int, retryable: bool) -> None:
    response = client.post("/api/contacts/sync")

    assert response.status_code == expected_status
    body = response.json()
    assert body["success"] is False
    assert body["retryable"] is retryable
    assert body["failed_step"] == "fetching"
    assert body["error"].startswith("monday:")


def test_sync_storage_failure_returns_500(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    def _broken_upsert(self, contacts, *, batch_size=500):
        raise OperationalError("INSERT INTO contacts", {}, Exception("could not extend file"))

    monkeypatch.setattr(ContactRepository, "upsert_batch", _broken_upsert)

    response = client.post("/api/contacts/sync")

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["retryable"] is True
    assert body["failed_step"] == "upserting"
    assert body["error"]


def test_list_storage_failure_returns_500(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    def _broken_list_all(self):
        raise OperationalError("SELECT", {}, Exception("connection reset"))

    monkeypatch.setattr(ContactRepository, "list_all", _broken_list_all)

    response = client.get("/api/contacts")

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Could not read contacts."}


def test_list_is_empty_before_first_sync(client: TestClient) -> None:
    response = client.get("/api/contacts")
    assert response.status_code == 200
    assert response.json() == {"success": True, "data": []}


def test_sync_runs_lists_recent_runs(client: TestClient) -> None:
    client.post("/api/contacts/sync")
    client.post("/api/contacts/sync")

    response = client.get("/api/contacts/sync/runs", params={"limit": 1})

    assert response.status_code == 200
    runs = response.json()["data"]
    assert len(runs) == 1
    assert runs[0]["status"] == "completed"
    assert runs[0]["trigger"] == "api"
    assert runs[0]["written_count"] == 1


def test_api_key_is_enforced_when_configured(client: TestClient) -> None:
    app.dependency_overrides[get_api_security_settings] = lambda: APISecuritySettings(api_key="s3cret")

    assert client.get("/api/contacts").status_code == 401
    assert client.get("/api/contacts", headers={"X-API-Key": "wrong"}).status_code == 401
    assert client.get("/api/contacts", headers={"X-API-Key": "s3cret"}).status_code == 200
    assert client.get("/health").status_code == 200
