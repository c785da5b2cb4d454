"""
tests/test_monday_connector.py

Monday.com connector tests against a mocked ``requests.Session``.
No network access.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from app.config import ExternalHTTPSettings, MondaySettings
from app.connectors import MondayContactConnector
from app.domain.errors import SourceProtocolError, SourceUnavailableError


def _response(status_code: int = 200, payload: Any = None, *, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if payload is None:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = payload
    return response


def _item(item_id: str, name: str, **columns: str | None) -> dict[str, Any]:
    return {
        "id": item_id,
        "name": name,
        "column_values": [{"id": column_id, "text": text} for column_id, text in columns.items()],
    }


def _first_page(items: list[Any], cursor: str | None = None) -> dict[str, Any]:
    return {"data": {"boards": [{"items_page": {"cursor": cursor, "items": items}}]}}


def _next_page(items: list[Any], cursor: str | None = None) -> dict[str, Any]:
    return {"data": {"next_items_page": {"cursor": cursor, "items": items}}}


@pytest.fixture()
def http_session() -> MagicMock:
    return MagicMock(spec=requests.Session)


def _connector(http_session: MagicMock, **overrides: Any) -> MondayContactConnector:
    settings = MondaySettings(**{"api_key": "secret-key", "board_id": "42", **overrides})
    return MondayContactConnector(
        settings=settings,
        http_settings=ExternalHTTPSettings(timeout_seconds=5.0),
        session=http_session,
    )


class TestFetchAll:
    def test_maps_board_columns_to_contact_fields(self, http_session: MagicMock) -> None:
        http_session.request.return_value = _response(
            payload=_first_page(
                [
                    _item(
                        "A1",
                        "Jane Doe",
                        text_mkpw4ym4="Jane",
                        text_mkpwcsbq="Doe",
                        title5="CTO",
                        text8="Acme",
                        contact_email="jane@x.com",
                        contact_phone="+1 555 0100",
                        status="Customer",
                        notes_col="met at expo",
                    )
                ]
            )
        )

        records = _connector(http_session).fetch_all()

        assert len(records) == 1
        contact = records[0]
        assert contact.external_id == "A1"
        assert contact.name == "Jane Doe"
        assert contact.first_name == "Jane"
        assert contact.last_name == "Doe"
        assert contact.role == "CTO"
        assert contact.company == "Acme"
        assert contact.email == "jane@x.com"
        assert contact.phone == "+1 555 0100"
        assert contact.contact_type == "Customer"
        assert contact.metadata == {"board_id": "42", "columns": {"notes_col": "met at expo"}}

    def test_walks_cursor_pages_until_exhausted(self, http_session: MagicMock) -> None:
        http_session.request.side_effect = [
            _response(payload=_first_page([_item("A1", "One")], cursor="cursor-1")),
            _response(payload=_next_page([_item("A2", "Two")], cursor="cursor-2")),
            _response(payload=_next_page([_item("A3", "Three")], cursor=None)),
        ]

        records = _connector(http_session, page_size=1).fetch_all()

        assert [r.external_id for r in records] == ["A1", "A2", "A3"]
        assert http_session.request.call_count == 3
        second_call = http_session.request.call_args_list[1].kwargs
        assert second_call["json"]["variables"] == {"cursor": "cursor-1", "limit": 1}

    def test_timeout_applies_to_every_page_request(self, http_session: MagicMock) -> None:
        http_session.request.side_effect = [
            _response(payload=_first_page([_item("A1", "One")], cursor="cursor-1")),
            _response(payload=_next_page([_item("A2", "Two")], cursor=None)),
        ]

        _connector(http_session).fetch_all()

        assert [call.kwargs["timeout"] for call in http_session.request.call_args_list] == [5.0, 5.0]

    def test_sends_credentials_and_timeout(self, http_session: MagicMock) -> None:
        http_session.request.return_value = _response(payload=_first_page([]))

        assert _connector(http_session).fetch_all() == []

        kwargs = http_session.request.call_args.kwargs
        assert kwargs["method"] == "POST"
        assert kwargs["url"] == "https://api.monday.com/v2"
        assert kwargs["timeout"] == 5.0
        assert kwargs["headers"]["Authorization"] == "secret-key"
        assert kwargs["headers"]["API-Version"] == "2024-10"
        assert kwargs["json"]["variables"] == {"boardId": ["42"], "limit": 500}

    def test_custom_column_map_is_honoured(self, http_session: MagicMock) -> None:
        http_session.request.return_value = _response(
            payload=_first_page([_item("A1", "Jane", work_mail="jane@work.io")])
        )

        records = _connector(http_session, column_map={"email": "work_mail"}).fetch_all()

        assert records[0].email == "jane@work.io"
        assert records[0].first_name is None

    def test_malformed_item_becomes_a_record_without_id(self, http_session: MagicMock) -> None:
        http_session.request.return_value = _response(payload=_first_page(["not-an-item", _item("A1", "Jane")]))

        records = _connector(http_session).fetch_all()

        assert [r.external_id for r in records] == [None, "A1"]


class TestFailureClassification:
    def test_missing_credentials_are_unavailable_without_a_request(self, http_session: MagicMock) -> None:
        with pytest.raises(SourceUnavailableError):
            _connector(http_session, api_key=None).fetch_all()
        http_session.request.assert_not_called()

    def test_timeout_is_unavailable(self, http_session: MagicMock) -> None:
        http_session.request.side_effect = requests.Timeout("read timed out")

        with pytest.raises(SourceUnavailableError) as ctx:
            _connector(http_session).fetch_all()
        assert ctx.value.retryable is True

    def test_connection_error_is_unavailable(self, http_session: MagicMock) -> None:
        http_session.request.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(SourceUnavailableError):
            _connector(http_session).fetch_all()

    @pytest.mark.parametrize("status_code", [401, 429, 500, 503])
    def test_auth_throttle_and_server_errors_are_unavailable(
        self,
        http_session: MagicMock,
        status_code: int,
    ) -> None:
        http_session.request.return_value = _response(status_code, {"error_message": "nope"}, text="nope")

        with pytest.raises(SourceUnavailableError):
            _connector(http_session).fetch_all()

    def test_other_client_errors_are_protocol_errors(self, http_session: MagicMock) -> None:
        http_session.request.return_value = _response(400, {"error_message": "bad query"}, text="bad query")

        with pytest.raises(SourceProtocolError) as ctx:
            _connector(http_session).fetch_all()
        assert ctx.value.retryable is False

    def test_non_json_body_is_protocol_error(self, http_session: MagicMock) -> None:
        http_session.request.return_value = _response(200, None, text="<html>maintenance</html>")

        with pytest.raises(SourceProtocolError):
            _connector(http_session).fetch_all()

    def test_graphql_errors_are_protocol_errors(self, http_session: MagicMock) -> None:
        http_session.request.return_value = _response(
            payload={"errors": [{"message": "Field 'boards' doesn't exist"}]}
        )

        with pytest.raises(SourceProtocolError) as ctx:
            _connector(http_session).fetch_all()
        assert "boards" in (ctx.value.details or "")

    def test_unknown_board_is_protocol_error(self, http_session: MagicMock) -> None:
        http_session.request.return_value = _response(payload={"data": {"boards": []}})

        with pytest.raises(SourceProtocolError):
            _connector(http_session).fetch_all()

    def test_items_not_a_list_is_protocol_error(self, http_session: MagicMock) -> None:
        http_session.request.return_value = _response(
            payload={"data": {"boards": [{"items_page": {"cursor": None, "items": "oops"}}]}}
        )

        with pytest.raises(SourceProtocolError):
            _connector(http_session).fetch_all()
