"""
app/connectors/monday_connector.py

Monday.com contacts board connector.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from app.config import ExternalHTTPSettings, MondaySettings
from app.connectors.base import BaseContactConnector
from app.domain.contacts import ExternalContactRecord
from app.domain.errors import SourceProtocolError, SourceUnavailableError

logger = logging.getLogger(__name__)

FIRST_PAGE_QUERY = """
query ($boardId: [ID!], $limit: Int!) {
  boards(ids: $boardId) {
    items_page(limit: $limit) {
      cursor
      items {
        id
        name
        column_values {
          id
          text
        }
      }
    }
  }
}
"""

NEXT_PAGE_QUERY = """
query ($cursor: String!, $limit: Int!) {
  next_items_page(cursor: $cursor, limit: $limit) {
    cursor
    items {
      id
      name
      column_values {
        id
        text
      }
    }
  }
}
"""


class MondayContactConnector(BaseContactConnector):
    """
    Reads every item of a Monday.com contacts board through the GraphQL API.

    Boards are paged; the connector walks ``items_page`` / ``next_items_page``
    cursors until the board is exhausted, so one call returns the full set.
    """

    def __init__(
        self,
        *,
        settings: MondaySettings,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(source="monday", http_settings=http_settings, session=session)
        self._settings = settings

    def fetch_all(self) -> list[ExternalContactRecord]:
        if not self._settings.api_key or not self._settings.board_id:
            logger.error(
                "Monday.com credentials missing board_id_present=%s api_key_present=%s",
                bool(self._settings.board_id),
                bool(self._settings.api_key),
            )
            raise SourceUnavailableError(
                "monday: MONDAY_API_KEY and MONDAY_CONTACTS_BOARD_ID must both be set.",
            )

        page = self._first_page()
        items: list[Any] = list(page["items"])
        cursor = page["cursor"]
        pages = 1

        while cursor:
            page = self._next_page(cursor)
            items.extend(page["items"])
            cursor = page["cursor"]
            pages += 1

        logger.info(
            "Fetched Monday.com board board_id=%s items=%s pages=%s",
            self._settings.board_id,
            len(items),
            pages,
        )
        return [self._to_record(item) for item in items]

    def _first_page(self) -> dict[str, Any]:
        data = self._graphql(
            FIRST_PAGE_QUERY,
            {"boardId": [self._settings.board_id], "limit": self._settings.page_size},
        )
        boards = data.get("boards")
        if not isinstance(boards, list):
            raise SourceProtocolError("monday: response is missing data.boards.")
        if not boards:
            raise SourceProtocolError(
                f"monday: board {self._settings.board_id} was not found or is not visible to this API key.",
            )
        board = boards[0]
        items_page = board.get("items_page") if isinstance(board, dict) else None
        return self._parse_page(items_page, "boards[0].items_page")

    def _next_page(self, cursor: str) -> dict[str, Any]:
        data = self._graphql(
            NEXT_PAGE_QUERY,
            {"cursor": cursor, "limit": self._settings.page_size},
        )
        return self._parse_page(data.get("next_items_page"), "next_items_page")

    def _graphql(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": self._settings.api_key or "",
        }
        if self._settings.api_version:
            headers["API-Version"] = self._settings.api_version

        payload = self._request_json(
            method="POST",
            url=self._settings.api_url,
            json_body={"query": query, "variables": variables},
            headers=headers,
        )
        if not isinstance(payload, dict):
            raise SourceProtocolError("monday: response body is not a JSON object.")

        errors = payload.get("errors")
        if errors:
            messages = [
                str(error.get("message", error)) if isinstance(error, dict) else str(error)
                for error in (errors if isinstance(errors, list) else [errors])
            ]
            logger.error("Monday.com GraphQL errors board_id=%s errors=%s", self._settings.board_id, messages)
            raise SourceProtocolError(
                "monday: GraphQL query returned errors.",
                details="; ".join(messages),
            )

        data = payload.get("data")
        if not isinstance(data, dict):
            raise SourceProtocolError("monday: response is missing the data object.")
        return data

    @staticmethod
    def _parse_page(page: Any, path: str) -> dict[str, Any]:
        if not isinstance(page, dict):
            raise SourceProtocolError(f"monday: response is missing {path}.")
        items = page.get("items")
        if not isinstance(items, list):
            raise SourceProtocolError(f"monday: {path}.items is not a list.")
        cursor = page.get("cursor")
        return {"items": items, "cursor": cursor if isinstance(cursor, str) and cursor else None}

    def _to_record(self, item: Any) -> ExternalContactRecord:
        # Malformed items still become records; the normalizer rejects them individually.
        if not isinstance(item, dict):
            return ExternalContactRecord(
                external_id=None,
                metadata={"board_id": self._settings.board_id, "raw_item": repr(item)[:200]},
            )

        columns: dict[str, Any] = {}
        raw_columns = item.get("column_values")
        if isinstance(raw_columns, list):
            for column in raw_columns:
                if isinstance(column, dict) and column.get("id"):
                    columns[str(column["id"])] = column.get("text")

        column_map = self._settings.column_map
        mapped_ids = set(column_map.values())
        values = {field_name: columns.get(column_id) for field_name, column_id in column_map.items()}
        if "name" not in column_map:
            values["name"] = item.get("name")

        unmapped = {column_id: text for column_id, text in columns.items() if column_id not in mapped_ids}
        metadata: dict[str, Any] = {"board_id": self._settings.board_id}
        if unmapped:
            metadata["columns"] = unmapped

        return ExternalContactRecord(
            external_id=item.get("id"),
            name=values.get("name"),
            first_name=values.get("first_name"),
            last_name=values.get("last_name"),
            email=values.get("email"),
            phone=values.get("phone"),
            company=values.get("company"),
            role=values.get("role"),
            contact_type=values.get("contact_type"),
            metadata=metadata,
        )
