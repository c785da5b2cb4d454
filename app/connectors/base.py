"""
app/connectors/base.py

Base contact source abstraction and shared HTTP mechanics.

Connectors make exactly one attempt per request. Retrying a failed fetch is
the orchestrator's decision, so every transport problem is translated into
``SourceUnavailableError`` or ``SourceProtocolError`` here and raised as-is.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import requests

from app.config import ExternalHTTPSettings
from app.domain.contacts import ExternalContactRecord
from app.domain.errors import SourceProtocolError, SourceUnavailableError

logger = logging.getLogger(__name__)

UNAVAILABLE_STATUS_CODES = {401, 403, 408, 429, 500, 502, 503, 504}


class BaseContactConnector(ABC):
    """
    Fetches the full current contact set from one external system.
    """

    source: str

    def __init__(
        self,
        *,
        source: str,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        self.source = source
        self._session = session or requests.Session()
        self._timeout_seconds = http_settings.timeout_seconds
        self._user_agent = http_settings.user_agent

    @abstractmethod
    def fetch_all(self) -> list[ExternalContactRecord]:
        """
        Return every contact currently held by the source.

        Raises SourceUnavailableError or SourceProtocolError. Must not touch local state.
        """

    def _request_json(
        self,
        *,
        method: str,
        url: str,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Execute one HTTP request and return the parsed JSON body.
        """

        response = self._request(
            method=method,
            url=url,
            json_body=json_body,
            params=params,
            headers=headers,
        )
        try:
            return response.json()
        except ValueError as exc:
            logger.error(
                "Contact source returned non-JSON body source=%s status=%s url=%s",
                self.source,
                response.status_code,
                url,
            )
            raise SourceProtocolError(
                f"{self.source}: response was not valid JSON.",
                details=response.text[:500],
            ) from exc

    def _request(
        self,
        *,
        method: str,
        url: str,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        request_headers = {"User-Agent": self._user_agent}
        if headers:
            request_headers.update(headers)

        try:
            response = self._session.request(
                method=method,
                url=url,
                json=json_body,
                params=params,
                headers=request_headers,
                timeout=self._timeout_seconds,
            )
        except requests.Timeout as exc:
            logger.warning(
                "Contact source request timed out source=%s timeout_seconds=%.1f url=%s",
                self.source,
                self._timeout_seconds,
                url,
            )
            raise SourceUnavailableError(
                f"{self.source}: request timed out after {self._timeout_seconds:g}s.",
            ) from exc
        except requests.RequestException as exc:
            logger.warning(
                "Contact source request failed source=%s url=%s error=%s",
                self.source,
                url,
                exc,
            )
            raise SourceUnavailableError(
                f"{self.source}: could not reach the contact source.",
                details=str(exc),
            ) from exc

        status_code = response.status_code
        if status_code in UNAVAILABLE_STATUS_CODES:
            logger.warning(
                "Contact source unavailable source=%s status=%s url=%s",
                self.source,
                status_code,
                url,
            )
            raise SourceUnavailableError(
                f"{self.source}: contact source answered HTTP {status_code}.",
                details=response.text[:500],
            )
        if status_code >= 400:
            logger.error(
                "Contact source rejected request source=%s status=%s url=%s",
                self.source,
                status_code,
                url,
            )
            raise SourceProtocolError(
                f"{self.source}: contact source rejected the request with HTTP {status_code}.",
                details=response.text[:500],
            )
        return response
