"""
app/config.py

Contact sync settings read from the environment.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache

from db.config import load_env_files

logger = logging.getLogger(__name__)

# Column ids of the contacts board the integration was built against.
DEFAULT_MONDAY_COLUMN_MAP: dict[str, str] = {
    "first_name": "text_mkpw4ym4",
    "last_name": "text_mkpwcsbq",
    "role": "title5",
    "company": "text8",
    "email": "contact_email",
    "phone": "contact_phone",
    "contact_type": "status",
}

MAPPABLE_CONTACT_FIELDS = frozenset(DEFAULT_MONDAY_COLUMN_MAP) | {"name"}


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Load `.env` files once, before the first setting is read.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Truthy values: 1, true, yes, on. Unset falls back to ``default``.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string; blank values count as unset.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def parse_column_map(raw: str | None) -> dict[str, str]:
    """
    Parse ``MONDAY_COLUMN_MAP`` overrides on top of the default column map.

    Format: ``field:column_id,field:column_id`` (whitespace-tolerant).
    Unknown fields and malformed tokens are skipped with a WARNING log.
    """

    column_map = dict(DEFAULT_MONDAY_COLUMN_MAP)
    if not raw:
        return column_map

    for token in raw.split(","):
        token = token.strip()
        if not token:
            continue
        parts = token.split(":", 1)
        if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
            logger.warning("MONDAY_COLUMN_MAP: skipping malformed token %r", token)
            continue
        field_name, column_id = parts[0].strip().lower(), parts[1].strip()
        if field_name not in MAPPABLE_CONTACT_FIELDS:
            logger.warning("MONDAY_COLUMN_MAP: skipping unknown field %r", field_name)
            continue
        column_map[field_name] = column_id
    return column_map


@dataclass(frozen=True)
class ExternalHTTPSettings:
    """
    HTTP behaviour for the contact source.

    ``timeout_seconds`` bounds each HTTP request on its own, not the whole
    fetch: a board read in N pages may take up to N times the timeout, and
    orchestrator retries repeat the full read.
    """

    timeout_seconds: float = 15.0
    user_agent: str = "contact-sync/1.0"


@dataclass(frozen=True)
class MondaySettings:
    """
    Monday.com contacts board connection settings.
    """

    api_key: str | None = None
    board_id: str | None = None
    api_url: str = "https://api.monday.com/v2"
    api_version: str | None = "2024-10"
    page_size: int = 500
    column_map: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_MONDAY_COLUMN_MAP))


@dataclass(frozen=True)
class ContactSyncSettings:
    """
    Runtime settings for the sync orchestrator and its scheduled job.
    """

    batch_size: int = 500
    fetch_max_retries: int = 2
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    schedule_enabled: bool = False
    schedule_interval_minutes: int = 60
    run_history_limit: int = 10


@dataclass(frozen=True)
class APISecuritySettings:
    """
    Shared API key for the contacts routes. ``None`` leaves the routes open.
    """

    api_key: str | None = None


@lru_cache(maxsize=1)
def get_external_http_settings() -> ExternalHTTPSettings:
    return ExternalHTTPSettings(
        timeout_seconds=max(1.0, _get_float_env("EXTERNAL_HTTP_TIMEOUT_SECONDS", 15.0)),
        user_agent=_get_str_env("EXTERNAL_HTTP_USER_AGENT", "contact-sync/1.0"),
    )


@lru_cache(maxsize=1)
def get_monday_settings() -> MondaySettings:
    """
    Return Monday.com connector settings from environment variables.
    """

    return MondaySettings(
        api_key=_get_optional_str_env("MONDAY_API_KEY"),
        board_id=_get_optional_str_env("MONDAY_CONTACTS_BOARD_ID"),
        api_url=_get_str_env("MONDAY_API_URL", "https://api.monday.com/v2"),
        api_version=_get_optional_str_env("MONDAY_API_VERSION") or "2024-10",
        page_size=min(500, max(1, _get_int_env("MONDAY_PAGE_SIZE", 500))),
        column_map=parse_column_map(_get_optional_str_env("MONDAY_COLUMN_MAP")),
    )


@lru_cache(maxsize=1)
def get_contact_sync_settings() -> ContactSyncSettings:
    """
    Return contact sync orchestration settings from environment variables.
    """

    return ContactSyncSettings(
        batch_size=max(1, _get_int_env("CONTACT_SYNC_BATCH_SIZE", 500)),
        fetch_max_retries=max(0, _get_int_env("CONTACT_SYNC_FETCH_MAX_RETRIES", 2)),
        backoff_initial_seconds=max(0.0, _get_float_env("CONTACT_SYNC_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("CONTACT_SYNC_BACKOFF_MULTIPLIER", 2.0)),
        schedule_enabled=_get_bool_env("CONTACT_SYNC_SCHEDULE_ENABLED", False),
        schedule_interval_minutes=max(1, _get_int_env("CONTACT_SYNC_SCHEDULE_INTERVAL_MINUTES", 60)),
        run_history_limit=max(1, _get_int_env("CONTACT_SYNC_RUN_HISTORY_LIMIT", 10)),
    )


@lru_cache(maxsize=1)
def get_api_security_settings() -> APISecuritySettings:
    return APISecuritySettings(api_key=_get_optional_str_env("CONTACT_SYNC_API_KEY"))
