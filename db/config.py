"""
db/config.py

Where the contact store lives: `.env` loading and database URL resolution.
"""

from __future__ import annotations

import os
from pathlib import Path

from sqlalchemy.engine import make_url

_ENV_FILES = (".env", ".env.local")
_CLOUD_LIKE_ENVIRONMENTS = frozenset({"prod", "production", "staging", "cloud"})
_PSYCOPG_PREFIXES = (
    ("postgres://", "postgresql+psycopg://"),
    ("postgresql://", "postgresql+psycopg://"),
)


def _parse_env_line(raw_line: str) -> tuple[str, str] | None:
    line = raw_line.strip()
    if not line or line.startswith("#"):
        return None
    if line.startswith("export "):
        line = line[len("export ") :].lstrip()

    key, separator, value = line.partition("=")
    key = key.strip()
    if not separator or not key:
        return None

    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        value = value[1:-1]
    return key, value


def load_env_files(root: Path | None = None) -> None:
    """
    Load `.env` then `.env.local` from the project root into ``os.environ``.

    A variable already set (by the process or by an earlier file) is kept.
    """

    root = root or Path(__file__).resolve().parents[1]
    for filename in _ENV_FILES:
        env_path = root / filename
        if not env_path.is_file():
            continue
        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            parsed = _parse_env_line(raw_line)
            if parsed is not None:
                os.environ.setdefault(*parsed)


def normalize_postgres_url(url: str) -> str:
    """
    Point bare postgres URLs at the psycopg (v3) driver.
    """

    for prefix, replacement in _PSYCOPG_PREFIXES:
        if url.startswith(prefix):
            return replacement + url[len(prefix) :]
    return url


def resolve_database_url() -> str:
    """
    Pick the contact store URL.

    DATABASE_URL wins. CLOUD_DATABASE_URL is only considered when ENVIRONMENT
    is cloud-like; LOCAL_DATABASE_URL is the last resort.
    """

    load_env_files()

    environment = os.getenv("ENVIRONMENT", "local").strip().lower()
    candidates = [os.getenv("DATABASE_URL")]
    if environment in _CLOUD_LIKE_ENVIRONMENTS:
        candidates.append(os.getenv("CLOUD_DATABASE_URL"))
    candidates.append(os.getenv("LOCAL_DATABASE_URL"))

    for url in candidates:
        if url and url.strip():
            return normalize_postgres_url(url.strip())

    raise RuntimeError(
        "No database URL configured. Set DATABASE_URL, or LOCAL_DATABASE_URL / "
        "CLOUD_DATABASE_URL (the latter with a cloud-like ENVIRONMENT)."
    )


def redact_database_url(url: str) -> str:
    """URL safe for logs: the password is masked."""
    return make_url(url).render_as_string(hide_password=True)
