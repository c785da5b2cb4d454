"""
db/session.py

Engine and session lifecycle for the contact store.

The engine is built on first use, so importing the API or the scheduler
never requires a reachable database.
"""

from __future__ import annotations

import os
from collections.abc import Generator, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.config import resolve_database_url


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, ""))
    except ValueError:
        return default


@dataclass(frozen=True)
class EngineOptions:
    """Connection pool tuning for the contact store engine."""

    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10
    pool_recycle_seconds: int = 1800

    @classmethod
    def from_env(cls) -> EngineOptions:
        return cls(
            echo=_env_flag("SQL_ECHO"),
            pool_size=_env_int("DB_POOL_SIZE", 5),
            max_overflow=_env_int("DB_MAX_OVERFLOW", 10),
            pool_recycle_seconds=_env_int("DB_POOL_RECYCLE", 1800),
        )


def create_db_engine(options: EngineOptions | None = None) -> Engine:
    database_url = resolve_database_url()
    if not database_url.startswith("postgresql"):
        raise RuntimeError("The contact store runs on PostgreSQL; set a postgresql:// URL.")

    options = options or EngineOptions.from_env()
    return create_engine(
        database_url,
        echo=options.echo,
        pool_pre_ping=True,
        pool_size=options.pool_size,
        max_overflow=options.max_overflow,
        pool_recycle=options.pool_recycle_seconds,
    )


_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def get_engine() -> Engine:
    """Shared engine, created on first call."""
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def SessionLocal() -> Session:
    """New session bound to the shared engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_engine(),
            autoflush=False,
            expire_on_commit=False,
        )
    return _session_factory()


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency: one session per request, closed afterwards.
    Commits are the service's business.
    """

    with session_scope() as db:
        yield db


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for work outside a request (scheduler, CLI); closed on exit."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
