"""
app/main.py

FastAPI entrypoint for the contact sync service.
"""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

logger = logging.getLogger(__name__)

_REQUIRED_MONDAY_VARIABLES = ("MONDAY_API_KEY", "MONDAY_CONTACTS_BOARD_ID")


def _validate_env() -> None:
    """
    Fail fast on missing configuration.

    Every problem is collected into a single RuntimeError so one restart is
    enough to fix them all.
    """

    from db.config import resolve_database_url

    problems: list[str] = []

    try:
        resolve_database_url()
    except RuntimeError as exc:
        problems.append(str(exc))

    for name in _REQUIRED_MONDAY_VARIABLES:
        if not os.getenv(name, "").strip():
            problems.append(f"{name} is not set. Empty strings are not permitted.")

    if problems:
        raise RuntimeError(
            "Contact sync cannot start:\n" + "\n".join(f"  - {problem}" for problem in problems)
        )


def _configure_logging() -> None:
    level_name = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_contact_store() -> None:
    """
    Confirm the contact store answers and that every mapped table exists.
    Migrations are never applied from here.
    """

    from sqlalchemy import inspect, text
    from sqlalchemy.exc import SQLAlchemyError

    import db.models  # noqa: F401  registers contacts and contact_sync_runs
    from db.base import Base
    from db.config import redact_database_url
    from db.session import get_engine

    engine = get_engine()
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
            existing = set(inspect(connection).get_table_names())
    except SQLAlchemyError as exc:
        raise RuntimeError(
            f"Contact store unavailable at {redact_database_url(str(engine.url))}."
        ) from exc

    missing = sorted(set(Base.metadata.tables) - existing)
    if missing:
        logger.critical(
            "Contact store schema incomplete missing_tables=%s. Run 'alembic upgrade head' and restart.",
            ",".join(missing),
        )
        raise RuntimeError(f"Contact store is missing table(s): {', '.join(missing)}.")

    logger.info("Contact store ready url=%s", redact_database_url(str(engine.url)))


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Check the contact store, then run the sync scheduler for the app's lifetime."""
    _check_contact_store()

    from app.scheduler.jobs import build_scheduler

    scheduler = build_scheduler()
    scheduler.start()
    logger.info("Scheduler started jobs=%d", len(scheduler.get_jobs()))
    try:
        yield
    finally:
        scheduler.shutdown(wait=True)
        logger.info("Scheduler shut down")


def create_app() -> FastAPI:
    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Contact Sync API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import contacts_router

    application.include_router(contacts_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
