"""
app/scheduler/jobs.py

APScheduler-based periodic contact sync.

When ``CONTACT_SYNC_SCHEDULE_ENABLED`` is true, ``contact_sync`` runs the
full sync every ``CONTACT_SYNC_SCHEDULE_INTERVAL_MINUTES``. The job is limited
to one instance and coalesces missed runs, so scheduled syncs never overlap.

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import ContactSyncSettings, get_contact_sync_settings
from app.services.contact_sync_service import get_contact_sync_service
from db.session import session_scope

logger = logging.getLogger(__name__)

CONTACT_SYNC_JOB_ID = "contact_sync"


def run_contact_sync() -> None:
    """
    Run one scheduled contact sync. Failures are already captured in the run
    result and run history; this job only logs the outcome.
    """
    logger.info("Scheduler: contact_sync starting")

    with session_scope() as db:
        result = get_contact_sync_service().run(db=db, trigger="scheduler")

    if result.succeeded:
        logger.info(
            "Scheduler: contact_sync complete written=%s skipped=%s",
            result.written_count,
            result.skipped_count,
        )
    else:
        logger.warning(
            "Scheduler: contact_sync failed step=%s error_type=%s retryable=%s",
            result.failed_step,
            result.error_type,
            result.retryable,
        )


def build_scheduler(settings: ContactSyncSettings | None = None) -> BackgroundScheduler:
    """
    Build the scheduler and register the contact sync job when enabled.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    """
    settings = settings or get_contact_sync_settings()
    scheduler = BackgroundScheduler(timezone="UTC")

    if not settings.schedule_enabled:
        logger.info("Scheduler: contact_sync disabled (CONTACT_SYNC_SCHEDULE_ENABLED is off)")
        return scheduler

    scheduler.add_job(
        run_contact_sync,
        trigger="interval",
        minutes=settings.schedule_interval_minutes,
        id=CONTACT_SYNC_JOB_ID,
        name="Contact sync from external CRM",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=settings.schedule_interval_minutes * 60,
    )
    return scheduler
