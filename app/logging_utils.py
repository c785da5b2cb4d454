"""
Structured run logging.

Every sync run ends with one JSON log line, so run outcomes can be indexed
without parsing free text.
"""

from __future__ import annotations

import json
import logging

from app.domain.contact_sync import SyncRunResult

RUN_EVENT = "contact_sync_run"


def log_sync_run(
    logger: logging.Logger,
    result: SyncRunResult,
    *,
    source: str,
    trigger: str,
) -> None:
    """Log ``result`` at INFO when the run succeeded, ERROR otherwise."""
    payload = {"event": RUN_EVENT, "source": source, "trigger": trigger, **result.to_payload()}
    logger.log(
        logging.INFO if result.succeeded else logging.ERROR,
        json.dumps(payload, default=str, sort_keys=True, separators=(",", ":")),
    )
