"""
Run one contact sync from the CLI and print the run result as JSON.
"""

from __future__ import annotations

import argparse
import json
import logging
import os

from app.services.contact_sync_service import get_contact_sync_service
from db.session import session_scope


def main() -> int:
    parser = argparse.ArgumentParser(description="Sync contacts from the external CRM into the contact store.")
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level (default: LOG_LEVEL or INFO).",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.strip().upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    service = get_contact_sync_service()
    with session_scope() as db:
        result = service.run(db=db, trigger="cli")

    print(json.dumps(result.to_payload(), indent=2))
    return 0 if result.succeeded else 1


if __name__ == "__main__":
    raise SystemExit(main())
