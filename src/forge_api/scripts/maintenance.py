# src/forge_api/scripts/maintenance.py
"""
Cron job for time-based housekeeping.

This script should be run hourly to:
1. Remove visitor heartbeat rows outside the retention window
2. Delete bans whose expiry has passed
"""

import logging
import os

from sqlalchemy.orm import Session

from forge_api.db.session import session_scope
from forge_api.services.bans import BanService
from forge_api.services.visitors import VisitorService

logger = logging.getLogger(__name__)


def clean_visitors(db: Session, hours: int | None = None) -> int:
    """Drop stale heartbeat rows; the peak history is left alone.

    Args:
        db: Database session
        hours: Retention window, defaults to the configured value
    """
    removed = VisitorService(db).clean_old_records(hours)
    print(f"Removed {removed} stale visitor records")
    return removed


def expire_bans(db: Session) -> int:
    """Delete bans that have run their course.

    Args:
        db: Database session
    """
    removed = BanService(db).expire_lapsed()
    print(f"Removed {removed} expired bans")
    return removed


def main() -> None:
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
    with session_scope() as db:
        clean_visitors(db)
        expire_bans(db)


if __name__ == "__main__":
    main()
