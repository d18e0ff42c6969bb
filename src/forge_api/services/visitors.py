# src/forge_api/services/visitors.py
"""Live visitor presence and peak tracking."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

import redis
from sqlalchemy import func
from sqlalchemy.orm import Session

from forge_api.core.settings import settings
from forge_api.db.time import as_utc, utcnow
from forge_api.models import PeakVisitor, Visitor
from forge_api.services.cache import Cache, get_cache

logger = logging.getLogger(__name__)

PEAK_LOCK_NAME = "peak-visitor-lock"
PEAK_CHANNEL = "peak-visitors"


class VisitorService:
    """Heartbeat bookkeeping for the "users online" counter.

    Each browser session upserts a :class:`Visitor` row; a session counts as
    active while its last heartbeat is inside the activity window. Record
    highs are appended to :class:`PeakVisitor` under a short cache lock so
    concurrent heartbeats cannot write a lower or duplicate peak.
    """

    def __init__(self, db: Session, cache: Cache | None = None) -> None:
        self.db = db
        self.cache = cache if cache is not None else get_cache()

    def _active_query(self, window_seconds: int | None = None):  # type: ignore[no-untyped-def]
        window = window_seconds if window_seconds is not None else settings.visitor_active_seconds
        since = utcnow() - timedelta(seconds=window)
        return self.db.query(Visitor).filter(Visitor.last_activity >= since)

    def track_visitor(self, session_id: str, user_id: int | None = None) -> Visitor:
        """Record a heartbeat for ``session_id`` and update the peak if needed."""
        visitor = self.db.query(Visitor).filter(Visitor.session_id == session_id).first()
        if visitor is None:
            visitor = Visitor(session_id=session_id)
            self.db.add(visitor)
        visitor.user_id = user_id
        visitor.last_activity = utcnow()
        self.db.commit()
        self.db.refresh(visitor)

        self.update_peak(self._active_query().count())
        return visitor

    def current_stats(self, window_seconds: int | None = None) -> dict[str, int]:
        active = self._active_query(window_seconds)
        total = active.count()
        authenticated = active.filter(Visitor.user_id.is_not(None)).count()
        return {
            "total": total,
            "authenticated": authenticated,
            "guests": total - authenticated,
        }

    def stored_peak(self) -> PeakVisitor | None:
        return (
            self.db.query(PeakVisitor)
            .order_by(PeakVisitor.count.desc(), PeakVisitor.id.desc())
            .first()
        )

    def update_peak(self, count: int) -> bool:
        """Write a new peak row if ``count`` beats the stored maximum.

        Returns:
            True if a new peak was recorded, False if it was not higher or
            another writer held the lock
        """
        with self.cache.lock(PEAK_LOCK_NAME, settings.peak_lock_seconds) as acquired:
            if not acquired:
                logger.debug("Peak update for %d skipped: lock held", count)
                return False

            current_max = self.db.query(func.max(PeakVisitor.count)).scalar() or 0
            if count <= current_max:
                return False

            peak = PeakVisitor(count=count, created_at=utcnow())
            self.db.add(peak)
            self.db.commit()
            self.db.refresh(peak)

        message = self._serialize_peak(peak)
        try:
            self.cache.publish(PEAK_CHANNEL, message)
        except redis.RedisError:
            logger.warning("Failed to publish peak visitor update", exc_info=True)
        logger.info("New visitor peak: %d", count)
        return True

    def peak_stats(self) -> dict[str, Any]:
        peak = self.stored_peak()
        if peak is None:
            return {"count": 0, "date": None}
        return self._serialize_peak(peak)

    def clean_old_records(self, hours: int | None = None) -> int:
        """Delete heartbeat rows older than ``hours``; peak history is kept."""
        retention = hours if hours is not None else settings.visitor_retention_hours
        cutoff = utcnow() - timedelta(hours=retention)
        removed = (
            self.db.query(Visitor)
            .filter(Visitor.last_activity < cutoff)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        logger.info("Removed %d stale visitor rows", removed)
        return int(removed or 0)

    @staticmethod
    def _serialize_peak(peak: PeakVisitor) -> dict[str, Any]:
        created = as_utc(peak.created_at)
        return {
            "count": peak.count,
            "date": created.isoformat() if created else None,
        }
