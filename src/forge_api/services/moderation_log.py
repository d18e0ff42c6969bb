# src/forge_api/services/moderation_log.py
"""Staff-facing log of moderation actions."""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta

from sqlalchemy import String, cast, func, or_
from sqlalchemy.orm import Session, selectinload

from forge_api.models import ReportAction, TrackingEvent, TrackingEventType, User
from forge_api.services.pagination import LIKE_ESCAPE, Page, contains, paginate

ACTIONS_PAGE_SIZE = 25


def _start_of(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=UTC)


class ModerationLogService:
    """Query tracking events that were flagged as moderation actions."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _base_query(self):  # type: ignore[no-untyped-def]
        return self.db.query(TrackingEvent).filter(
            TrackingEvent.event_name.in_(TrackingEventType.moderation_action_values()),
            TrackingEvent.is_moderation_action.is_(True),
        )

    def list_actions(
        self,
        *,
        search: str | None = None,
        event_type: TrackingEventType | None = None,
        moderator_id: int | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        report_linked_only: bool = False,
        page: int = 1,
        per_page: int = ACTIONS_PAGE_SIZE,
    ) -> Page[TrackingEvent]:
        query = self._base_query().options(
            selectinload(TrackingEvent.user),
            selectinload(TrackingEvent.report_links).selectinload(ReportAction.report),
        )
        if search:
            needle = contains(search.lower())
            query = query.filter(
                or_(
                    func.lower(TrackingEvent.reason).like(needle, escape=LIKE_ESCAPE),
                    func.lower(cast(TrackingEvent.event_data, String)).like(needle, escape=LIKE_ESCAPE),
                )
            )
        if event_type is not None:
            query = query.filter(TrackingEvent.event_name == event_type.value)
        if moderator_id is not None:
            query = query.filter(TrackingEvent.visitor_id == moderator_id)
        if date_from is not None:
            query = query.filter(TrackingEvent.created_at >= _start_of(date_from))
        if date_to is not None:
            query = query.filter(TrackingEvent.created_at < _start_of(date_to + timedelta(days=1)))
        if report_linked_only:
            query = query.filter(TrackingEvent.report_links.any())
        query = query.order_by(TrackingEvent.created_at.desc(), TrackingEvent.id.desc())
        return paginate(query, page, per_page)

    def moderators(self) -> list[User]:
        """Users who have taken at least one moderation action, by name."""
        actor_ids = (
            self._base_query()
            .filter(TrackingEvent.visitor_id.is_not(None))
            .with_entities(TrackingEvent.visitor_id)
            .distinct()
        )
        return (
            self.db.query(User)
            .filter(User.id.in_(actor_ids.scalar_subquery()))
            .order_by(User.name)
            .all()
        )

    def active_filters(
        self,
        *,
        search: str | None = None,
        event_type: TrackingEventType | None = None,
        moderator_id: int | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        report_linked_only: bool = False,
    ) -> list[str]:
        """Human readable descriptions of the filters in use."""
        filters: list[str] = []
        if search:
            filters.append(f"Search: '{search}'")
        if event_type is not None:
            filters.append(f"Type: {event_type.label()}")
        if moderator_id is not None:
            moderator = self.db.get(User, moderator_id)
            if moderator is not None:
                filters.append(f"Moderator: {moderator.name}")
        if date_from and date_to:
            filters.append(f"Date: {date_from.isoformat()} - {date_to.isoformat()}")
        elif date_from:
            filters.append(f"From: {date_from.isoformat()}")
        elif date_to:
            filters.append(f"Until: {date_to.isoformat()}")
        if report_linked_only:
            filters.append("Linked to reports only")
        return filters
