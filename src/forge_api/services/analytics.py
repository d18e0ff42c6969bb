# src/forge_api/services/analytics.py
"""Aggregate reporting over tracking events."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import Any

from sqlalchemy import String, cast, distinct, func, or_
from sqlalchemy.orm import Session, selectinload

from forge_api.models import TrackingEvent, TrackingEventType, User
from forge_api.services.pagination import LIKE_ESCAPE, Page, contains, paginate
from forge_api.services.tracking import COMMON_BROWSERS, COMMON_PLATFORMS

TOP_LIMIT = 10
EVENTS_PAGE_SIZE = 50

SORTABLE_COLUMNS = {
    "created_at": TrackingEvent.created_at,
    "event_name": TrackingEvent.event_name,
    "ip": TrackingEvent.ip,
    "browser": TrackingEvent.browser,
    "platform": TrackingEvent.platform,
    "device": TrackingEvent.device,
    "country_name": TrackingEvent.country_name,
}


@dataclass
class AnalyticsFilters:
    """Filters for the tracking event explorer."""

    date_from: date | None = None
    date_to: date | None = None
    event_name: str | None = None
    ip: str | None = None
    browser: str | None = None
    platform: str | None = None
    device: str | None = None
    country: str | None = None
    region: str | None = None
    city: str | None = None
    # "authenticated", "anonymous" or None
    user_type: str | None = None
    user_search: str | None = None


def _start_of(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=UTC)


class AnalyticsService:
    """Visitor analytics for administrators."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _query(self, filters: AnalyticsFilters | None = None):  # type: ignore[no-untyped-def]
        filters = filters or AnalyticsFilters()
        query = self.db.query(TrackingEvent)
        if filters.date_from is not None:
            query = query.filter(TrackingEvent.created_at >= _start_of(filters.date_from))
        if filters.date_to is not None:
            query = query.filter(TrackingEvent.created_at < _start_of(filters.date_to + timedelta(days=1)))
        if filters.event_name:
            if filters.event_name in set(TrackingEventType):
                query = query.filter(TrackingEvent.event_name == filters.event_name)
            else:
                query = query.filter(
                    TrackingEvent.event_name.like(contains(filters.event_name), escape=LIKE_ESCAPE)
                )
        if filters.ip:
            query = query.filter(TrackingEvent.ip.like(contains(filters.ip), escape=LIKE_ESCAPE))
        if filters.browser:
            if filters.browser.lower() == "other":
                query = query.filter(
                    or_(TrackingEvent.browser.is_(None), TrackingEvent.browser.not_in(COMMON_BROWSERS))
                )
            else:
                query = query.filter(TrackingEvent.browser == filters.browser)
        if filters.platform:
            if filters.platform.lower() == "other":
                query = query.filter(
                    or_(TrackingEvent.platform.is_(None), TrackingEvent.platform.not_in(COMMON_PLATFORMS))
                )
            else:
                query = query.filter(TrackingEvent.platform == filters.platform)
        if filters.device:
            query = query.filter(TrackingEvent.device == filters.device)
        if filters.country:
            query = query.filter(
                TrackingEvent.country_name.ilike(contains(filters.country), escape=LIKE_ESCAPE)
            )
        if filters.region:
            query = query.filter(
                TrackingEvent.region_name.ilike(contains(filters.region), escape=LIKE_ESCAPE)
            )
        if filters.city:
            query = query.filter(
                TrackingEvent.city_name.ilike(contains(filters.city), escape=LIKE_ESCAPE)
            )
        if filters.user_type == "authenticated":
            query = query.filter(TrackingEvent.visitor_id.is_not(None))
        elif filters.user_type == "anonymous":
            query = query.filter(TrackingEvent.visitor_id.is_(None))
        if filters.user_search:
            needle = contains(filters.user_search)
            query = query.filter(
                or_(
                    TrackingEvent.user.has(
                        or_(
                            User.name.ilike(needle, escape=LIKE_ESCAPE),
                            User.email.ilike(needle, escape=LIKE_ESCAPE),
                        )
                    ),
                    cast(TrackingEvent.visitor_id, String).like(needle, escape=LIKE_ESCAPE),
                )
            )
        return query

    def stats(self, date_from: date | None = None, date_to: date | None = None) -> dict[str, int]:
        query = self._query(AnalyticsFilters(date_from=date_from, date_to=date_to))
        return {
            "total_events": query.count(),
            "unique_users": query.with_entities(func.count(distinct(TrackingEvent.ip))).scalar() or 0,
            "authenticated_events": query.filter(TrackingEvent.visitor_id.is_not(None)).count(),
            "anonymous_events": query.filter(TrackingEvent.visitor_id.is_(None)).count(),
            "unique_countries": query.with_entities(
                func.count(distinct(TrackingEvent.country_code))
            ).scalar() or 0,
        }

    def _top(self, column: Any, filters: AnalyticsFilters | None, limit: int) -> list[dict[str, Any]]:
        count = func.count().label("count")
        rows = (
            self._query(filters)
            .filter(column.is_not(None))
            .with_entities(column, count)
            .group_by(column)
            .order_by(count.desc(), column)
            .limit(limit)
            .all()
        )
        return [{"name": name, "count": total} for name, total in rows]

    def top_events(self, filters: AnalyticsFilters | None = None, limit: int = TOP_LIMIT) -> list[dict[str, Any]]:
        return self._top(TrackingEvent.event_name, filters, limit)

    def top_browsers(self, filters: AnalyticsFilters | None = None, limit: int = TOP_LIMIT) -> list[dict[str, Any]]:
        return self._top(TrackingEvent.browser, filters, limit)

    def top_platforms(self, filters: AnalyticsFilters | None = None, limit: int = TOP_LIMIT) -> list[dict[str, Any]]:
        return self._top(TrackingEvent.platform, filters, limit)

    def top_countries(self, filters: AnalyticsFilters | None = None, limit: int = TOP_LIMIT) -> list[dict[str, Any]]:
        count = func.count().label("count")
        rows = (
            self._query(filters)
            .filter(TrackingEvent.country_code.is_not(None))
            .with_entities(TrackingEvent.country_code, TrackingEvent.country_name, count)
            .group_by(TrackingEvent.country_code, TrackingEvent.country_name)
            .order_by(count.desc(), TrackingEvent.country_code)
            .limit(limit)
            .all()
        )
        return [
            {"country_code": code, "country_name": name, "count": total}
            for code, name, total in rows
        ]

    def list_events(
        self,
        filters: AnalyticsFilters | None = None,
        *,
        sort_by: str = "created_at",
        sort_direction: str = "desc",
        page: int = 1,
        per_page: int = EVENTS_PAGE_SIZE,
    ) -> Page[TrackingEvent]:
        column = SORTABLE_COLUMNS.get(sort_by, TrackingEvent.created_at)
        order = column.asc() if sort_direction == "asc" else column.desc()
        query = (
            self._query(filters)
            .options(selectinload(TrackingEvent.user))
            .order_by(order, TrackingEvent.id.desc())
        )
        return paginate(query, page, per_page)
