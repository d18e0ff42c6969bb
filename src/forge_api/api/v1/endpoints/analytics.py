# src/forge_api/api/v1/endpoints/analytics.py
"""Administrator analytics over tracking events."""

from __future__ import annotations

from datetime import date
from typing import Any, Literal

from fastapi import APIRouter, Query

from forge_api.api.v1.dependencies import AdminUserDep, SessionDep
from forge_api.models import TrackingEventType
from forge_api.schemas.common import PageResponse, page_response
from forge_api.schemas.tracking import EventTypeOption, TrackingEventDetail
from forge_api.schemas.visitor import AnalyticsSummary
from forge_api.services.analytics import EVENTS_PAGE_SIZE, AnalyticsFilters, AnalyticsService

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/summary", response_model=AnalyticsSummary)
async def analytics_summary(
    _: AdminUserDep,
    db: SessionDep,
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
) -> dict[str, Any]:
    """Headline counts and top-ten breakdowns for the date range."""
    service = AnalyticsService(db)
    filters = AnalyticsFilters(date_from=date_from, date_to=date_to)
    return {
        "stats": service.stats(date_from, date_to),
        "top_events": service.top_events(filters),
        "top_browsers": service.top_browsers(filters),
        "top_platforms": service.top_platforms(filters),
        "top_countries": service.top_countries(filters),
    }


@router.get("/events", response_model=PageResponse[TrackingEventDetail])
async def list_events(
    _: AdminUserDep,
    db: SessionDep,
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
    event_name: str | None = Query(None),
    ip: str | None = Query(None),
    browser: str | None = Query(None, description='A browser name or "other"'),
    platform: str | None = Query(None, description='A platform name or "other"'),
    device: str | None = Query(None),
    country: str | None = Query(None),
    region: str | None = Query(None),
    city: str | None = Query(None),
    user_type: Literal["authenticated", "anonymous"] | None = Query(None),
    user_search: str | None = Query(None),
    sort_by: str = Query("created_at"),
    sort_direction: Literal["asc", "desc"] = Query("desc"),
    page: int = Query(1, ge=1),
    per_page: int = Query(EVENTS_PAGE_SIZE, ge=1, le=200),
) -> dict[str, Any]:
    """Filterable, sortable tracking event explorer."""
    filters = AnalyticsFilters(
        date_from=date_from,
        date_to=date_to,
        event_name=event_name,
        ip=ip,
        browser=browser,
        platform=platform,
        device=device,
        country=country,
        region=region,
        city=city,
        user_type=user_type,
        user_search=user_search,
    )
    result = AnalyticsService(db).list_events(
        filters,
        sort_by=sort_by,
        sort_direction=sort_direction,
        page=page,
        per_page=per_page,
    )
    return page_response(result, TrackingEventDetail)


@router.get("/event-types", response_model=list[EventTypeOption])
async def list_event_types(_: AdminUserDep) -> list[EventTypeOption]:
    return [EventTypeOption.from_event_type(event_type) for event_type in TrackingEventType]
