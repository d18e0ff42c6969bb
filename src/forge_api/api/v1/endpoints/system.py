"""System and transparency endpoints for the Forge API."""

from __future__ import annotations

from fastapi import APIRouter
from sqlalchemy import func

from forge_api.api.v1.dependencies import SessionDep, StaffUserDep
from forge_api.core.settings import settings
from forge_api.models import Report, ReportStatus, TrackingEvent, TrackingEventType

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "url": settings.app_url,
            "debug": settings.debug,
        },
        "visitors": {
            "active_seconds": settings.visitor_active_seconds,
            "retention_hours": settings.visitor_retention_hours,
        },
        "reports": {
            "context_max_length": settings.report_context_max_length,
        },
    }


@router.get("/moderation-stats")
async def get_moderation_stats(_: StaffUserDep, db: SessionDep) -> dict[str, object]:
    """Report counts by status and moderation action counts by type."""
    status_rows = (
        db.query(Report.status, func.count(Report.id))
        .group_by(Report.status)
        .all()
    )
    reports = {status.value: 0 for status in ReportStatus}
    for status, count in status_rows:
        reports[ReportStatus(status).value] = int(count or 0)

    action_rows = (
        db.query(TrackingEvent.event_name, func.count(TrackingEvent.id))
        .filter(
            TrackingEvent.event_name.in_(TrackingEventType.moderation_action_values()),
            TrackingEvent.is_moderation_action.is_(True),
        )
        .group_by(TrackingEvent.event_name)
        .all()
    )
    return {
        "reports": reports,
        "actions": {name: int(count or 0) for name, count in action_rows},
    }
