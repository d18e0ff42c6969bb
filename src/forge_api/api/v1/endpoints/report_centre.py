# src/forge_api/api/v1/endpoints/report_centre.py
"""Report centre endpoints used by moderators to work the report queue."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query, status

from forge_api.api.v1.dependencies import (
    CacheDep,
    RequestContextDep,
    SessionDep,
    StaffUserDep,
    get_or_404,
)
from forge_api.models import Report, ReportAction, TrackingEvent
from forge_api.schemas.common import Message, PageResponse, page_response
from forge_api.schemas.report import (
    LinkActionRequest,
    PendingCount,
    ReportActionRequest,
    ReportActionResponse,
    ReportResponse,
)
from forge_api.schemas.tracking import TrackingEventResponse
from forge_api.services.report_actions import ReportActionService
from forge_api.services.reports import REPORT_CENTRE_PAGE_SIZE, ReportService

router = APIRouter(prefix="/report-centre", tags=["report-centre"])


@router.get("/reports", response_model=PageResponse[ReportResponse])
async def list_reports(
    _: StaffUserDep,
    db: SessionDep,
    cache: CacheDep,
    unresolved_only: bool = Query(True, description="Only show pending reports"),
    report_id: int | None = Query(None),
    reporter: str | None = Query(None, description="Filter by reporter name"),
    page: int = Query(1, ge=1),
    per_page: int = Query(REPORT_CENTRE_PAGE_SIZE, ge=1, le=100),
) -> dict[str, Any]:
    """Newest reports first."""
    result = ReportService(db, cache=cache).list_reports(
        unresolved_only=unresolved_only,
        report_id=report_id,
        reporter_name=reporter,
        page=page,
        per_page=per_page,
    )
    return page_response(result, ReportResponse)


@router.get("/reports/pending-count", response_model=PendingCount)
async def pending_count(_: StaffUserDep, db: SessionDep, cache: CacheDep) -> dict[str, int]:
    return {"pending": ReportService(db, cache=cache).pending_count()}


@router.get("/reports/{report_id}", response_model=ReportResponse)
async def get_report(report_id: int, _: StaffUserDep, db: SessionDep) -> Report:
    return get_or_404(db, Report, report_id)


@router.post("/reports/{report_id}/pick-up", response_model=ReportResponse)
async def pick_up_report(
    report_id: int, current_user: StaffUserDep, db: SessionDep, cache: CacheDep
) -> Report:
    """Assign the report to the calling moderator."""
    report = get_or_404(db, Report, report_id)
    return ReportService(db, cache=cache).pick_up(report, current_user)


@router.post("/reports/{report_id}/release", response_model=ReportResponse)
async def release_report(report_id: int, _: StaffUserDep, db: SessionDep, cache: CacheDep) -> Report:
    report = get_or_404(db, Report, report_id)
    return ReportService(db, cache=cache).release(report)


@router.post("/reports/{report_id}/resolve", response_model=ReportResponse)
async def resolve_report(report_id: int, _: StaffUserDep, db: SessionDep, cache: CacheDep) -> Report:
    report = get_or_404(db, Report, report_id)
    return ReportService(db, cache=cache).mark_resolved(report)


@router.post("/reports/{report_id}/dismiss", response_model=ReportResponse)
async def dismiss_report(report_id: int, _: StaffUserDep, db: SessionDep, cache: CacheDep) -> Report:
    report = get_or_404(db, Report, report_id)
    return ReportService(db, cache=cache).mark_dismissed(report)


@router.post("/reports/{report_id}/unresolve", response_model=ReportResponse)
async def unresolve_report(report_id: int, _: StaffUserDep, db: SessionDep, cache: CacheDep) -> Report:
    report = get_or_404(db, Report, report_id)
    return ReportService(db, cache=cache).mark_unresolved(report)


@router.delete("/reports/{report_id}", response_model=Message)
async def delete_report(
    report_id: int, current_user: StaffUserDep, db: SessionDep, cache: CacheDep
) -> dict[str, str]:
    """Delete a report and its action links. Administrators only."""
    report = get_or_404(db, Report, report_id)
    ReportService(db, cache=cache).delete_report(report, current_user)
    return {"detail": "Report deleted"}


@router.get("/reports/{report_id}/actions", response_model=list[ReportActionResponse])
async def list_report_actions(report_id: int, _: StaffUserDep, db: SessionDep) -> list[ReportAction]:
    report = get_or_404(db, Report, report_id)
    return ReportActionService(db).actions_for_report(report)


@router.post(
    "/reports/{report_id}/actions",
    response_model=ReportActionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def take_report_action(
    report_id: int,
    payload: ReportActionRequest,
    current_user: StaffUserDep,
    db: SessionDep,
    context: RequestContextDep,
    cache: CacheDep,
) -> ReportAction:
    """Act on the reported item and link the tracked event to the report."""
    report = get_or_404(db, Report, report_id)
    return ReportService(db, context, cache).execute_action(
        report,
        payload.action,
        current_user,
        note=payload.note,
        ban_duration=payload.ban_duration,
        resolve=payload.resolve,
    )


@router.post(
    "/reports/{report_id}/links",
    response_model=ReportActionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def link_action(
    report_id: int,
    payload: LinkActionRequest,
    current_user: StaffUserDep,
    db: SessionDep,
    context: RequestContextDep,
) -> ReportAction:
    """Link a moderation action taken elsewhere to the report."""
    report = get_or_404(db, Report, report_id)
    event = get_or_404(db, TrackingEvent, payload.tracking_event_id)
    return ReportActionService(db, context).link_existing_action(report, event, current_user)


@router.delete("/reports/{report_id}/links/{tracking_event_id}", response_model=Message)
async def detach_linked_action(
    report_id: int, tracking_event_id: int, _: StaffUserDep, db: SessionDep
) -> dict[str, str]:
    ReportActionService(db).detach_pair(tracking_event_id, report_id)
    return {"detail": "Action detached from report"}


@router.delete("/report-actions/{report_action_id}", response_model=Message)
async def detach_report_action(report_action_id: int, _: StaffUserDep, db: SessionDep) -> dict[str, str]:
    link = get_or_404(db, ReportAction, report_action_id)
    ReportActionService(db).detach(link)
    return {"detail": "Action detached from report"}


@router.get("/recent-actions", response_model=list[TrackingEventResponse])
async def recent_actions(
    current_user: StaffUserDep,
    db: SessionDep,
    cache: CacheDep,
    report_id: int | None = Query(None, description="Exclude actions already linked to this report"),
) -> list[TrackingEvent]:
    """The caller's recent moderation actions, for linking to a report."""
    return ReportService(db, cache=cache).recent_moderation_actions(current_user, report_id)
