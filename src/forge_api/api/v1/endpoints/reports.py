# src/forge_api/api/v1/endpoints/reports.py
"""Report submission endpoints for the Forge API."""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from forge_api.api.v1.dependencies import (
    CacheDep,
    CurrentUserDep,
    OptionalUserDep,
    RequestContextDep,
    SessionDep,
)
from forge_api.models import Report
from forge_api.schemas.report import ReportCreate, ReportEligibility, ReportResponse, ReportSubmitted
from forge_api.services.reports import ReportService
from forge_api.services.targets import resolve_target

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post("", response_model=ReportSubmitted, status_code=status.HTTP_201_CREATED)
async def submit_report(
    payload: ReportCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    context: RequestContextDep,
    cache: CacheDep,
) -> dict[str, object]:
    """File a report against a user, mod, addon or comment."""
    service = ReportService(db, context, cache)
    report: Report = service.submit(
        current_user,
        payload.reportable_type,
        payload.reportable_id,
        payload.reason,
        payload.context,
    )
    return {
        "report": ReportResponse.model_validate(report),
        "staff_notified": len(service.staff_ids()),
    }


@router.get("/eligibility", response_model=ReportEligibility)
async def report_eligibility(
    db: SessionDep,
    current_user: OptionalUserDep,
    cache: CacheDep,
    reportable_type: str = Query(..., description="Morph key of the item"),
    reportable_id: int = Query(...),
) -> dict[str, bool]:
    """Tell the client whether to offer a report button for an item."""
    target = resolve_target(db, reportable_type, reportable_id)
    return {"can_report": ReportService(db, cache=cache).can_report(current_user, target)}
