# src/forge_api/schemas/report.py
"""Report-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from forge_api.models.enums import BanDuration, ReportReason, ReportStatus
from forge_api.schemas.tracking import TrackingEventResponse
from forge_api.schemas.user import UserSummary


class ReportCreate(BaseModel):
    """Schema for submitting a report."""

    reportable_type: str = Field(..., description="Morph key of the reported item")
    reportable_id: int
    reason: ReportReason = ReportReason.OTHER
    context: str = Field("", max_length=1000, description="Additional context from the reporter")


class ReportActionResponse(BaseModel):
    """A moderation action linked to a report."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    report_id: int
    tracking_event_id: int
    moderator: UserSummary | None = None
    tracking_event: TrackingEventResponse
    created_at: datetime


class ReportResponse(BaseModel):
    """Schema for report information returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    reporter: UserSummary | None = None
    reportable_type: str
    reportable_id: int
    reason: ReportReason
    context: str
    status: ReportStatus
    assignee: UserSummary | None = None
    actions: list[ReportActionResponse] = []
    created_at: datetime
    updated_at: datetime


class ReportSubmitted(BaseModel):
    report: ReportResponse
    staff_notified: int


class ReportEligibility(BaseModel):
    can_report: bool


class ReportActionRequest(BaseModel):
    """Schema for taking a moderation action from the report centre."""

    action: str = Field(..., description="ban_user, unban_user, disable_mod, enable_mod, ...")
    note: str | None = Field(None, max_length=1000)
    ban_duration: BanDuration = BanDuration.ONE_DAY
    resolve: bool = False


class LinkActionRequest(BaseModel):
    """Schema for linking an existing tracking event to a report."""

    tracking_event_id: int


class PendingCount(BaseModel):
    pending: int
