# src/forge_api/schemas/moderation.py
"""Moderation-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from forge_api.schemas.common import PageResponse
from forge_api.schemas.tracking import TrackingEventResponse


class ModerationRequest(BaseModel):
    """Body for content moderation endpoints."""

    reason: str | None = Field(None, max_length=1000, description="Reason shown in the moderation log")


class PublishRequest(ModerationRequest):
    published_at: datetime | None = Field(None, description="Publish date; now when omitted")


class ContentState(BaseModel):
    """State of a moderated item after an action."""

    type: str
    id: int
    disabled: bool | None = None
    featured: bool | None = None
    published_at: datetime | None = None
    deleted_at: datetime | None = None
    pinned_at: datetime | None = None
    spam_status: str | None = None
    tracking_event_id: int
    is_moderation_action: bool


class ModerationActionResponse(TrackingEventResponse):
    """A moderation log entry with the reports it is linked to."""

    report_ids: list[int] = []


class ModerationLogResponse(PageResponse[ModerationActionResponse]):
    filters: list[str] = Field(default_factory=list, description="Descriptions of active filters")
