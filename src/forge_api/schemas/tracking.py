# src/forge_api/schemas/tracking.py
"""Tracking event Pydantic schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from forge_api.models.enums import TrackingEventType
from forge_api.schemas.user import UserSummary


class TrackingEventResponse(BaseModel):
    """Schema for a tracked action returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    event_name: str | None
    display_name: str
    context: str | None
    event_url: str | None
    event_data: dict[str, Any] | None
    visitable_type: str | None
    visitable_id: int | None
    visitor_id: int | None
    user: UserSummary | None = None
    is_moderation_action: bool
    reason: str | None
    created_at: datetime


class TrackingEventDetail(TrackingEventResponse):
    """Full event row for the analytics explorer."""

    url: str | None
    referer: str | None
    languages: list[str] | None
    useragent: str | None
    device: str | None
    platform: str | None
    browser: str | None
    ip: str | None
    country_code: str | None
    country_name: str | None
    region_name: str | None
    city_name: str | None
    timezone: str | None


class EventTypeOption(BaseModel):
    """A tracking event type offered as a filter choice."""

    value: str
    label: str
    description: str
    requires_trackable: bool
    is_private: bool

    @classmethod
    def from_event_type(cls, event_type: TrackingEventType) -> "EventTypeOption":
        return cls(
            value=event_type.value,
            label=event_type.label(),
            description=event_type.description(),
            requires_trackable=event_type.requires_trackable,
            is_private=event_type.is_private,
        )
