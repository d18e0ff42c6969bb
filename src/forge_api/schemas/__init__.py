"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import Message, PageResponse, page_response
from .moderation import (
    ContentState,
    ModerationActionResponse,
    ModerationLogResponse,
    ModerationRequest,
    PublishRequest,
)
from .report import (
    LinkActionRequest,
    PendingCount,
    ReportActionRequest,
    ReportActionResponse,
    ReportCreate,
    ReportEligibility,
    ReportResponse,
    ReportSubmitted,
)
from .tracking import EventTypeOption, TrackingEventDetail, TrackingEventResponse
from .user import (
    BanCreate,
    BanResponse,
    IpBanStatus,
    IpBanToggle,
    RoleUpdate,
    UserResponse,
    UserSummary,
)
from .visitor import (
    AnalyticsStats,
    AnalyticsSummary,
    CountItem,
    CountryCount,
    Heartbeat,
    PeakStats,
    VisitorOverview,
    VisitorStats,
)

__all__ = [
    "Message", "PageResponse", "page_response",
    "ContentState", "ModerationActionResponse", "ModerationLogResponse", "ModerationRequest", "PublishRequest",
    "LinkActionRequest", "PendingCount", "ReportActionRequest", "ReportActionResponse",
    "ReportCreate", "ReportEligibility", "ReportResponse", "ReportSubmitted",
    "EventTypeOption", "TrackingEventDetail", "TrackingEventResponse",
    "BanCreate", "BanResponse", "IpBanStatus", "IpBanToggle", "RoleUpdate", "UserResponse", "UserSummary",
    "AnalyticsStats", "AnalyticsSummary", "CountItem", "CountryCount", "Heartbeat",
    "PeakStats", "VisitorOverview", "VisitorStats",
]
