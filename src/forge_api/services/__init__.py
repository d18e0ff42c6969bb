# src/forge_api/services/__init__.py
"""Business logic services for the Forge application."""

from .analytics import AnalyticsService
from .bans import BanService
from .moderation import ContentModerationService
from .moderation_log import ModerationLogService
from .report_actions import ReportActionService
from .reports import ReportService
from .tracking import TrackService
from .users import UserService
from .visitors import VisitorService

__all__ = [
    "AnalyticsService",
    "BanService",
    "ContentModerationService",
    "ModerationLogService",
    "ReportActionService",
    "ReportService",
    "TrackService",
    "UserService",
    "VisitorService",
]
