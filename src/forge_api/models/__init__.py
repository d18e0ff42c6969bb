"""SQLAlchemy models for the Forge application."""

from .comment import Comment
from .content import Addon, AddonVersion, Mod, ModVersion, mod_authors
from .enums import (
    BanDuration,
    ReportReason,
    ReportStatus,
    SpamStatus,
    TrackingEventType,
    UserRole,
)
from .report import Report, ReportAction
from .tracking import TrackingEvent
from .user import Ban, User
from .visitor import PeakVisitor, Visitor

# Morph keys used by polymorphic (type, id) references.
MORPH_MAP: dict[str, type] = {
    "user": User,
    "mod": Mod,
    "mod_version": ModVersion,
    "addon": Addon,
    "addon_version": AddonVersion,
    "comment": Comment,
}

REPORTABLE_TYPES = ("user", "mod", "addon", "comment")

__all__ = [
    "Addon", "AddonVersion", "Mod", "ModVersion", "mod_authors",
    "Ban", "User",
    "Comment",
    "Report", "ReportAction",
    "TrackingEvent",
    "PeakVisitor", "Visitor",
    "BanDuration", "ReportReason", "ReportStatus", "SpamStatus", "TrackingEventType", "UserRole",
    "MORPH_MAP", "REPORTABLE_TYPES",
]
