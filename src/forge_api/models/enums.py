# src/forge_api/models/enums.py
"""Enumerations shared by models, services and schemas."""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import StrEnum


class UserRole(StrEnum):
    """Site role assigned to a user."""

    USER = "user"
    MODERATOR = "moderator"
    ADMINISTRATOR = "administrator"

    @property
    def is_staff(self) -> bool:
        return self in (UserRole.MODERATOR, UserRole.ADMINISTRATOR)


class ReportStatus(StrEnum):
    """Lifecycle state of a report."""

    PENDING = "pending"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"

    def label(self) -> str:
        return self.value.capitalize()


class ReportReason(StrEnum):
    """Reason a reporter gives when flagging content."""

    SPAM = "spam"
    INAPPROPRIATE_CONTENT = "inappropriate_content"
    HARASSMENT = "harassment"
    MISINFORMATION = "misinformation"
    COPYRIGHT_VIOLATION = "copyright_violation"
    OTHER = "other"

    def label(self) -> str:
        return self.value.replace("_", " ").capitalize()


class SpamStatus(StrEnum):
    """Spam classification for comments."""

    PENDING = "pending"
    CLEAN = "clean"
    SPAM = "spam"


class BanDuration(StrEnum):
    """Preset durations offered when banning a user."""

    ONE_HOUR = "1_hour"
    ONE_DAY = "24_hours"
    ONE_WEEK = "7_days"
    ONE_MONTH = "30_days"
    PERMANENT = "permanent"

    def label(self) -> str:
        return _BAN_DURATION_LABELS[self]

    def expires_at(self, now: datetime) -> datetime | None:
        """Return the expiry for a ban starting at ``now``; None means permanent."""
        if self is BanDuration.PERMANENT:
            return None
        return now + _BAN_DURATION_DELTAS[self]


_BAN_DURATION_LABELS: dict[BanDuration, str] = {
    BanDuration.ONE_HOUR: "1 Hour",
    BanDuration.ONE_DAY: "24 Hours",
    BanDuration.ONE_WEEK: "7 Days",
    BanDuration.ONE_MONTH: "30 Days",
    BanDuration.PERMANENT: "Permanent",
}

_BAN_DURATION_DELTAS: dict[BanDuration, timedelta] = {
    BanDuration.ONE_HOUR: timedelta(hours=1),
    BanDuration.ONE_DAY: timedelta(days=1),
    BanDuration.ONE_WEEK: timedelta(weeks=1),
    BanDuration.ONE_MONTH: timedelta(days=30),
}


class TrackingEventType(StrEnum):
    """Every kind of event the tracking ledger records."""

    # Authentication and account
    LOGIN = "login"
    LOGOUT = "logout"
    REGISTER = "register"
    PASSWORD_CHANGE = "password_change"
    ACCOUNT_DELETE = "account_delete"

    # Mods
    MOD_DOWNLOAD = "mod_download"
    MOD_CREATE = "mod_create"
    MOD_EDIT = "mod_edit"
    MOD_DELETE = "mod_delete"
    MOD_REPORT = "mod_report"
    MOD_PUBLISH = "mod_publish"
    MOD_UNPUBLISH = "mod_unpublish"
    MOD_FEATURE = "mod_feature"
    MOD_UNFEATURE = "mod_unfeature"
    MOD_DISABLE = "mod_disable"
    MOD_ENABLE = "mod_enable"

    # Mod versions
    VERSION_CREATE = "version_create"
    VERSION_EDIT = "version_edit"
    VERSION_DELETE = "version_delete"
    VERSION_PUBLISH = "version_publish"
    VERSION_UNPUBLISH = "version_unpublish"
    VERSION_DISABLE = "version_disable"
    VERSION_ENABLE = "version_enable"

    # Addons
    ADDON_CREATE = "addon_create"
    ADDON_EDIT = "addon_edit"
    ADDON_ATTACH = "addon_attach"
    ADDON_DETACH = "addon_detach"
    ADDON_PUBLISH = "addon_publish"
    ADDON_UNPUBLISH = "addon_unpublish"
    ADDON_DISABLE = "addon_disable"
    ADDON_ENABLE = "addon_enable"

    # Addon versions
    ADDON_VERSION_CREATE = "addon_version_create"
    ADDON_VERSION_EDIT = "addon_version_edit"
    ADDON_VERSION_PUBLISH = "addon_version_publish"
    ADDON_VERSION_UNPUBLISH = "addon_version_unpublish"
    ADDON_VERSION_DISABLE = "addon_version_disable"
    ADDON_VERSION_ENABLE = "addon_version_enable"

    # Comments
    COMMENT_CREATE = "comment_create"
    COMMENT_EDIT = "comment_edit"
    COMMENT_DELETE = "comment_delete"
    COMMENT_LIKE = "comment_like"
    COMMENT_UNLIKE = "comment_unlike"
    COMMENT_REPORT = "comment_report"
    COMMENT_SOFT_DELETE = "comment_soft_delete"
    COMMENT_HARD_DELETE = "comment_hard_delete"
    COMMENT_RESTORE = "comment_restore"
    COMMENT_PIN = "comment_pin"
    COMMENT_UNPIN = "comment_unpin"
    COMMENT_MARK_SPAM = "comment_mark_spam"
    COMMENT_MARK_CLEAN = "comment_mark_clean"

    # Users and IPs
    USER_BAN = "user_ban"
    USER_UNBAN = "user_unban"
    USER_BANNED = "user_banned"
    USER_UNBANNED = "user_unbanned"
    IP_BAN = "ip_ban"
    IP_UNBAN = "ip_unban"

    @classmethod
    def moderation_actions(cls) -> list[TrackingEventType]:
        """Event types that can represent a staff action against content or users."""
        return [event for event in cls if event in _MODERATION_ACTIONS]

    @classmethod
    def moderation_action_values(cls) -> list[str]:
        return [event.value for event in cls.moderation_actions()]

    @property
    def is_moderation_type(self) -> bool:
        return self in _MODERATION_ACTIONS

    def label(self) -> str:
        """Return the user-friendly display name for this event type."""
        explicit = _LABELS.get(self)
        if explicit is not None:
            return explicit
        return self.value.replace("_", " ").capitalize()

    def description(self) -> str:
        return f"User {self.label()[0].lower()}{self.label()[1:]}"

    def trackable_model(self) -> str | None:
        """Morph key of the model this event is tracked against, if any."""
        prefix_map = (
            ("addon_version_", "addon_version"),
            ("addon_", "addon"),
            ("version_", "mod_version"),
            ("comment_", "comment"),
            ("user_", "user"),
        )
        if self is TrackingEventType.MOD_DOWNLOAD:
            return "mod_version"
        if self.value.startswith("mod_"):
            return "mod"
        for prefix, model in prefix_map:
            if self.value.startswith(prefix):
                return model
        return None

    @property
    def requires_trackable(self) -> bool:
        return self.trackable_model() is not None

    @property
    def is_private(self) -> bool:
        """Private events are visible only to the user themselves and staff."""
        return self in _PRIVATE_EVENTS or self.is_moderation_type

    @property
    def should_show_url(self) -> bool:
        return self not in _AUTH_EVENTS


_AUTH_EVENTS = frozenset(
    {
        TrackingEventType.LOGIN,
        TrackingEventType.LOGOUT,
        TrackingEventType.REGISTER,
        TrackingEventType.PASSWORD_CHANGE,
    }
)

_PRIVATE_EVENTS = _AUTH_EVENTS | {
    TrackingEventType.ACCOUNT_DELETE,
    TrackingEventType.MOD_REPORT,
    TrackingEventType.COMMENT_REPORT,
    TrackingEventType.USER_BANNED,
    TrackingEventType.USER_UNBANNED,
}

_MODERATION_ACTIONS = frozenset(
    {
        TrackingEventType.MOD_DELETE,
        TrackingEventType.MOD_PUBLISH,
        TrackingEventType.MOD_UNPUBLISH,
        TrackingEventType.MOD_FEATURE,
        TrackingEventType.MOD_UNFEATURE,
        TrackingEventType.MOD_DISABLE,
        TrackingEventType.MOD_ENABLE,
        TrackingEventType.VERSION_DELETE,
        TrackingEventType.VERSION_PUBLISH,
        TrackingEventType.VERSION_UNPUBLISH,
        TrackingEventType.VERSION_DISABLE,
        TrackingEventType.VERSION_ENABLE,
        TrackingEventType.ADDON_PUBLISH,
        TrackingEventType.ADDON_UNPUBLISH,
        TrackingEventType.ADDON_DISABLE,
        TrackingEventType.ADDON_ENABLE,
        TrackingEventType.ADDON_VERSION_PUBLISH,
        TrackingEventType.ADDON_VERSION_UNPUBLISH,
        TrackingEventType.ADDON_VERSION_DISABLE,
        TrackingEventType.ADDON_VERSION_ENABLE,
        TrackingEventType.COMMENT_SOFT_DELETE,
        TrackingEventType.COMMENT_HARD_DELETE,
        TrackingEventType.COMMENT_RESTORE,
        TrackingEventType.COMMENT_PIN,
        TrackingEventType.COMMENT_UNPIN,
        TrackingEventType.COMMENT_MARK_SPAM,
        TrackingEventType.COMMENT_MARK_CLEAN,
        TrackingEventType.USER_BAN,
        TrackingEventType.USER_UNBAN,
        TrackingEventType.IP_BAN,
        TrackingEventType.IP_UNBAN,
    }
)

_LABELS: dict[TrackingEventType, str] = {
    TrackingEventType.LOGIN: "Logged in",
    TrackingEventType.LOGOUT: "Logged out",
    TrackingEventType.REGISTER: "Registered account",
    TrackingEventType.PASSWORD_CHANGE: "Changed password",
    TrackingEventType.ACCOUNT_DELETE: "Deleted account",
    TrackingEventType.MOD_DOWNLOAD: "Downloaded mod",
    TrackingEventType.MOD_CREATE: "Created mod",
    TrackingEventType.MOD_EDIT: "Edited mod",
    TrackingEventType.MOD_DELETE: "Deleted mod",
    TrackingEventType.MOD_REPORT: "Reported mod",
    TrackingEventType.MOD_PUBLISH: "Published mod",
    TrackingEventType.MOD_UNPUBLISH: "Unpublished mod",
    TrackingEventType.MOD_FEATURE: "Featured mod",
    TrackingEventType.MOD_UNFEATURE: "Unfeatured mod",
    TrackingEventType.MOD_DISABLE: "Disabled mod",
    TrackingEventType.MOD_ENABLE: "Enabled mod",
    TrackingEventType.VERSION_CREATE: "Created mod version",
    TrackingEventType.VERSION_EDIT: "Edited mod version",
    TrackingEventType.VERSION_DELETE: "Deleted mod version",
    TrackingEventType.VERSION_PUBLISH: "Published mod version",
    TrackingEventType.VERSION_UNPUBLISH: "Unpublished mod version",
    TrackingEventType.VERSION_DISABLE: "Disabled mod version",
    TrackingEventType.VERSION_ENABLE: "Enabled mod version",
    TrackingEventType.COMMENT_CREATE: "Created comment",
    TrackingEventType.COMMENT_EDIT: "Edited comment",
    TrackingEventType.COMMENT_DELETE: "Deleted comment",
    TrackingEventType.COMMENT_LIKE: "Liked comment",
    TrackingEventType.COMMENT_UNLIKE: "Unliked comment",
    TrackingEventType.COMMENT_REPORT: "Reported comment",
    TrackingEventType.COMMENT_SOFT_DELETE: "Deleted comment (moderation)",
    TrackingEventType.COMMENT_HARD_DELETE: "Permanently deleted comment",
    TrackingEventType.COMMENT_RESTORE: "Restored comment",
    TrackingEventType.COMMENT_PIN: "Pinned comment",
    TrackingEventType.COMMENT_UNPIN: "Unpinned comment",
    TrackingEventType.COMMENT_MARK_SPAM: "Marked comment as spam",
    TrackingEventType.COMMENT_MARK_CLEAN: "Marked comment as clean",
    TrackingEventType.USER_BAN: "Banned user",
    TrackingEventType.USER_UNBAN: "Unbanned user",
    TrackingEventType.USER_BANNED: "Was banned",
    TrackingEventType.USER_UNBANNED: "Was unbanned",
    TrackingEventType.IP_BAN: "Banned IP address",
    TrackingEventType.IP_UNBAN: "Unbanned IP address",
}
