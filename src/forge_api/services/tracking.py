# src/forge_api/services/tracking.py
"""Tracking service recording user and staff actions."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import user_agents
from sqlalchemy.orm import Session

from forge_api.models import TrackingEvent, TrackingEventType, User

logger = logging.getLogger(__name__)

# Events where the trackable user is also the actor, since the session may
# already be gone (logout, account deletion).
_SELF_TRACKED_EVENTS = frozenset(
    {
        TrackingEventType.LOGIN,
        TrackingEventType.LOGOUT,
        TrackingEventType.REGISTER,
        TrackingEventType.ACCOUNT_DELETE,
    }
)

COMMON_BROWSERS = ("Chrome", "Firefox", "Safari", "Edge", "Opera")
COMMON_PLATFORMS = ("Windows", "macOS", "Linux", "iOS", "Android")


@dataclass
class RequestContext:
    """Request details captured alongside a tracking event."""

    url: str | None = None
    referer: str | None = None
    languages: list[str] = field(default_factory=list)
    useragent: str | None = None
    ip: str | None = None
    country_code: str | None = None
    country_name: str | None = None
    region_name: str | None = None
    city_name: str | None = None
    timezone: str | None = None


# Parser families folded into the names analytics groups by.
_PLATFORM_ALIASES = {"Mac OS X": "macOS", "Ubuntu": "Linux", "Fedora": "Linux", "Debian": "Linux"}


def _browser_name(family: str) -> str | None:
    if family == "Other":
        return None
    # "Chrome Mobile", "Mobile Safari" and friends count as their desktop browser.
    for name in COMMON_BROWSERS:
        if name in family:
            return name
    return family


def parse_user_agent(useragent: str | None) -> tuple[str | None, str | None, str | None]:
    """Classify a user agent into ``(device, platform, browser)``."""
    if not useragent:
        return None, None, None
    agent = user_agents.parse(useragent)
    if agent.is_bot:
        return "robot", None, None

    if agent.is_tablet:
        device = "tablet"
    elif agent.is_mobile:
        device = "mobile"
    elif agent.is_pc:
        device = "desktop"
    else:
        device = "other"

    os_family = agent.os.family
    platform = None if os_family == "Other" else _PLATFORM_ALIASES.get(os_family, os_family)
    return device, platform, _browser_name(agent.browser.family)


def is_moderation_action(
    actor: User | None,
    owner_ids: Iterable[int],
    *,
    always: bool = False,
) -> bool:
    """Return True when ``actor`` is acting as staff on someone else's content.

    ``always`` marks actions that only staff can take (featuring, bans), which
    count as moderation regardless of ownership.
    """
    if actor is None:
        return False
    if always:
        return True
    return actor.is_mod_or_admin() and actor.id not in set(owner_ids)


class TrackService:
    """Persist :class:`TrackingEvent` rows."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def record(
        self,
        event_type: TrackingEventType,
        trackable: Any | None = None,
        *,
        actor: User | None = None,
        context: RequestContext | None = None,
        additional_data: dict[str, Any] | None = None,
        is_moderation_action: bool = False,
        reason: str | None = None,
    ) -> TrackingEvent:
        """Add a tracking event to the session and flush it.

        The caller owns the transaction; nothing is committed here.
        """
        context = context or RequestContext()
        event_data = dict(additional_data or {})
        if trackable is not None and hasattr(trackable, "tracking_snapshot"):
            event_data["snapshot"] = trackable.tracking_snapshot()
            event_data["url"] = trackable.tracking_url()

        visitor_id = actor.id if actor is not None else None
        if event_type in _SELF_TRACKED_EVENTS and isinstance(trackable, User):
            visitor_id = trackable.id

        device, platform, browser = parse_user_agent(context.useragent)

        event = TrackingEvent(
            event_name=event_type.value,
            event_data=event_data,
            url=context.url,
            referer=context.referer,
            languages=list(context.languages),
            useragent=context.useragent,
            device=device,
            platform=platform,
            browser=browser,
            ip=context.ip,
            visitable_type=getattr(trackable, "morph_type", None),
            visitable_id=getattr(trackable, "id", None),
            visitor_id=visitor_id,
            is_moderation_action=is_moderation_action,
            reason=reason if is_moderation_action else None,
            country_code=context.country_code,
            country_name=context.country_name,
            region_name=context.region_name,
            city_name=context.city_name,
            timezone=context.timezone,
        )
        self.db.add(event)
        self.db.flush()
        return event

    def event(
        self,
        event_type: TrackingEventType,
        trackable: Any | None = None,
        **kwargs: Any,
    ) -> TrackingEvent | None:
        """Record and commit an event; failures are logged and swallowed."""
        try:
            with self.db.begin_nested():
                event = self.record(event_type, trackable, **kwargs)
            self.db.commit()
            return event
        except Exception:
            logger.error(
                "Failed to track event %s for %s:%s",
                event_type.value,
                getattr(trackable, "morph_type", None),
                getattr(trackable, "id", None),
                exc_info=True,
            )
            return None
