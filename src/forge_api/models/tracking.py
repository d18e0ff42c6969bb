# src/forge_api/models/tracking.py
"""Audit and analytics ledger of user and staff actions."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, object_session, relationship

from forge_api.db.session import Base
from forge_api.db.time import utcnow
from forge_api.models.enums import TrackingEventType
from forge_api.models.user import User


class TrackingEvent(Base):
    """A single tracked action.

    ``visitable_type``/``visitable_id`` point at the model the action was
    about; ``visitor_id`` is the user who performed it (null for guests).
    """

    __tablename__ = "tracking_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_name: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    event_data: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    url: Mapped[str | None] = mapped_column(Text, nullable=True)
    referer: Mapped[str | None] = mapped_column(Text, nullable=True)
    languages: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    useragent: Mapped[str | None] = mapped_column(Text, nullable=True)
    device: Mapped[str | None] = mapped_column(String(32), nullable=True)
    platform: Mapped[str | None] = mapped_column(String(32), nullable=True)
    browser: Mapped[str | None] = mapped_column(String(32), nullable=True)
    ip: Mapped[str | None] = mapped_column(String(45), nullable=True, index=True)
    visitable_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    visitable_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    visitor_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    is_moderation_action: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    country_code: Mapped[str | None] = mapped_column(String(2), nullable=True)
    country_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    region_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    city_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    timezone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )

    user: Mapped[User | None] = relationship("User")
    report_links: Mapped[list["ReportAction"]] = relationship(  # noqa: F821
        "ReportAction",
        back_populates="tracking_event",
        cascade="all, delete-orphan",
    )

    @property
    def event_type(self) -> TrackingEventType | None:
        if not self.event_name:
            return None
        try:
            return TrackingEventType(self.event_name)
        except ValueError:
            return None

    @property
    def display_name(self) -> str:
        """User-friendly name for the event."""
        if not self.event_name:
            return "Page visit"
        event_type = self.event_type
        if event_type is not None:
            return event_type.label()
        return self.event_name.replace("_", " ").capitalize()

    @property
    def trackable(self) -> Any | None:
        """The model the event is about, or None once it has been deleted."""
        from forge_api.models import MORPH_MAP

        session = object_session(self)
        model = MORPH_MAP.get(self.visitable_type or "")
        if session is None or model is None or self.visitable_id is None:
            return None
        return session.get(model, self.visitable_id)

    @property
    def context(self) -> str | None:
        """Short description of what was acted on.

        Prefers the live target, then the snapshot taken when the event was
        recorded, then the page URL.
        """
        if self.event_type is None:
            return self.url
        trackable = self.trackable
        if trackable is not None:
            value = trackable.tracking_context()
            if value:
                return value
        snapshot = (self.event_data or {}).get("snapshot") or {}
        for key in ("comment_body", "mod_name", "addon_name", "version_name", "user_name"):
            value = snapshot.get(key)
            if value:
                return str(value)
        return self.url

    @property
    def event_url(self) -> str | None:
        event_type = self.event_type
        if event_type is None or not event_type.should_show_url:
            return None
        data = self.event_data or {}
        return data.get("url") or self.url

    @property
    def report_ids(self) -> list[int]:
        return sorted(link.report_id for link in self.report_links)
