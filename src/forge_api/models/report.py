# src/forge_api/models/report.py
"""Models for user reports and the moderation actions linked to them."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from forge_api.db.session import Base
from forge_api.db.time import utcnow
from forge_api.models.enums import ReportReason, ReportStatus
from forge_api.models.tracking import TrackingEvent
from forge_api.models.user import User


def _enum_values(enum_cls: type) -> list[str]:
    return [member.value for member in enum_cls]  # type: ignore[attr-defined]


class Report(Base):
    """A user-submitted flag against content or another user."""

    __tablename__ = "reports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reporter_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    # Morph key and id of the reported target.
    reportable_type: Mapped[str] = mapped_column(String(32), nullable=False)
    reportable_id: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[ReportReason] = mapped_column(
        Enum(ReportReason, native_enum=False, length=32, values_callable=_enum_values),
        nullable=False,
        default=ReportReason.OTHER,
    )
    context: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[ReportStatus] = mapped_column(
        Enum(ReportStatus, native_enum=False, length=16, values_callable=_enum_values),
        nullable=False,
        default=ReportStatus.PENDING,
        index=True,
    )
    assignee_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    reporter: Mapped[User | None] = relationship("User", foreign_keys=[reporter_id])
    assignee: Mapped[User | None] = relationship("User", foreign_keys=[assignee_id])
    actions: Mapped[list[ReportAction]] = relationship(
        "ReportAction",
        back_populates="report",
        cascade="all, delete-orphan",
        order_by="ReportAction.id",
    )


class ReportAction(Base):
    """Link between a report and the tracked moderation action taken for it."""

    __tablename__ = "report_actions"
    __table_args__ = (
        UniqueConstraint("report_id", "tracking_event_id", name="uq_report_action_pair"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    report_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("reports.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tracking_event_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tracking_events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    moderator_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    report: Mapped[Report] = relationship("Report", back_populates="actions")
    tracking_event: Mapped[TrackingEvent] = relationship("TrackingEvent", back_populates="report_links")
    moderator: Mapped[User | None] = relationship("User")
