# src/forge_api/services/bans.py
"""Account and IP ban services."""

from __future__ import annotations

import logging

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from forge_api.db.time import utcnow
from forge_api.models import (
    Addon,
    Ban,
    BanDuration,
    Comment,
    Mod,
    Report,
    ReportAction,
    ReportStatus,
    TrackingEventType,
    User,
)
from forge_api.services import policies
from forge_api.services.report_actions import ReportActionService
from forge_api.services.tracking import RequestContext, TrackService, is_moderation_action

logger = logging.getLogger(__name__)


def _active_clause():  # type: ignore[no-untyped-def]
    return or_(Ban.expired_at.is_(None), Ban.expired_at > utcnow())


class BanService:
    """Service handling bans against user accounts and IP addresses."""

    def __init__(self, db: Session, context: RequestContext | None = None) -> None:
        self.db = db
        self.context = context
        self.tracker = TrackService(db)
        # Report link written by the last report-driven ban or unban.
        self.report_action: ReportAction | None = None

    @staticmethod
    def duration_options() -> dict[str, str]:
        """Ban durations offered to moderators, keyed by value."""
        return {duration.value: duration.label() for duration in BanDuration}

    def active_ban(self, user: User) -> Ban | None:
        return (
            self.db.query(Ban)
            .filter(Ban.user_id == user.id, _active_clause())
            .order_by(Ban.id.desc())
            .first()
        )

    def is_banned(self, user: User) -> bool:
        return self.active_ban(user) is not None

    def is_ip_banned(self, ip: str) -> bool:
        return (
            self.db.query(Ban.id)
            .filter(Ban.ip == ip, _active_clause())
            .first()
        ) is not None

    def ban_user(
        self,
        user: User,
        duration: BanDuration,
        reason: str | None,
        moderator: User,
        report: Report | None = None,
        resolve_report: bool = True,
    ) -> Ban:
        """Ban ``user``; an existing active ban is updated in place.

        With a ``report`` the ban is recorded through the report-action
        ledger and, unless ``resolve_report`` is False, the report is resolved.
        """
        policies.authorize(
            policies.can_ban_user(moderator, user),
            "You cannot ban this user.",
        )
        expires = duration.expires_at(utcnow())
        note = reason or None
        ban = self.active_ban(user) or Ban(user_id=user.id)

        def apply_ban() -> None:
            if ban.id is None:
                self.db.add(ban)
            ban.created_by_id = moderator.id
            ban.comment = note
            ban.expired_at = expires
            self.db.flush()
            self.tracker.record(TrackingEventType.USER_BANNED, user, actor=moderator, context=self.context)

        if report is not None:
            self.report_action = ReportActionService(self.db, self.context).take_action(
                report,
                TrackingEventType.USER_BAN,
                user,
                apply_ban,
                moderator=moderator,
                resolve_report=resolve_report,
                reason=note,
            )
        else:
            with self.db.begin_nested():
                apply_ban()
                self.tracker.record(
                    TrackingEventType.USER_BAN,
                    user,
                    actor=moderator,
                    context=self.context,
                    is_moderation_action=is_moderation_action(moderator, [user.id], always=True),
                    reason=note,
                )
            self.db.commit()

        logger.info("User %s banned by %s (%s)", user.id, moderator.id, duration.value)
        self.db.refresh(ban)
        return ban

    def unban_user(
        self,
        user: User,
        moderator: User,
        report: Report | None = None,
        resolve_report: bool = False,
        reason: str | None = None,
    ) -> int:
        """Lift every active ban on ``user``; returns how many were removed."""
        policies.authorize(
            policies.can_unban_user(moderator, user),
            "You cannot unban this user.",
        )
        note = reason or None
        removed = 0

        def lift_bans() -> None:
            nonlocal removed
            for ban in self.db.query(Ban).filter(Ban.user_id == user.id, _active_clause()).all():
                self.db.delete(ban)
                removed += 1
            self.db.flush()
            self.tracker.record(TrackingEventType.USER_UNBANNED, user, actor=moderator, context=self.context)

        if report is not None:
            self.report_action = ReportActionService(self.db, self.context).take_action(
                report,
                TrackingEventType.USER_UNBAN,
                user,
                lift_bans,
                moderator=moderator,
                resolve_report=resolve_report,
                reason=note,
            )
        else:
            with self.db.begin_nested():
                lift_bans()
                self.tracker.record(
                    TrackingEventType.USER_UNBAN,
                    user,
                    actor=moderator,
                    context=self.context,
                    is_moderation_action=is_moderation_action(moderator, [user.id], always=True),
                    reason=note,
                )
            self.db.commit()

        logger.info("User %s unbanned by %s", user.id, moderator.id)
        return removed

    def toggle_ip_ban(self, ip: str, moderator: User, reason: str | None = None) -> bool:
        """Ban ``ip`` if it is not banned, otherwise lift its ban.

        Returns:
            True if the IP is banned after the call
        """
        policies.authorize(moderator.is_admin(), "Only administrators can ban IP addresses.")
        active = self.db.query(Ban).filter(Ban.ip == ip, _active_clause()).all()
        with self.db.begin_nested():
            if active:
                for ban in active:
                    self.db.delete(ban)
                event_type = TrackingEventType.IP_UNBAN
            else:
                self.db.add(Ban(ip=ip, created_by_id=moderator.id, comment=reason or None))
                event_type = TrackingEventType.IP_BAN
            self.db.flush()
            self.tracker.record(
                event_type,
                actor=moderator,
                context=self.context,
                additional_data={"ip": ip},
                is_moderation_action=True,
                reason=reason or None,
            )
        self.db.commit()
        banned = not active
        logger.info("IP %s %s by %s", ip, "banned" if banned else "unbanned", moderator.id)
        return banned

    def available_reports(self, user: User) -> list[Report]:
        """Pending reports about ``user`` or about content they own or wrote."""
        owned_mods = select(Mod.id).where(Mod.owner_id == user.id)
        owned_addons = select(Addon.id).where(Addon.owner_id == user.id)
        authored_comments = select(Comment.id).where(Comment.user_id == user.id)
        return (
            self.db.query(Report)
            .filter(
                Report.status == ReportStatus.PENDING,
                or_(
                    and_(Report.reportable_type == User.morph_type, Report.reportable_id == user.id),
                    and_(Report.reportable_type == Mod.morph_type, Report.reportable_id.in_(owned_mods)),
                    and_(Report.reportable_type == Addon.morph_type, Report.reportable_id.in_(owned_addons)),
                    and_(
                        Report.reportable_type == Comment.morph_type,
                        Report.reportable_id.in_(authored_comments),
                    ),
                ),
            )
            .order_by(Report.created_at.desc(), Report.id.desc())
            .all()
        )

    def expire_lapsed(self) -> int:
        """Delete bans whose expiry has passed; returns the number removed."""
        removed = (
            self.db.query(Ban)
            .filter(Ban.expired_at.is_not(None), Ban.expired_at <= utcnow())
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return int(removed or 0)
