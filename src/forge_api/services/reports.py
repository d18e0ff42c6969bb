# src/forge_api/services/reports.py
"""Report submission and report centre services."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from sqlalchemy.orm import Session, selectinload

from forge_api.core.settings import settings
from forge_api.db.time import utcnow
from forge_api.models import (
    REPORTABLE_TYPES,
    Addon,
    BanDuration,
    Comment,
    Mod,
    Report,
    ReportAction,
    ReportReason,
    ReportStatus,
    TrackingEvent,
    TrackingEventType,
    User,
    UserRole,
)
from forge_api.services import policies
from forge_api.services.bans import BanService
from forge_api.services.cache import Cache, get_cache
from forge_api.services.errors import InvalidActionError, PermissionDeniedError
from forge_api.services.moderation import ContentModerationService
from forge_api.services.pagination import LIKE_ESCAPE, Page, contains, paginate
from forge_api.services.report_actions import ReportActionService
from forge_api.services.targets import find_target, resolve_reportable, resolve_target, responsible_user
from forge_api.services.tracking import RequestContext, TrackService

logger = logging.getLogger(__name__)

MODERATOR_IDS_CACHE_KEY = "moderator_admin_ids"
REPORT_CENTRE_PAGE_SIZE = 10

# Report centre actions and the target type each one applies to.
REPORT_ACTIONS: dict[str, str | None] = {
    "ban_user": None,
    "unban_user": None,
    "disable_mod": Mod.morph_type,
    "enable_mod": Mod.morph_type,
    "disable_addon": Addon.morph_type,
    "enable_addon": Addon.morph_type,
    "delete_comment": Comment.morph_type,
    "restore_comment": Comment.morph_type,
}


class ReportService:
    """Service for filing reports and working them in the report centre."""

    def __init__(
        self,
        db: Session,
        context: RequestContext | None = None,
        cache: Cache | None = None,
    ) -> None:
        self.db = db
        self.context = context
        self.cache = cache if cache is not None else get_cache()
        self.tracker = TrackService(db)

    # --- Submission ----------------------------------------------------------------

    def has_reported(self, user: User, target_type: str, target_id: int) -> bool:
        return (
            self.db.query(Report.id)
            .filter(
                Report.reporter_id == user.id,
                Report.reportable_type == target_type,
                Report.reportable_id == target_id,
            )
            .first()
        ) is not None

    def can_report(self, user: User | None, target: Any) -> bool:
        """Return whether ``user`` may file a report against ``target``."""
        if user is None or not user.has_verified_email():
            return False
        if target.morph_type not in REPORTABLE_TYPES:
            return False
        if user.is_mod_or_admin():
            return False
        if isinstance(target, User):
            if target.id == user.id:
                return False
        elif user.id in target.author_ids():
            return False
        return not self.has_reported(user, target.morph_type, target.id)

    def staff_ids(self) -> list[int]:
        """Moderator and administrator ids, cached briefly."""
        def load() -> list[int]:
            rows = (
                self.db.query(User.id)
                .filter(User.role.in_([UserRole.MODERATOR, UserRole.ADMINISTRATOR]))
                .order_by(User.id)
                .all()
            )
            return [row[0] for row in rows]

        return list(self.cache.remember(MODERATOR_IDS_CACHE_KEY, settings.moderator_cache_seconds, load))

    def submit(
        self,
        user: User | None,
        target_type: str,
        target_id: int,
        reason: ReportReason,
        context: str = "",
    ) -> Report:
        """File a pending report against a target.

        Raises:
            NotFoundError: If the target does not exist.
            PermissionDeniedError: If the user may not report it.
            InvalidActionError: If the type cannot be reported or the context is too long.
        """
        target = resolve_reportable(self.db, target_type, target_id)
        if user is None or not self.can_report(user, target):
            raise PermissionDeniedError("You cannot report this item.")
        context = context or ""
        if len(context) > settings.report_context_max_length:
            raise InvalidActionError(
                f"Context may not be longer than {settings.report_context_max_length} characters."
            )

        report = Report(
            reporter_id=user.id,
            reportable_type=target.morph_type,
            reportable_id=target.id,
            reason=reason,
            context=context,
            status=ReportStatus.PENDING,
        )
        self.db.add(report)
        self.db.commit()
        self.db.refresh(report)

        if isinstance(target, Comment):
            self.tracker.event(TrackingEventType.COMMENT_REPORT, target, actor=user, context=self.context)
        elif isinstance(target, Mod):
            self.tracker.event(TrackingEventType.MOD_REPORT, target, actor=user, context=self.context)

        logger.info(
            "Report %s filed by user %s against %s:%s, %d staff to review",
            report.id,
            user.id,
            target.morph_type,
            target.id,
            len(self.staff_ids()),
        )
        return report

    # --- Report centre -------------------------------------------------------------

    def list_reports(
        self,
        *,
        unresolved_only: bool = True,
        report_id: int | None = None,
        reporter_name: str | None = None,
        page: int = 1,
        per_page: int = REPORT_CENTRE_PAGE_SIZE,
    ) -> Page[Report]:
        query = self.db.query(Report).options(
            selectinload(Report.reporter),
            selectinload(Report.assignee),
            selectinload(Report.actions).selectinload(ReportAction.tracking_event),
            selectinload(Report.actions).selectinload(ReportAction.moderator),
        )
        if unresolved_only:
            query = query.filter(Report.status == ReportStatus.PENDING)
        if report_id is not None:
            query = query.filter(Report.id == report_id)
        if reporter_name:
            query = query.join(User, Report.reporter_id == User.id).filter(
                User.name.ilike(contains(reporter_name), escape=LIKE_ESCAPE)
            )
        query = query.order_by(Report.created_at.desc(), Report.id.desc())
        return paginate(query, page, per_page)

    def pending_count(self) -> int:
        return self.db.query(Report).filter(Report.status == ReportStatus.PENDING).count()

    def pick_up(self, report: Report, moderator: User) -> Report:
        report.assignee_id = moderator.id
        self.db.commit()
        self.db.refresh(report)
        return report

    def release(self, report: Report) -> Report:
        report.assignee_id = None
        self.db.commit()
        self.db.refresh(report)
        return report

    def _set_status(self, report: Report, status: ReportStatus) -> Report:
        report.status = status
        self.db.commit()
        self.db.refresh(report)
        return report

    def mark_resolved(self, report: Report) -> Report:
        return self._set_status(report, ReportStatus.RESOLVED)

    def mark_dismissed(self, report: Report) -> Report:
        return self._set_status(report, ReportStatus.DISMISSED)

    def mark_unresolved(self, report: Report) -> Report:
        return self._set_status(report, ReportStatus.PENDING)

    def delete_report(self, report: Report, actor: User) -> None:
        policies.authorize(actor.is_admin(), "Only administrators can delete reports.")
        self.db.delete(report)
        self.db.commit()

    def recent_moderation_actions(
        self,
        moderator: User,
        report_id: int | None = None,
    ) -> list[TrackingEvent]:
        """The moderator's recent moderation-type events, for linking to a report."""
        since = utcnow() - timedelta(days=settings.recent_actions_days)
        query = self.db.query(TrackingEvent).filter(
            TrackingEvent.event_name.in_(TrackingEventType.moderation_action_values()),
            TrackingEvent.visitor_id == moderator.id,
            TrackingEvent.created_at >= since,
        )
        if report_id is not None:
            linked = self.db.query(ReportAction.tracking_event_id).filter(
                ReportAction.report_id == report_id
            )
            query = query.filter(TrackingEvent.id.not_in(linked.scalar_subquery()))
        return (
            query.order_by(TrackingEvent.created_at.desc(), TrackingEvent.id.desc())
            .limit(settings.recent_actions_limit)
            .all()
        )

    def reportable(self, report: Report) -> Any | None:
        return find_target(self.db, report.reportable_type, report.reportable_id)

    def user_to_ban(self, report: Report) -> User:
        """The account behind the reported target.

        Raises:
            InvalidActionError: If no user can be derived from the target.
        """
        user = responsible_user(self.reportable(report))
        if user is None:
            raise InvalidActionError("Cannot determine user to ban from report.")
        return user

    def execute_action(
        self,
        report: Report,
        action: str,
        moderator: User,
        *,
        note: str | None = None,
        ban_duration: BanDuration = BanDuration.ONE_DAY,
        resolve: bool = False,
    ) -> ReportAction:
        """Run a report centre action against the reported target.

        Returns the ReportAction linking the tracked event to the report.
        """
        if action not in REPORT_ACTIONS:
            raise InvalidActionError(f"Unknown action: {action}")
        note = note or None
        if note is not None and len(note) > settings.report_context_max_length:
            raise InvalidActionError(
                f"Note may not be longer than {settings.report_context_max_length} characters."
            )
        expected_type = REPORT_ACTIONS[action]
        if expected_type is not None and report.reportable_type != expected_type:
            raise InvalidActionError(f"Action {action} does not apply to a {report.reportable_type}.")

        if action == "ban_user":
            user = self.user_to_ban(report)
            bans = BanService(self.db, self.context)
            bans.ban_user(user, ban_duration, note, moderator, report=report, resolve_report=resolve)
            return self._linked(bans)
        if action == "unban_user":
            user = self.user_to_ban(report)
            bans = BanService(self.db, self.context)
            bans.unban_user(user, moderator, report=report, resolve_report=resolve, reason=note)
            return self._linked(bans)

        target = resolve_target(self.db, report.reportable_type, report.reportable_id)
        moderation = ContentModerationService(self.db, self.context)
        event_type, apply = moderation.report_action(action, target, moderator)
        return ReportActionService(self.db, self.context).take_action(
            report,
            event_type,
            target,
            apply,
            moderator=moderator,
            resolve_report=resolve,
            reason=note,
        )

    @staticmethod
    def _linked(bans: BanService) -> ReportAction:
        if bans.report_action is None:
            raise InvalidActionError("The action was not linked to the report.")
        return bans.report_action
