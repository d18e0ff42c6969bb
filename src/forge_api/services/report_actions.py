# src/forge_api/services/report_actions.py
"""Linking tracked moderation actions to reports."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from forge_api.models import (
    Report,
    ReportAction,
    ReportStatus,
    TrackingEvent,
    TrackingEventType,
    User,
)
from forge_api.services.errors import ConflictError, InvalidActionError, NotFoundError
from forge_api.services.tracking import RequestContext, TrackService

logger = logging.getLogger(__name__)


class ReportActionService:
    """Service recording which moderation actions were taken for a report."""

    def __init__(self, db: Session, context: RequestContext | None = None) -> None:
        self.db = db
        self.context = context
        self.tracker = TrackService(db)

    def take_action(
        self,
        report: Report,
        event_type: TrackingEventType,
        trackable: Any,
        action: Callable[[], None],
        *,
        moderator: User,
        resolve_report: bool = False,
        reason: str | None = None,
    ) -> ReportAction:
        """Run ``action``, track it as a moderation action and link it to ``report``.

        The action, the tracking event, the link and the optional status
        change commit together or not at all.

        Args:
            report: Report the action answers
            event_type: Tracking event recorded for the action
            trackable: Model the action was applied to
            action: Callback performing the change
            moderator: Staff member taking the action
            resolve_report: Mark the report resolved afterwards
            reason: Moderator note stored on the tracking event

        Returns:
            The new ReportAction link
        """
        with self.db.begin_nested():
            action()
            event = self.tracker.record(
                event_type,
                trackable,
                actor=moderator,
                context=self.context,
                is_moderation_action=True,
                reason=reason,
            )
            link = ReportAction(
                report_id=report.id,
                tracking_event_id=event.id,
                moderator_id=moderator.id,
            )
            self.db.add(link)
            if resolve_report:
                report.status = ReportStatus.RESOLVED
            self.db.flush()
        self.db.commit()
        self.db.refresh(link)
        logger.info(
            "Moderator %s took %s on report %s (resolved=%s)",
            moderator.id,
            event_type.value,
            report.id,
            resolve_report,
        )
        return link

    def link_existing_action(
        self,
        report: Report,
        tracking_event: TrackingEvent,
        moderator: User,
    ) -> ReportAction:
        """Link an already recorded moderation event to ``report``.

        Raises:
            InvalidActionError: If the event is not a moderation action type.
            ConflictError: If the pair is already linked.
        """
        event_type = tracking_event.event_type
        if event_type is None or not event_type.is_moderation_type:
            raise InvalidActionError("Only moderation actions can be linked to a report.")

        if self._find_link(report.id, tracking_event.id) is not None:
            raise ConflictError("This action is already linked to the report.")

        link = ReportAction(
            report_id=report.id,
            tracking_event_id=tracking_event.id,
            moderator_id=moderator.id,
        )
        try:
            with self.db.begin_nested():
                self.db.add(link)
                self.db.flush()
        except IntegrityError as err:
            raise ConflictError("This action is already linked to the report.") from err
        self.db.commit()
        self.db.refresh(link)
        return link

    def detach(self, report_action: ReportAction) -> None:
        """Remove a report/action link; the tracking event itself is kept."""
        self.db.delete(report_action)
        self.db.commit()

    def detach_pair(self, tracking_event_id: int, report_id: int) -> None:
        link = self._find_link(report_id, tracking_event_id)
        if link is None:
            raise NotFoundError("Report action link not found")
        self.detach(link)

    def _find_link(self, report_id: int, tracking_event_id: int) -> ReportAction | None:
        return (
            self.db.query(ReportAction)
            .filter(
                ReportAction.report_id == report_id,
                ReportAction.tracking_event_id == tracking_event_id,
            )
            .first()
        )

    def actions_for_report(self, report: Report) -> list[ReportAction]:
        return (
            self.db.query(ReportAction)
            .filter(ReportAction.report_id == report.id)
            .order_by(ReportAction.created_at.desc(), ReportAction.id.desc())
            .all()
        )
