# mypy: ignore-errors
# tests/services/test_report_actions.py
"""Tests for linking moderation actions to reports."""

import pytest
from sqlalchemy.exc import IntegrityError

from forge_api.models import (
    Report,
    ReportAction,
    ReportReason,
    ReportStatus,
    TrackingEvent,
    TrackingEventType,
)
from forge_api.services.errors import ConflictError, InvalidActionError, NotFoundError
from forge_api.services.report_actions import ReportActionService
from forge_api.services.tracking import TrackService


@pytest.fixture()
def mod_report(db_session, mod, reporter) -> Report:
    report = Report(
        reporter_id=reporter.id,
        reportable_type="mod",
        reportable_id=mod.id,
        reason=ReportReason.INAPPROPRIATE_CONTENT,
        context="Ships a miner",
    )
    db_session.add(report)
    db_session.commit()
    return report


def test_take_action_commits_change_event_and_link(db_session, mod, mod_report, moderator) -> None:
    service = ReportActionService(db_session)

    def disable() -> None:
        mod.disabled = True

    link = service.take_action(
        mod_report,
        TrackingEventType.MOD_DISABLE,
        mod,
        disable,
        moderator=moderator,
        resolve_report=True,
        reason="Confirmed malware",
    )

    db_session.refresh(mod)
    db_session.refresh(mod_report)
    assert mod.disabled is True
    assert mod_report.status == ReportStatus.RESOLVED
    assert link.moderator_id == moderator.id
    event = db_session.get(TrackingEvent, link.tracking_event_id)
    assert event.event_name == "mod_disable"
    assert event.is_moderation_action is True
    assert event.reason == "Confirmed malware"


def test_take_action_rolls_back_when_the_action_fails(db_session, mod, mod_report, moderator) -> None:
    service = ReportActionService(db_session)

    def explode() -> None:
        mod.disabled = True
        raise RuntimeError("storage offline")

    with pytest.raises(RuntimeError):
        service.take_action(
            mod_report,
            TrackingEventType.MOD_DISABLE,
            mod,
            explode,
            moderator=moderator,
            resolve_report=True,
        )
    db_session.rollback()

    db_session.refresh(mod_report)
    assert mod_report.status == ReportStatus.PENDING
    assert db_session.query(ReportAction).count() == 0
    assert db_session.query(TrackingEvent).count() == 0


def test_link_existing_action_and_duplicate(db_session, mod, mod_report, moderator) -> None:
    event = TrackService(db_session).record(
        TrackingEventType.MOD_DISABLE, mod, actor=moderator, is_moderation_action=True
    )
    db_session.commit()
    service = ReportActionService(db_session)

    link = service.link_existing_action(mod_report, event, moderator)
    assert link.tracking_event_id == event.id

    with pytest.raises(ConflictError):
        service.link_existing_action(mod_report, event, moderator)
    assert len(service.actions_for_report(mod_report)) == 1


def test_duplicate_links_violate_the_unique_pair(db_session, mod, mod_report, moderator) -> None:
    event = TrackService(db_session).record(
        TrackingEventType.MOD_DISABLE, mod, actor=moderator, is_moderation_action=True
    )
    db_session.add(ReportAction(report_id=mod_report.id, tracking_event_id=event.id, moderator_id=moderator.id))
    db_session.flush()

    db_session.add(ReportAction(report_id=mod_report.id, tracking_event_id=event.id, moderator_id=moderator.id))
    with pytest.raises(IntegrityError):
        db_session.flush()
    db_session.rollback()


def test_racing_link_is_reported_as_conflict(db_session, mod, mod_report, moderator, monkeypatch) -> None:
    event = TrackService(db_session).record(
        TrackingEventType.MOD_DISABLE, mod, actor=moderator, is_moderation_action=True
    )
    db_session.commit()
    service = ReportActionService(db_session)
    service.link_existing_action(mod_report, event, moderator)
    # Another request linked the pair between the lookup and the insert.
    monkeypatch.setattr(service, "_find_link", lambda report_id, tracking_event_id: None)

    with pytest.raises(ConflictError):
        service.link_existing_action(mod_report, event, moderator)
    assert db_session.query(ReportAction).count() == 1


def test_link_rejects_non_moderation_events(db_session, mod, mod_report, reporter) -> None:
    event = TrackService(db_session).record(TrackingEventType.MOD_REPORT, mod, actor=reporter)
    db_session.commit()

    with pytest.raises(InvalidActionError):
        ReportActionService(db_session).link_existing_action(mod_report, event, reporter)


def test_detach_keeps_the_tracking_event(db_session, mod, mod_report, moderator) -> None:
    event = TrackService(db_session).record(
        TrackingEventType.MOD_DISABLE, mod, actor=moderator, is_moderation_action=True
    )
    db_session.commit()
    event_id = event.id
    service = ReportActionService(db_session)
    service.link_existing_action(mod_report, event, moderator)

    service.detach_pair(event_id, mod_report.id)

    assert service.actions_for_report(mod_report) == []
    assert db_session.get(TrackingEvent, event_id) is not None
    with pytest.raises(NotFoundError):
        service.detach_pair(event_id, mod_report.id)
