# mypy: ignore-errors
# tests/services/test_bans.py
"""Tests for user and IP bans."""

from datetime import timedelta

import pytest

from forge_api.db.time import utcnow
from forge_api.models import Ban, BanDuration, Report, ReportReason, ReportStatus, TrackingEvent, UserRole
from forge_api.services.bans import BanService
from forge_api.services.errors import PermissionDeniedError


def test_duration_options_cover_every_duration() -> None:
    options = BanService.duration_options()
    assert options["permanent"] == "Permanent"
    assert list(options) == [d.value for d in BanDuration]


def test_ban_user_records_both_events(db_session, test_user, admin) -> None:
    service = BanService(db_session)

    ban = service.ban_user(test_user, BanDuration.ONE_DAY, "Spamming", admin)

    assert ban.user_id == test_user.id
    assert ban.created_by_id == admin.id
    assert ban.is_permanent is False
    assert service.is_banned(test_user) is True
    names = {e.event_name: e for e in db_session.query(TrackingEvent).all()}
    assert set(names) == {"user_banned", "user_ban"}
    assert names["user_ban"].is_moderation_action is True
    assert names["user_ban"].reason == "Spamming"
    assert names["user_banned"].is_moderation_action is False


def test_rebanning_updates_the_active_ban(db_session, test_user, admin) -> None:
    service = BanService(db_session)
    first = service.ban_user(test_user, BanDuration.ONE_HOUR, None, admin)
    second = service.ban_user(test_user, BanDuration.PERMANENT, "Escalated", admin)

    assert first.id == second.id
    assert second.is_permanent is True
    assert db_session.query(Ban).filter_by(user_id=test_user.id).count() == 1


def test_ban_permissions(db_session, test_user, moderator, admin, user_factory) -> None:
    service = BanService(db_session)
    other_admin = user_factory("Other Admin", UserRole.ADMINISTRATOR)

    with pytest.raises(PermissionDeniedError):
        service.ban_user(test_user, BanDuration.ONE_DAY, None, moderator)
    with pytest.raises(PermissionDeniedError):
        service.ban_user(other_admin, BanDuration.ONE_DAY, None, admin)
    with pytest.raises(PermissionDeniedError):
        service.ban_user(admin, BanDuration.ONE_DAY, None, admin)
    assert db_session.query(Ban).count() == 0


def test_unban_removes_active_bans(db_session, test_user, admin) -> None:
    service = BanService(db_session)
    service.ban_user(test_user, BanDuration.ONE_WEEK, None, admin)

    assert service.unban_user(test_user, admin) == 1
    assert service.is_banned(test_user) is False
    names = [e.event_name for e in db_session.query(TrackingEvent).order_by(TrackingEvent.id)]
    assert names[-2:] == ["user_unbanned", "user_unban"]


def test_unban_records_the_note(db_session, test_user, admin) -> None:
    service = BanService(db_session)
    service.ban_user(test_user, BanDuration.ONE_WEEK, "Spam", admin)

    service.unban_user(test_user, admin, reason="Appeal accepted")

    event = db_session.query(TrackingEvent).filter_by(event_name="user_unban").one()
    assert event.is_moderation_action is True
    assert event.reason == "Appeal accepted"


def test_expired_bans_are_inactive_and_cleaned(db_session, test_user, admin) -> None:
    db_session.add(Ban(user_id=test_user.id, created_by_id=admin.id, expired_at=utcnow() - timedelta(hours=1)))
    db_session.commit()
    service = BanService(db_session)

    assert service.is_banned(test_user) is False
    assert service.expire_lapsed() == 1
    assert db_session.query(Ban).count() == 0


def test_toggle_ip_ban(db_session, admin, moderator) -> None:
    service = BanService(db_session)

    assert service.toggle_ip_ban("198.51.100.4", admin, "Ban evasion") is True
    assert service.is_ip_banned("198.51.100.4") is True
    assert service.toggle_ip_ban("198.51.100.4", admin) is False
    assert service.is_ip_banned("198.51.100.4") is False

    events = db_session.query(TrackingEvent).order_by(TrackingEvent.id).all()
    assert [e.event_name for e in events] == ["ip_ban", "ip_unban"]
    assert events[0].event_data == {"ip": "198.51.100.4"}
    assert events[0].reason == "Ban evasion"
    assert all(e.is_moderation_action for e in events)

    with pytest.raises(PermissionDeniedError):
        service.toggle_ip_ban("198.51.100.4", moderator)


def test_ban_linked_to_report(db_session, test_user, reporter, admin) -> None:
    report = Report(
        reporter_id=reporter.id,
        reportable_type="user",
        reportable_id=test_user.id,
        reason=ReportReason.HARASSMENT,
    )
    db_session.add(report)
    db_session.commit()
    service = BanService(db_session)

    assert [r.id for r in service.available_reports(test_user)] == [report.id]
    service.ban_user(test_user, BanDuration.ONE_DAY, "Abuse", admin, report=report)

    db_session.refresh(report)
    assert report.status == ReportStatus.RESOLVED
    assert service.available_reports(test_user) == []
    assert service.report_action.report_id == report.id
    assert service.report_action.tracking_event.reason == "Abuse"


def test_available_reports_include_owned_content(db_session, mod, comment, test_user, reporter, user_factory) -> None:
    other = user_factory("Other")
    for reportable_type, reportable_id in (("mod", mod.id), ("comment", comment.id)):
        db_session.add(
            Report(
                reporter_id=reporter.id,
                reportable_type=reportable_type,
                reportable_id=reportable_id,
                reason=ReportReason.SPAM,
            )
        )
    db_session.commit()

    assert len(BanService(db_session).available_reports(test_user)) == 2
    assert BanService(db_session).available_reports(other) == []
