# mypy: ignore-errors
# tests/services/test_tracking.py
"""Tests for the tracking ledger and its helpers."""

import pytest

from forge_api.models import TrackingEvent, TrackingEventType, UserRole
from forge_api.services.tracking import TrackService, is_moderation_action, parse_user_agent

CHROME_WINDOWS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)
EDGE_WINDOWS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36 Edg/120.0.2210.91"
)
FIREFOX_MAC = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:121.0) Gecko/20100101 Firefox/121.0"
SAFARI_IPHONE = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) "
    "Version/17.0 Mobile/15E148 Safari/604.1"
)
SAFARI_IPAD = (
    "Mozilla/5.0 (iPad; CPU OS 17_0 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) "
    "Version/17.0 Mobile/15E148 Safari/604.1"
)
CHROME_ANDROID = (
    "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Mobile Safari/537.36"
)
GOOGLEBOT = "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)"


@pytest.mark.parametrize(
    ("useragent", "expected"),
    [
        (CHROME_WINDOWS, ("desktop", "Windows", "Chrome")),
        (EDGE_WINDOWS, ("desktop", "Windows", "Edge")),
        (FIREFOX_MAC, ("desktop", "macOS", "Firefox")),
        (SAFARI_IPHONE, ("mobile", "iOS", "Safari")),
        (SAFARI_IPAD, ("tablet", "iOS", "Safari")),
        (CHROME_ANDROID, ("mobile", "Android", "Chrome")),
        (GOOGLEBOT, ("robot", None, None)),
        (None, (None, None, None)),
    ],
)
def test_parse_user_agent(useragent, expected) -> None:
    assert parse_user_agent(useragent) == expected


def test_is_moderation_action_rules(test_user, moderator) -> None:
    """Staff acting on other people's content is moderation; owners never are."""
    assert is_moderation_action(moderator, {test_user.id}) is True
    assert is_moderation_action(moderator, {moderator.id}) is False
    assert is_moderation_action(test_user, {moderator.id}) is False
    assert is_moderation_action(test_user, {test_user.id}, always=True) is True
    assert is_moderation_action(None, set(), always=True) is False


def test_record_stores_snapshot_and_request_details(db_session, mod, moderator, request_context) -> None:
    event = TrackService(db_session).record(
        TrackingEventType.MOD_DISABLE,
        mod,
        actor=moderator,
        context=request_context,
        is_moderation_action=True,
        reason="Malware",
    )
    db_session.commit()

    stored = db_session.get(TrackingEvent, event.id)
    assert stored.visitable_type == "mod"
    assert stored.visitable_id == mod.id
    assert stored.visitor_id == moderator.id
    assert stored.event_data["snapshot"]["mod_name"] == "Better Ores"
    assert stored.event_data["url"] == f"/mod/{mod.id}/{mod.slug}"
    assert stored.browser == "Chrome"
    assert stored.platform == "Windows"
    assert stored.country_code == "GB"
    assert stored.reason == "Malware"
    assert stored.display_name == "Disabled mod"
    assert stored.context == "Better Ores"


def test_context_follows_the_live_target(db_session, mod, mod_version, moderator) -> None:
    event = TrackService(db_session).record(
        TrackingEventType.VERSION_DISABLE, mod_version, actor=moderator, is_moderation_action=True
    )
    db_session.commit()
    assert event.context == "Better Ores 1.2.0"

    mod.name = "Better Ores Reforged"
    db_session.commit()
    assert event.context == "Better Ores Reforged 1.2.0"

    db_session.delete(mod_version)
    db_session.commit()
    assert event.trackable is None
    assert event.context == "Better Ores"


def test_reason_dropped_when_not_a_moderation_action(db_session, mod, test_user) -> None:
    event = TrackService(db_session).record(
        TrackingEventType.MOD_PUBLISH,
        mod,
        actor=test_user,
        reason="ignored",
    )
    assert event.is_moderation_action is False
    assert event.reason is None


def test_login_is_attributed_to_the_trackable_user(db_session, test_user) -> None:
    event = TrackService(db_session).record(TrackingEventType.LOGIN, test_user)
    assert event.visitor_id == test_user.id
    assert event.event_url is None


def test_page_visit_display_name(db_session) -> None:
    event = TrackingEvent(event_name=None, url="/mods")
    assert event.display_name == "Page visit"
    assert event.context == "/mods"
    event.event_name = "custom_thing"
    assert event.display_name == "Custom thing"


def test_event_failure_is_logged_not_raised(db_session, mod, test_user, monkeypatch, caplog) -> None:
    service = TrackService(db_session)

    def broken_record(*args, **kwargs):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(service, "record", broken_record)
    assert service.event(TrackingEventType.MOD_DOWNLOAD, mod, actor=test_user) is None
    assert "Failed to track event mod_download" in caplog.text


def test_moderation_action_types_exclude_user_events() -> None:
    values = TrackingEventType.moderation_action_values()
    assert "mod_disable" in values
    assert "ip_ban" in values
    assert "mod_report" not in values
    assert "user_banned" not in values
    assert UserRole.MODERATOR.is_staff
