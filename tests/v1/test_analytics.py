# mypy: ignore-errors
# tests/v1/test_analytics.py
"""Tests for the administrator analytics endpoints."""

from fastapi import status

from forge_api.models import TrackingEvent

BASE = "/api/v1/analytics"


def _add_events(db_session, user) -> None:
    db_session.add_all(
        [
            TrackingEvent(event_name="mod_download", ip="10.0.0.1", browser="Chrome", platform="Windows",
                          country_code="GB", country_name="United Kingdom", visitor_id=user.id),
            TrackingEvent(event_name="mod_download", ip="10.0.0.2", browser="Lynx", platform="Linux"),
        ]
    )
    db_session.commit()


def test_analytics_is_admin_only(client, moderator_token) -> None:
    assert client.get(f"{BASE}/summary", headers=moderator_token).status_code == status.HTTP_403_FORBIDDEN
    assert client.get(f"{BASE}/events", headers=moderator_token).status_code == status.HTTP_403_FORBIDDEN


def test_summary(client, db_session, test_user, admin_token) -> None:
    _add_events(db_session, test_user)

    response = client.get(f"{BASE}/summary", headers=admin_token)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["stats"]["total_events"] == 2
    assert data["stats"]["authenticated_events"] == 1
    assert data["top_events"] == [{"name": "mod_download", "count": 2}]
    assert data["top_countries"] == [{"country_code": "GB", "country_name": "United Kingdom", "count": 1}]


def test_event_explorer(client, db_session, test_user, admin_token) -> None:
    _add_events(db_session, test_user)

    response = client.get(f"{BASE}/events", params={"browser": "other"}, headers=admin_token)
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["ip"] == "10.0.0.2"

    response = client.get(f"{BASE}/events", params={"user_type": "authenticated"}, headers=admin_token)
    assert response.json()["items"][0]["user"]["name"] == "Author"


def test_event_types(client, admin_token) -> None:
    options = {option["value"]: option for option in client.get(f"{BASE}/event-types", headers=admin_token).json()}
    assert options["login"]["label"] == "Logged in"
    assert options["login"]["is_private"] is True
    assert options["mod_download"]["requires_trackable"] is True
