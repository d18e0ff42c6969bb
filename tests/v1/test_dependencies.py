# mypy: ignore-errors
# tests/v1/test_dependencies.py
"""Tests for authentication and role dependencies."""

from fastapi import status

from forge_api.core.security import create_access_token
from forge_api.models import BanDuration, TrackingEvent
from forge_api.services.bans import BanService
from forge_api.services.geolocation import get_geolocation


def test_missing_token_is_rejected(client) -> None:
    response = client.get("/api/v1/report-centre/reports")
    assert response.status_code in {status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN}


def test_invalid_token_is_unauthorized(client) -> None:
    response = client.get(
        "/api/v1/report-centre/reports",
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Could not validate credentials"
    assert response.headers["www-authenticate"] == "Bearer"


def test_token_for_missing_user(client) -> None:
    headers = {"Authorization": f"Bearer {create_access_token(999_999)}"}
    response = client.get("/api/v1/report-centre/reports", headers=headers)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "User not found"


def test_banned_user_is_forbidden(client, db_session, test_user, admin, auth_token) -> None:
    BanService(db_session).ban_user(test_user, BanDuration.ONE_DAY, "Spam", admin)

    response = client.get(
        "/api/v1/reports/eligibility",
        params={"reportable_type": "user", "reportable_id": admin.id},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert "banned" in response.json()["detail"]


def test_staff_and_admin_gates(client, reporter_token, moderator_token) -> None:
    response = client.get("/api/v1/report-centre/reports", headers=reporter_token)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "Moderator access required"

    response = client.get("/api/v1/users", headers=moderator_token)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "Administrator access required"


class FixedLocation:
    def locate(self, ip):
        return {
            "country_code": None,
            "country_name": "Netherlands",
            "region_name": "North Holland",
            "city_name": "Amsterdam",
            "timezone": "Europe/Amsterdam",
        }


def test_request_context_carries_the_location(app, client, db_session, mod, reporter_token) -> None:
    app.dependency_overrides[get_geolocation] = FixedLocation
    try:
        response = client.post(
            "/api/v1/reports",
            json={"reportable_type": "mod", "reportable_id": mod.id},
            headers={**reporter_token, "cf-ipcountry": "NL", "accept-language": "nl-NL,nl;q=0.9"},
        )
    finally:
        app.dependency_overrides.pop(get_geolocation, None)
    assert response.status_code == status.HTTP_201_CREATED

    event = db_session.query(TrackingEvent).filter_by(event_name="mod_report").one()
    assert event.country_code == "NL"
    assert event.city_name == "Amsterdam"
    assert event.timezone == "Europe/Amsterdam"
    assert event.languages == ["nl-NL", "nl"]
