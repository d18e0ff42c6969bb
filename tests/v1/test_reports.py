# mypy: ignore-errors
# tests/v1/test_reports.py
"""Tests for report submission endpoints."""

from fastapi import status

from forge_api.models import Report, ReportStatus


def test_submit_report(client, db_session, mod, reporter_token, moderator, admin) -> None:
    response = client.post(
        "/api/v1/reports",
        json={
            "reportable_type": "mod",
            "reportable_id": mod.id,
            "reason": "spam",
            "context": "Links to a download mirror",
        },
        headers=reporter_token,
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["staff_notified"] == 2
    assert data["report"]["status"] == ReportStatus.PENDING.value
    assert data["report"]["reporter"]["name"] == "Reporter"
    assert db_session.query(Report).count() == 1


def test_submit_report_twice(client, comment, reporter_token) -> None:
    payload = {"reportable_type": "comment", "reportable_id": comment.id, "reason": "spam"}
    assert client.post("/api/v1/reports", json=payload, headers=reporter_token).status_code == 201

    response = client.post("/api/v1/reports", json=payload, headers=reporter_token)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "You cannot report this item."


def test_submit_report_own_content(client, mod, auth_token) -> None:
    response = client.post(
        "/api/v1/reports",
        json={"reportable_type": "mod", "reportable_id": mod.id},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_submit_report_unknown_target(client, reporter_token) -> None:
    response = client.post(
        "/api/v1/reports",
        json={"reportable_type": "mod", "reportable_id": 424242},
        headers=reporter_token,
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND

    response = client.post(
        "/api/v1/reports",
        json={"reportable_type": "spaceship", "reportable_id": 1},
        headers=reporter_token,
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_report_context_too_long(client, mod, reporter_token) -> None:
    response = client.post(
        "/api/v1/reports",
        json={"reportable_type": "mod", "reportable_id": mod.id, "context": "x" * 1001},
        headers=reporter_token,
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_report_eligibility(client, mod, reporter_token, moderator_token) -> None:
    params = {"reportable_type": "mod", "reportable_id": mod.id}

    assert client.get("/api/v1/reports/eligibility", params=params).json() == {"can_report": False}
    response = client.get("/api/v1/reports/eligibility", params=params, headers=reporter_token)
    assert response.json() == {"can_report": True}
    response = client.get("/api/v1/reports/eligibility", params=params, headers=moderator_token)
    assert response.json() == {"can_report": False}


def test_versions_cannot_be_reported(client, db_session, mod_version, reporter_token) -> None:
    response = client.post(
        "/api/v1/reports",
        json={"reportable_type": "mod_version", "reportable_id": mod_version.id, "reason": "spam"},
        headers=reporter_token,
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["detail"] == "mod_version cannot be reported"
    assert db_session.query(Report).count() == 0

    params = {"reportable_type": "mod_version", "reportable_id": mod_version.id}
    response = client.get("/api/v1/reports/eligibility", params=params, headers=reporter_token)
    assert response.json() == {"can_report": False}
