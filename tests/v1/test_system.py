# mypy: ignore-errors
# tests/v1/test_system.py
"""Tests for system and transparency endpoints."""

from fastapi import status

from forge_api.models import Report, ReportReason, ReportStatus
from forge_api.services.moderation import ContentModerationService


def test_public_config_excludes_secrets(client) -> None:
    response = client.get("/api/v1/system/config")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["app"]["name"] == "The Forge"
    assert "secret_key" not in str(data)
    assert "database" not in str(data)
    assert data["reports"]["context_max_length"] == 1000


def test_moderation_stats(client, db_session, mod, reporter, test_user, moderator, moderator_token) -> None:
    db_session.add(
        Report(
            reporter_id=reporter.id,
            reportable_type="user",
            reportable_id=test_user.id,
            reason=ReportReason.HARASSMENT,
            context="",
            status=ReportStatus.PENDING,
        )
    )
    db_session.commit()
    service = ContentModerationService(db_session)
    service.disable_mod(mod, moderator)
    service.enable_mod(mod, moderator)
    service.unpublish_mod(mod, test_user)

    response = client.get("/api/v1/system/moderation-stats", headers=moderator_token)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "reports": {"pending": 1, "resolved": 0, "dismissed": 0},
        "actions": {"mod_disable": 1, "mod_enable": 1},
    }


def test_moderation_stats_requires_staff(client, reporter_token) -> None:
    response = client.get("/api/v1/system/moderation-stats", headers=reporter_token)
    assert response.status_code == status.HTTP_403_FORBIDDEN
