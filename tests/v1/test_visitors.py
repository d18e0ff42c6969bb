# mypy: ignore-errors
# tests/v1/test_visitors.py
"""Tests for visitor presence endpoints."""

from fastapi import status

from forge_api.services.visitors import PEAK_CHANNEL

BASE = "/api/v1/visitors"


def test_heartbeat_counts_guests_and_users(client, auth_token, memory_cache) -> None:
    response = client.post(f"{BASE}/heartbeat", json={"session_id": "guest-session"})
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["current"] == {"total": 1, "authenticated": 0, "guests": 1}
    assert response.json()["peak"]["count"] == 1

    response = client.post(f"{BASE}/heartbeat", json={"session_id": "member-session"}, headers=auth_token)
    assert response.json()["current"] == {"total": 2, "authenticated": 1, "guests": 1}
    assert response.json()["peak"]["count"] == 2
    assert [channel for channel, _ in memory_cache.published] == [PEAK_CHANNEL, PEAK_CHANNEL]


def test_repeat_heartbeat_is_one_visitor(client) -> None:
    client.post(f"{BASE}/heartbeat", json={"session_id": "same"})
    client.post(f"{BASE}/heartbeat", json={"session_id": "same"})

    assert client.get(f"{BASE}/current").json()["total"] == 1
    assert client.get(f"{BASE}/peak").json()["count"] == 1


def test_overview_without_visitors(client) -> None:
    response = client.get(BASE)
    assert response.json() == {
        "current": {"total": 0, "authenticated": 0, "guests": 0},
        "peak": {"count": 0, "date": None},
    }


def test_heartbeat_requires_session_id(client) -> None:
    response = client.post(f"{BASE}/heartbeat", json={"session_id": ""})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
