# mypy: ignore-errors
# tests/test_scripts.py
"""Tests for the operator scripts."""

from contextlib import contextmanager
from datetime import timedelta

import pytest

from forge_api.core.security import decode_access_token
from forge_api.db.time import utcnow
from forge_api.models import Ban, Visitor
from forge_api.scripts import maintenance, tokens


@pytest.fixture()
def scoped_session(monkeypatch, db_session):
    @contextmanager
    def _scope():
        yield db_session

    monkeypatch.setattr(tokens, "session_scope", _scope)
    monkeypatch.setattr(maintenance, "session_scope", _scope)
    return db_session


def test_issue_token(scoped_session, moderator, capsys) -> None:
    assert tokens.main([str(moderator.id)]) == 0
    token = capsys.readouterr().out.strip()
    assert decode_access_token(token) == moderator.id


def test_issue_token_for_missing_user(scoped_session, capsys) -> None:
    assert tokens.main(["424242"]) == 1
    assert "does not exist" in capsys.readouterr().err


def test_maintenance_cleans_visitors_and_bans(scoped_session, test_user, admin, capsys) -> None:
    now = utcnow()
    scoped_session.add_all(
        [
            Visitor(session_id="old", last_activity=now - timedelta(days=3)),
            Visitor(session_id="fresh", last_activity=now),
            Ban(user_id=test_user.id, created_by_id=admin.id, expired_at=now - timedelta(hours=1)),
        ]
    )
    scoped_session.commit()

    maintenance.main()

    out = capsys.readouterr().out
    assert "Removed 1 stale visitor records" in out
    assert "Removed 1 expired bans" in out
    assert [v.session_id for v in scoped_session.query(Visitor).all()] == ["fresh"]
    assert scoped_session.query(Ban).count() == 0
