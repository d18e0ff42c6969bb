# tests/test_security.py
"""Tests for JWT issuing and validation."""

from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from forge_api.core.security import create_access_token, decode_access_token
from forge_api.core.settings import settings


def test_round_trip_with_extra_claims() -> None:
    token = create_access_token(42, {"role": "moderator"})
    claims = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])

    assert claims["sub"] == "42"
    assert claims["role"] == "moderator"
    assert decode_access_token(token) == 42


@pytest.mark.parametrize(
    "claims",
    [
        {"sub": "7", "exp": datetime.now(UTC) - timedelta(minutes=1)},
        {"exp": datetime.now(UTC) + timedelta(minutes=5)},
        {"sub": "not-a-number", "exp": datetime.now(UTC) + timedelta(minutes=5)},
    ],
    ids=["expired", "no-subject", "bad-subject"],
)
def test_rejected_tokens(claims) -> None:
    token = jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)
    with pytest.raises(ValueError):
        decode_access_token(token)


def test_wrong_signature() -> None:
    token = jwt.encode({"sub": "1"}, "some-other-secret", algorithm=settings.jwt_algorithm)
    with pytest.raises(ValueError):
        decode_access_token(token)
