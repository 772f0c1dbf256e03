"""Tests for bearer token helpers."""

from datetime import datetime, timedelta

import jwt

from taskdeck.auth.jwt import (
    JWT_ALGORITHM,
    JWT_SECRET_KEY,
    create_access_token,
    decode_access_token,
    get_user_id_from_token,
)


def test_token_round_trip():
    token = create_access_token("user-1")

    assert get_user_id_from_token(token) == "user-1"
    assert decode_access_token(token)["sub"] == "user-1"


def test_expired_token_is_rejected():
    expired = create_access_token(
        "user-1",
        now=datetime.utcnow() - timedelta(hours=2),
        expires_in=timedelta(hours=1),
    )

    assert decode_access_token(expired) is None
    assert get_user_id_from_token(expired) is None


def test_token_signed_with_other_key_is_rejected():
    forged = jwt.encode(
        {"sub": "user-1", "exp": datetime.utcnow() + timedelta(hours=1)},
        "some-other-key-that-is-long-enough",
        algorithm=JWT_ALGORITHM,
    )

    assert get_user_id_from_token(forged) is None


def test_token_without_expiry_is_rejected():
    no_exp = jwt.encode({"sub": "user-1"}, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)

    assert get_user_id_from_token(no_exp) is None


def test_garbage_is_rejected():
    assert get_user_id_from_token("not-a-token") is None
