"""
Unit tests for password hashing and access tokens.
It asserts expected behavior and guards against regressions in the corresponding component.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from datetime import UTC, datetime, timedelta

import pytest

from src.api.api_config import ApiConfig
from src.api.security import (
    InvalidTokenError,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)

ADMIN = {"id": "admin-abc123", "name": "Head Teacher", "user_name": "headteacher"}


def _config(secret: str = "unit-test-secret-0123456789") -> ApiConfig:
    return ApiConfig(database_url="sqlite://", jwt_secret=secret, token_expiry_hours=24)


def test_hash_is_salted_and_verifiable() -> None:
    first = hash_password("secret-pass1")
    second = hash_password("secret-pass1")

    assert first != second
    assert verify_password("secret-pass1", first)
    assert not verify_password("secret-pass2", first)


def test_verify_rejects_malformed_hash() -> None:
    assert verify_password("secret-pass1", "plain-text") is False


def test_token_round_trip_carries_admin_claims() -> None:
    config = _config()
    token = create_access_token(admin=ADMIN, config=config)
    claims = decode_access_token(token, config)

    assert claims["sub"] == "admin-abc123"
    assert claims["name"] == "Head Teacher"
    assert claims["userName"] == "headteacher"


def test_expired_token_is_rejected() -> None:
    config = _config()
    issued = datetime.now(tz=UTC) - timedelta(hours=25)
    token = create_access_token(admin=ADMIN, config=config, now=issued)

    with pytest.raises(InvalidTokenError):
        decode_access_token(token, config)


def test_token_signed_with_other_secret_is_rejected() -> None:
    token = create_access_token(admin=ADMIN, config=_config("another-secret-0123456789"))

    with pytest.raises(InvalidTokenError):
        decode_access_token(token, _config())
