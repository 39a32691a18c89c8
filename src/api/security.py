# This file holds password hashing and access-token helpers for admin authentication.
# It exists so credential and token rules live in one module shared by auth service and dependencies.
# Passwords are stored as salted pbkdf2 hashes; tokens are short-lived signed JWTs.

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from src.api.api_config import ApiConfig

_PASSWORD_CONTEXT = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class InvalidTokenError(ValueError):
    """Raised when a bearer token is malformed, tampered with, or expired."""


def hash_password(password: str) -> str:
    return _PASSWORD_CONTEXT.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _PASSWORD_CONTEXT.verify(password, password_hash)
    except ValueError:
        return False


def create_access_token(
    *,
    admin: dict[str, Any],
    config: ApiConfig,
    now: datetime | None = None,
) -> str:
    """Sign a token carrying the admin id (`sub`), name and user name."""

    issued_at = now or datetime.now(tz=UTC)
    claims = {
        "sub": admin["id"],
        "name": admin["name"],
        "userName": admin["user_name"],
        "iat": issued_at,
        "exp": issued_at + timedelta(hours=config.token_expiry_hours),
    }
    return jwt.encode(claims, config.jwt_secret, algorithm=config.jwt_algorithm)


def decode_access_token(token: str, config: ApiConfig) -> dict[str, Any]:
    try:
        claims = jwt.decode(token, config.jwt_secret, algorithms=[config.jwt_algorithm])
    except JWTError as exc:
        raise InvalidTokenError(str(exc)) from exc
    if not claims.get("sub"):
        raise InvalidTokenError("Token has no subject.")
    return claims
