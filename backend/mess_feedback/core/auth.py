"""
JWT session tokens: issue and verify.

Tokens are stateless: nothing is stored server-side and there is no
revocation list, so a token stays valid until ``exp`` even if the user is
deactivated in the meantime.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from pydantic import ValidationError

from mess_feedback.config import settings
from mess_feedback.core.exceptions import ConfigurationError, InvalidTokenException
from mess_feedback.models.user import User
from mess_feedback.schemas.user import TokenClaims, TokenResponse

log = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def check_signing_key() -> None:
    """Refuse to run production with the built-in development secret."""
    if not settings.uses_default_secret:
        return
    if settings.is_production:
        raise ConfigurationError("JWT_SECRET_KEY must be set in production")
    log.warning("JWT_SECRET_KEY is not set; using the development default secret")


def _encode(claims: dict[str, Any], expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {**claims, "iat": now, "exp": now + expires_delta}
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(user: User, expires_delta: timedelta | None = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(days=settings.JWT_ACCESS_TOKEN_EXPIRE_DAYS)
    claims = {
        "sub": str(user.id),
        "username": user.username,
        "email": user.email,
        "role_id": int(user.role_id),
        "type": ACCESS_TOKEN_TYPE,
    }
    return _encode(claims, expires_delta)


def create_refresh_token(user: User, expires_delta: timedelta | None = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS)
    return _encode({"sub": str(user.id), "type": REFRESH_TOKEN_TYPE}, expires_delta)


def issue_tokens(user: User) -> TokenResponse:
    """Build access + refresh token pair for a user."""
    return TokenResponse(
        access_token=create_access_token(user),
        refresh_token=create_refresh_token(user),
    )


def decode_token(token: str) -> dict[str, Any]:
    """Check signature and expiry. Raises InvalidTokenException on failure."""
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError as exc:
        raise InvalidTokenException() from exc


def verify_access_token(token: str) -> TokenClaims:
    """Decode an access token into typed claims."""
    payload = decode_token(token)
    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise InvalidTokenException()
    try:
        return TokenClaims(
            user_id=int(payload["sub"]),
            username=payload["username"],
            email=payload["email"],
            role_id=payload["role_id"],
        )
    except (KeyError, TypeError, ValueError, ValidationError) as exc:
        raise InvalidTokenException() from exc
