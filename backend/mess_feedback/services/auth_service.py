"""
Auth service: business logic for registration, login and profile lookup.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from mess_feedback.core.auth import issue_tokens
from mess_feedback.core.exceptions import (
    ConfigurationError,
    ConflictException,
    InvalidCredentialsException,
)
from mess_feedback.core.security import hash_password, verify_password
from mess_feedback.models.role import RoleId
from mess_feedback.models.user import User
from mess_feedback.schemas.user import TokenClaims, TokenResponse, UserCreate
from mess_feedback.services import user_store

log = logging.getLogger(__name__)


async def register_user(db: AsyncSession, payload: UserCreate) -> User:
    """Register a new user with the default 'user' role.

    Raises ConflictException if the username or email is taken and
    ConfigurationError if the 'user' role has not been seeded.
    """
    existing = await user_store.find_by_username_or_email(db, payload.username, payload.email)
    if existing is not None:
        if existing.username == payload.username:
            raise ConflictException("Username already taken")
        raise ConflictException("Email already registered")

    role = await user_store.get_role_by_name(db, RoleId.USER.role_name)
    if role is None:
        raise ConfigurationError("Default 'user' role is missing")

    user = await user_store.create_user(
        db,
        username=payload.username,
        email=payload.email,
        password_hash=hash_password(payload.password),
        role_id=RoleId(role.id),
    )
    log.info("Registered user %s (id=%s)", user.username, user.id)
    return user


async def authenticate_user(
    db: AsyncSession, username: str, password: str
) -> tuple[User, TokenResponse]:
    """Validate credentials and return the user with a fresh token pair.

    Unknown, deactivated and wrong-password logins all raise the same
    InvalidCredentialsException.
    """
    user = await user_store.get_active_user_by_username(db, username)
    if user is None or not verify_password(password, user.password_hash):
        log.info("Failed login for username %r", username)
        raise InvalidCredentialsException()

    await user_store.touch_last_login(db, user.id)
    await db.refresh(user)
    log.info("User %s logged in", user.username)
    return user, issue_tokens(user)


async def get_profile(db: AsyncSession, claims: TokenClaims) -> User:
    """Current state of the token's user (not just the token claims)."""
    return await user_store.get_user_by_id(db, claims.user_id)
