"""
Credential store: persistence of user records and roles.

Lookups only return active users unless stated otherwise.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mess_feedback.core.exceptions import ConflictException, NotFoundException
from mess_feedback.models.role import Role, RoleId
from mess_feedback.models.user import User


async def find_by_username_or_email(
    db: AsyncSession, username: str, email: str
) -> Optional[User]:
    """Any user (active or not) holding this username or email."""
    result = await db.execute(
        select(User).where(or_(User.username == username, User.email == email)).limit(1)
    )
    return result.scalar_one_or_none()


async def create_user(
    db: AsyncSession,
    username: str,
    email: str,
    password_hash: str,
    role_id: RoleId = RoleId.USER,
) -> User:
    """Insert a user. Raises ConflictException on duplicate username/email."""
    user = User(
        username=username,
        email=email,
        password_hash=password_hash,
        role_id=int(role_id),
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ConflictException("User already exists with this username or email") from exc
    await db.refresh(user)
    return user


async def get_user_by_id(db: AsyncSession, user_id: int) -> User:
    """Fetch an active user by ID."""
    result = await db.execute(
        select(User).where(User.id == user_id, User.is_active.is_(True))
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundException("User not found")
    return user


async def get_active_user_by_username(db: AsyncSession, username: str) -> Optional[User]:
    result = await db.execute(
        select(User).where(User.username == username, User.is_active.is_(True))
    )
    return result.scalar_one_or_none()


async def touch_last_login(db: AsyncSession, user_id: int) -> None:
    await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(last_login=datetime.now(timezone.utc))
    )
    await db.commit()


async def get_role_by_name(db: AsyncSession, role_name: str) -> Optional[Role]:
    result = await db.execute(select(Role).where(Role.role_name == role_name))
    return result.scalar_one_or_none()
