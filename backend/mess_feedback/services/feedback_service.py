"""
Feedback service: submission, history, admin listing and status changes.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from mess_feedback.core.exceptions import InvalidInputException, NotFoundException
from mess_feedback.models.feedback import (
    FEEDBACK_STATUSES,
    MEAL_TYPES,
    Feedback,
    FeedbackStatus,
    utc_today,
)
from mess_feedback.models.menu import MenuItem
from mess_feedback.models.user import User
from mess_feedback.schemas.feedback import AdminFeedbackOut, FeedbackCreate, FeedbackOut
from mess_feedback.schemas.user import TokenClaims
from mess_feedback.services.filters import FeedbackFilter

log = logging.getLogger(__name__)


def _validate_rating(rating: int) -> None:
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise InvalidInputException("Rating must be between 1 and 5")


def _validate_meal_type(meal_type: str) -> None:
    if meal_type not in MEAL_TYPES:
        raise InvalidInputException("Meal type must be breakfast, lunch, or dinner")


def _validate_status(status: str) -> None:
    if status not in FEEDBACK_STATUSES:
        raise InvalidInputException("Status must be pending, processing, or resolved")


async def _dish_summaries(
    db: AsyncSession, rows: list[Feedback]
) -> dict[tuple[date, str], str]:
    """Map (meal_date, meal_type) -> 'Dish A, Dish B' for the given feedback rows."""
    dates = {fb.meal_date for fb in rows}
    if not dates:
        return {}
    result = await db.execute(
        select(MenuItem.meal_date, MenuItem.meal_type, MenuItem.dish_name)
        .where(MenuItem.meal_date.in_(dates))
        .order_by(MenuItem.id)
    )
    dishes: dict[tuple[date, str], list[str]] = defaultdict(list)
    for meal_date, meal_type, dish_name in result.all():
        dishes[(meal_date, meal_type)].append(dish_name)
    return {key: ", ".join(names) for key, names in dishes.items()}


def _to_out(fb: Feedback, summaries: dict[tuple[date, str], str]) -> FeedbackOut:
    out = FeedbackOut.model_validate(fb)
    out.dish_names = summaries.get((fb.meal_date, fb.meal_type))
    return out


async def submit_feedback(
    db: AsyncSession, claims: TokenClaims, payload: FeedbackCreate
) -> FeedbackOut:
    """Record a rating for today's meal.

    Anonymous feedback is stored without an owner so it can never be traced
    back to the submitter. Repeat submissions for the same meal are allowed.
    """
    _validate_rating(payload.rating)
    _validate_meal_type(payload.meal_type)

    now = datetime.now(timezone.utc)
    feedback = Feedback(
        user_id=None if payload.is_anonymous else claims.user_id,
        rating=payload.rating,
        comment=payload.comment or None,
        is_anonymous=payload.is_anonymous,
        status=FeedbackStatus.PENDING.value,
        meal_date=utc_today(),
        meal_type=payload.meal_type,
        created_at=now,
        updated_at=now,
    )
    db.add(feedback)
    await db.commit()
    await db.refresh(feedback)
    log.info(
        "Feedback %s submitted (meal_type=%s, rating=%s, anonymous=%s)",
        feedback.id, feedback.meal_type, feedback.rating, feedback.is_anonymous,
    )
    return _to_out(feedback, await _dish_summaries(db, [feedback]))


async def get_history(
    db: AsyncSession, claims: TokenClaims, limit: int = 10, offset: int = 0
) -> list[FeedbackOut]:
    """The caller's own (non-anonymous) feedback, newest first."""
    result = await db.execute(
        select(Feedback)
        .where(Feedback.user_id == claims.user_id)
        .order_by(Feedback.created_at.desc(), Feedback.id.desc())
        .offset(offset)
        .limit(limit)
    )
    rows = list(result.scalars().all())
    summaries = await _dish_summaries(db, rows)
    return [_to_out(fb, summaries) for fb in rows]


async def list_feedback(
    db: AsyncSession,
    filters: FeedbackFilter,
    limit: Optional[int] = 50,
    offset: int = 0,
) -> list[AdminFeedbackOut]:
    """All feedback matching ``filters``, newest first, with submitter identity.

    ``limit=None`` returns every matching row (used by the CSV export).
    """
    stmt = (
        select(Feedback, User.username, User.email)
        .outerjoin(User, Feedback.user_id == User.id)
        .where(*filters.conditions())
        .order_by(Feedback.created_at.desc(), Feedback.id.desc())
        .offset(offset)
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    rows = result.all()

    summaries = await _dish_summaries(db, [fb for fb, _, _ in rows])
    items = []
    for fb, username, email in rows:
        item = AdminFeedbackOut.model_validate(fb)
        item.dish_names = summaries.get((fb.meal_date, fb.meal_type))
        if not fb.is_anonymous:
            item.username = username
            item.email = email
        else:
            item.user_id = None
        items.append(item)
    return items


async def update_status(db: AsyncSession, feedback_id: int, status: str) -> None:
    """Move a feedback record to ``status`` and refresh its update timestamp."""
    _validate_status(status)

    result = await db.execute(
        update(Feedback)
        .where(Feedback.id == feedback_id)
        .values(status=status, updated_at=datetime.now(timezone.utc))
    )
    if result.rowcount == 0:
        await db.rollback()
        raise NotFoundException("Feedback not found")
    await db.commit()
    log.info("Feedback %s status -> %s", feedback_id, status)
