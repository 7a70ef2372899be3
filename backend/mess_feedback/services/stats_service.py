"""
Aggregated feedback statistics for the admin dashboard.
"""

from sqlalchemy import Float, case, cast, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mess_feedback.models.feedback import Feedback
from mess_feedback.schemas.stats import FeedbackStats, MealTypeStats, OverallStats
from mess_feedback.services.filters import FeedbackFilter

# Ratings at or below this count as negative feedback
NEGATIVE_RATING_THRESHOLD = 2


def _avg_or_none(value) -> float | None:
    # AVG over zero rows is NULL; keep it that way instead of reporting 0
    return float(value) if value is not None else None


async def compute_stats(db: AsyncSession, filters: FeedbackFilter) -> FeedbackStats:
    conditions = filters.conditions()
    avg_rating = func.avg(cast(Feedback.rating, Float))

    overall_row = (
        await db.execute(
            select(
                func.count(Feedback.id).label("total_feedback"),
                avg_rating.label("avg_rating"),
                func.min(Feedback.rating).label("min_rating"),
                func.max(Feedback.rating).label("max_rating"),
                func.count(
                    case((Feedback.rating <= NEGATIVE_RATING_THRESHOLD, 1))
                ).label("negative_feedback"),
                func.count(distinct(Feedback.meal_date)).label("days_covered"),
            ).where(*conditions)
        )
    ).one()

    overall = OverallStats(
        total_feedback=int(overall_row.total_feedback or 0),
        avg_rating=_avg_or_none(overall_row.avg_rating),
        min_rating=overall_row.min_rating,
        max_rating=overall_row.max_rating,
        negative_feedback=int(overall_row.negative_feedback or 0),
        days_covered=int(overall_row.days_covered or 0),
    )

    meal_rows = (
        await db.execute(
            select(
                Feedback.meal_type,
                func.count(Feedback.id).label("feedback_count"),
                avg_rating.label("avg_rating"),
            )
            .where(*conditions)
            .group_by(Feedback.meal_type)
        )
    ).all()

    # Native enums sort by declaration order, so order by name here
    by_meal_type = [
        MealTypeStats(
            meal_type=row.meal_type,
            count=int(row.feedback_count),
            avg_rating=_avg_or_none(row.avg_rating),
        )
        for row in sorted(meal_rows, key=lambda r: r.meal_type)
    ]
    return FeedbackStats(overall=overall, by_meal_type=by_meal_type)
