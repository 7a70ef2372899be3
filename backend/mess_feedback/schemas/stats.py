"""
Pydantic schemas for the admin statistics endpoint.
"""

from typing import Optional

from pydantic import BaseModel


class OverallStats(BaseModel):
    """Dashboard summary over the filtered feedback set.

    ``avg_rating``, ``min_rating`` and ``max_rating`` are null when the set is
    empty.
    """
    total_feedback: int
    avg_rating: Optional[float] = None
    min_rating: Optional[int] = None
    max_rating: Optional[int] = None
    negative_feedback: int
    days_covered: int


class MealTypeStats(BaseModel):
    meal_type: str
    count: int
    avg_rating: Optional[float] = None


class FeedbackStats(BaseModel):
    overall: OverallStats
    by_meal_type: list[MealTypeStats]
