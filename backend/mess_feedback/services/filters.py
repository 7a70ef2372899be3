"""
Composable feedback filters.

Each optional field maps to one bound-parameter SQLAlchemy predicate; the
predicates are AND-ed by ``Select.where(*conditions)``.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field
from sqlalchemy import ColumnElement

from mess_feedback.models.feedback import Feedback, FeedbackStatus, MealType


class FeedbackFilter(BaseModel):
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    meal_type: Optional[MealType] = None
    status: Optional[FeedbackStatus] = None

    def conditions(self) -> list[ColumnElement[bool]]:
        conds: list[ColumnElement[bool]] = []
        if self.date_from is not None:
            conds.append(Feedback.meal_date >= self.date_from)
        if self.date_to is not None:
            conds.append(Feedback.meal_date <= self.date_to)
        if self.rating is not None:
            conds.append(Feedback.rating == self.rating)
        if self.meal_type is not None:
            conds.append(Feedback.meal_type == self.meal_type.value)
        if self.status is not None:
            conds.append(Feedback.status == self.status.value)
        return conds
