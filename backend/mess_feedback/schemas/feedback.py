"""
Pydantic schemas for Feedback endpoints.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


# ── Requests ────────────────────────────────────────────
# rating / meal_type / status are range-checked by the feedback service so
# the error carries a domain message rather than a generic type error.

class FeedbackCreate(BaseModel):
    rating: int
    comment: Optional[str] = Field(default=None, max_length=500)
    meal_type: str
    is_anonymous: bool = False


class StatusUpdate(BaseModel):
    status: str


# ── Responses ───────────────────────────────────────────

class FeedbackOut(BaseModel):
    id: int
    rating: int
    comment: Optional[str] = None
    is_anonymous: bool
    status: str
    meal_date: date
    meal_type: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    dish_names: Optional[str] = None

    model_config = {"from_attributes": True}


class AdminFeedbackOut(FeedbackOut):
    """Feedback row as seen by admins: submitter identity unless anonymous."""
    user_id: Optional[int] = None
    username: Optional[str] = None
    email: Optional[str] = None


class Pagination(BaseModel):
    limit: int
    offset: int
    count: int


class SubmitFeedbackResponse(BaseModel):
    message: str = "Feedback submitted successfully"
    feedback: FeedbackOut


class FeedbackHistoryResponse(BaseModel):
    feedback: list[FeedbackOut]
    pagination: Pagination


class AdminFeedbackListResponse(BaseModel):
    feedback: list[AdminFeedbackOut]
    pagination: Pagination


class MessageResponse(BaseModel):
    message: str
