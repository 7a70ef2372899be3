"""
Import all models so Alembic and SQLAlchemy can discover them.
"""

from mess_feedback.models.role import Role, RoleId
from mess_feedback.models.user import User
from mess_feedback.models.menu import MenuItem
from mess_feedback.models.feedback import Feedback, FeedbackStatus, MealType

__all__ = [
    "Role",
    "RoleId",
    "User",
    "MenuItem",
    "Feedback",
    "FeedbackStatus",
    "MealType",
]
