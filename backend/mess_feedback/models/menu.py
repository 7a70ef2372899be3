"""
Menu item model: dishes served for a given date and meal.

Read-only from the feedback side; used to label feedback rows with the dishes
they refer to.
"""

from datetime import date, datetime, timezone

from sqlalchemy import Date, DateTime, Enum as SAEnum, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from mess_feedback.database import Base
from mess_feedback.models.feedback import MEAL_TYPES


class MenuItem(Base):
    __tablename__ = "menu_items"
    __table_args__ = (
        UniqueConstraint("meal_date", "meal_type", "dish_name", name="uq_menu_item"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    meal_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    meal_type: Mapped[str] = mapped_column(
        SAEnum(*MEAL_TYPES, name="menu_meal_type_enum", create_constraint=True),
        nullable=False,
    )
    dish_name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(200), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
