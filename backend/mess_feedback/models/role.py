"""
Role model: the two permission classes, with stable ids.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import Integer, String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from mess_feedback.database import Base


class RoleId(enum.IntEnum):
    """Stable role identifiers. Rows in ``roles`` are seeded from this enum."""

    ADMIN = 1
    USER = 2

    @property
    def role_name(self) -> str:
        return self.name.lower()

    @property
    def is_admin(self) -> bool:
        return self is RoleId.ADMIN


ROLE_DESCRIPTIONS = {
    RoleId.ADMIN: "System Administrator",
    RoleId.USER: "Regular User",
}


class Role(Base):
    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    role_name: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
