"""
Idempotent reference data: the two roles, a default admin account and a
sample day of menu items.
"""

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mess_feedback.config import settings
from mess_feedback.core.security import hash_password
from mess_feedback.models.menu import MenuItem
from mess_feedback.models.role import ROLE_DESCRIPTIONS, Role, RoleId
from mess_feedback.models.user import User
from mess_feedback.services import user_store

log = logging.getLogger(__name__)

# meal_type -> [(dish_name, description)]
SAMPLE_MENU: dict[str, list[tuple[str, str]]] = {
    "breakfast": [
        ("Idli", "Steamed rice cakes with coconut chutney"),
        ("Sambar", "Lentil curry with vegetables"),
        ("Coconut Chutney", "Fresh coconut chutney"),
    ],
    "lunch": [
        ("Rice", "Steamed basmati rice"),
        ("Dal Tadka", "Yellow lentils with spices"),
        ("Mixed Vegetable Curry", "Seasonal vegetables in curry"),
    ],
    "dinner": [
        ("Chapati", "Fresh wheat flatbread"),
        ("Paneer Curry", "Cottage cheese in rich gravy"),
        ("Jeera Rice", "Cumin flavored rice"),
    ],
}


async def seed_roles(db: AsyncSession) -> None:
    """Insert any missing role rows with their stable ids."""
    result = await db.execute(select(Role.id))
    existing = set(result.scalars().all())
    for role_id in RoleId:
        if int(role_id) in existing:
            continue
        db.add(Role(
            id=int(role_id),
            role_name=role_id.role_name,
            description=ROLE_DESCRIPTIONS[role_id],
        ))
        log.info("Seeded role %s (id=%d)", role_id.role_name, role_id)
    await db.commit()


async def seed_admin(db: AsyncSession) -> None:
    """Create the default admin user if no admin exists."""
    result = await db.execute(
        select(User.id).where(User.role_id == int(RoleId.ADMIN)).limit(1)
    )
    if result.scalar_one_or_none() is not None:
        log.info("Admin user already exists; skipping seed")
        return

    await user_store.create_user(
        db,
        username=settings.DEFAULT_ADMIN_USERNAME,
        email=settings.DEFAULT_ADMIN_EMAIL,
        password_hash=hash_password(settings.DEFAULT_ADMIN_PASSWORD),
        role_id=RoleId.ADMIN,
    )
    log.warning(
        "Default admin user %r created; change its password",
        settings.DEFAULT_ADMIN_USERNAME,
    )


async def seed_menu(
    db: AsyncSession,
    meal_date: date,
    menu: dict[str, list[tuple[str, str]]],
) -> int:
    """Add the dishes in ``menu`` for ``meal_date``, skipping ones already listed.

    Returns the number of menu items inserted.
    """
    result = await db.execute(
        select(MenuItem.meal_type, MenuItem.dish_name).where(MenuItem.meal_date == meal_date)
    )
    existing = {(meal_type, dish_name) for meal_type, dish_name in result.all()}
    added = 0
    for meal_type, dishes in menu.items():
        for dish_name, description in dishes:
            if (meal_type, dish_name) in existing:
                continue
            db.add(MenuItem(
                meal_date=meal_date,
                meal_type=meal_type,
                dish_name=dish_name,
                description=description,
            ))
            added += 1
    await db.commit()
    if added:
        log.info("Seeded %d menu items for %s", added, meal_date.isoformat())
    return added
