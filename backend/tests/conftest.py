"""
Shared test fixtures: async SQLite DB, FastAPI test client, auth helpers.

Each test gets its own SQLite file (via ``tmp_path``) so tests are fast,
isolated, and don't require PostgreSQL.
"""

from __future__ import annotations

from datetime import date
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession

# ── Patch settings BEFORE any app imports ────────────────
import mess_feedback.config as _cfg

_cfg.settings.BCRYPT_ROUNDS = 4
_cfg.settings.SEED_DEFAULT_ADMIN = False
_cfg.settings.DEBUG = False

from mess_feedback.core.security import hash_password        # noqa: E402
from mess_feedback.database import Database                  # noqa: E402
from mess_feedback.main import create_app                    # noqa: E402
from mess_feedback.models.feedback import Feedback           # noqa: E402
from mess_feedback.models.role import RoleId                 # noqa: E402
from mess_feedback.services import user_store                # noqa: E402
from mess_feedback.services.seed_service import seed_roles   # noqa: E402


def _set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign keys for SQLite."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# ── Database lifecycle ──────────────────────────────────

@pytest_asyncio.fixture()
async def database(tmp_path) -> AsyncGenerator[Database, None]:
    """A connected storage client on a fresh SQLite file with roles seeded."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'test_mess_feedback.db'}")
    db.connect()
    event.listen(db.engine.sync_engine, "connect", _set_sqlite_pragma)
    await db.create_all()
    async with db.session() as session:
        await seed_roles(session)
    yield db
    await db.dispose()


@pytest_asyncio.fixture()
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Provide a DB session for direct service-level tests."""
    async with database.session() as session:
        yield session


# ── HTTP client fixture ─────────────────────────────────

@pytest_asyncio.fixture()
async def app_client(database: Database) -> AsyncGenerator[AsyncClient, None]:
    """
    Provide an ``httpx.AsyncClient`` wired to a FastAPI app whose storage
    client is the per-test SQLite database.
    """
    app = create_app(database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        follow_redirects=True,
    ) as client:
        yield client


# ── Auth helper fixtures ────────────────────────────────

TEST_USER = {
    "username": "testuser",
    "email": "test@example.com",
    "password": "testpass123",
}

ADMIN_USER = {
    "username": "admin",
    "email": "admin@example.com",
    "password": "adminpass123",
}


async def login(client: AsyncClient, username: str, password: str) -> dict:
    resp = await client.post("/api/v1/auth/login", json={
        "username": username,
        "password": password,
    })
    assert resp.status_code == 200, resp.text
    return resp.json()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def login_as(app_client: AsyncClient):
    """Log in with given credentials; returns the full login response body."""

    async def _login(username: str, password: str) -> dict:
        return await login(app_client, username, password)

    return _login


@pytest_asyncio.fixture()
async def registered_user(app_client: AsyncClient) -> dict:
    """Register a test user and return the user data + credentials."""
    resp = await app_client.post("/api/v1/auth/register", json=TEST_USER)
    assert resp.status_code == 201, resp.text
    return {**resp.json()["user"], "password": TEST_USER["password"]}


@pytest_asyncio.fixture()
async def auth_tokens(app_client: AsyncClient, registered_user: dict) -> dict:
    """Login and return both access + refresh tokens."""
    data = await login(app_client, TEST_USER["username"], TEST_USER["password"])
    return data["tokens"]


@pytest_asyncio.fixture()
async def auth_headers(auth_tokens: dict) -> dict[str, str]:
    """Return Authorization headers for authenticated requests."""
    return bearer(auth_tokens["access_token"])


@pytest_asyncio.fixture()
async def admin_user(db_session: AsyncSession):
    """Insert an admin account directly (admins cannot self-register)."""
    return await user_store.create_user(
        db_session,
        username=ADMIN_USER["username"],
        email=ADMIN_USER["email"],
        password_hash=hash_password(ADMIN_USER["password"]),
        role_id=RoleId.ADMIN,
    )


@pytest_asyncio.fixture()
async def admin_headers(app_client: AsyncClient, admin_user) -> dict[str, str]:
    data = await login(app_client, ADMIN_USER["username"], ADMIN_USER["password"])
    return bearer(data["tokens"]["access_token"])


@pytest_asyncio.fixture()
async def add_feedback(db_session: AsyncSession):
    """Factory inserting feedback rows with an explicit meal date."""

    async def _add(
        rating: int,
        meal_type: str = "lunch",
        meal_date: date = date(2025, 3, 10),
        user_id: int | None = None,
        status: str = "pending",
        comment: str | None = None,
    ) -> Feedback:
        feedback = Feedback(
            user_id=user_id,
            rating=rating,
            meal_type=meal_type,
            meal_date=meal_date,
            status=status,
            comment=comment,
            is_anonymous=user_id is None,
        )
        db_session.add(feedback)
        await db_session.commit()
        await db_session.refresh(feedback)
        return feedback

    return _add
