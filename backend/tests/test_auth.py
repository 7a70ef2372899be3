"""
Auth API tests: register, login, /me, deactivated accounts.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import delete, select, update

from mess_feedback.core.exceptions import ConfigurationError
from mess_feedback.models.role import Role, RoleId
from mess_feedback.models.user import User
from mess_feedback.schemas.user import UserCreate
from mess_feedback.services import auth_service


class TestRegister:
    """POST /api/v1/auth/register"""

    async def test_register_success(self, app_client: AsyncClient):
        resp = await app_client.post("/api/v1/auth/register", json={
            "username": "newuser",
            "email": "new@example.com",
            "password": "securepass123",
        })
        assert resp.status_code == 201
        user = resp.json()["user"]
        assert user["username"] == "newuser"
        assert user["email"] == "new@example.com"
        assert user["role_id"] == RoleId.USER
        assert user["role_name"] == "user"
        assert user["is_active"] is True
        assert user["last_login"] is None
        assert "id" in user

    async def test_register_never_returns_password(self, app_client: AsyncClient):
        resp = await app_client.post("/api/v1/auth/register", json={
            "username": "secretive",
            "email": "secretive@example.com",
            "password": "securepass123",
        })
        assert resp.status_code == 201
        assert "securepass123" not in resp.text
        assert "password" not in resp.json()["user"]
        assert "password_hash" not in resp.json()["user"]

    async def test_register_duplicate_username(self, app_client: AsyncClient, registered_user):
        resp = await app_client.post("/api/v1/auth/register", json={
            "username": "testuser",
            "email": "other@example.com",
            "password": "anotherpass123",
        })
        assert resp.status_code == 400
        assert resp.json()["error"] == "conflict"
        assert "already taken" in resp.json()["detail"].lower()

    async def test_register_duplicate_email(self, app_client: AsyncClient, registered_user):
        resp = await app_client.post("/api/v1/auth/register", json={
            "username": "otheruser",
            "email": "test@example.com",
            "password": "anotherpass123",
        })
        assert resp.status_code == 400
        assert resp.json()["error"] == "conflict"
        assert "already registered" in resp.json()["detail"].lower()

    async def test_register_missing_fields(self, app_client: AsyncClient):
        resp = await app_client.post("/api/v1/auth/register", json={"username": "lonely"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "invalid_input"

    async def test_register_invalid_email(self, app_client: AsyncClient):
        resp = await app_client.post("/api/v1/auth/register", json={
            "username": "baduser",
            "email": "not-an-email",
            "password": "securepass123",
        })
        assert resp.status_code == 400
        assert resp.json()["error"] == "invalid_input"

    async def test_register_stores_salted_hash(self, app_client: AsyncClient, db_session):
        for name in ("twin1", "twin2"):
            resp = await app_client.post("/api/v1/auth/register", json={
                "username": name,
                "email": f"{name}@example.com",
                "password": "samepass123",
            })
            assert resp.status_code == 201

        hashes = (await db_session.execute(
            select(User.password_hash).order_by(User.id)
        )).scalars().all()
        assert len(hashes) == 2
        assert all(h.startswith("$2") for h in hashes)
        assert "samepass123" not in hashes
        assert hashes[0] != hashes[1]

    @pytest.mark.parametrize("password", ["a" * 73, "a" * 100, "🍛" * 30])
    async def test_register_password_over_bcrypt_limit(self, app_client: AsyncClient, password):
        resp = await app_client.post("/api/v1/auth/register", json={
            "username": "longpass",
            "email": "longpass@example.com",
            "password": password,
        })
        assert resp.status_code == 400
        assert resp.json()["error"] == "invalid_input"
        assert resp.json()["detail"].startswith("password")

    async def test_register_password_at_bcrypt_limit(self, app_client: AsyncClient, login_as):
        password = "é" * 36  # 72 bytes
        resp = await app_client.post("/api/v1/auth/register", json={
            "username": "maxpass",
            "email": "maxpass@example.com",
            "password": password,
        })
        assert resp.status_code == 201
        assert (await login_as("maxpass", password))["user"]["username"] == "maxpass"

    async def test_register_without_user_role(self, db_session):
        await db_session.execute(delete(Role).where(Role.id == int(RoleId.USER)))
        await db_session.commit()

        with pytest.raises(ConfigurationError):
            await auth_service.register_user(db_session, UserCreate(
                username="orphan",
                email="orphan@example.com",
                password="orphanpass",
            ))


class TestLogin:
    """POST /api/v1/auth/login"""

    async def test_login_success(self, app_client: AsyncClient, registered_user):
        resp = await app_client.post("/api/v1/auth/login", json={
            "username": "testuser",
            "password": "testpass123",
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["user"]["username"] == "testuser"
        assert data["user"]["last_login"] is not None
        assert data["tokens"]["access_token"]
        assert data["tokens"]["refresh_token"]
        assert data["tokens"]["token_type"] == "bearer"

    async def test_wrong_password_and_unknown_user_are_indistinguishable(
        self, app_client: AsyncClient, registered_user
    ):
        wrong_pw = await app_client.post("/api/v1/auth/login", json={
            "username": "testuser",
            "password": "wrongpassword",
        })
        unknown = await app_client.post("/api/v1/auth/login", json={
            "username": "ghost",
            "password": "doesntmatter",
        })
        assert wrong_pw.status_code == unknown.status_code == 401
        assert wrong_pw.json() == unknown.json()
        assert wrong_pw.json()["error"] == "invalid_credentials"

    async def test_login_with_longer_password_sharing_prefix(
        self, app_client: AsyncClient
    ):
        password = "p" * 72
        resp = await app_client.post("/api/v1/auth/register", json={
            "username": "prefixed",
            "email": "prefixed@example.com",
            "password": password,
        })
        assert resp.status_code == 201

        resp = await app_client.post("/api/v1/auth/login", json={
            "username": "prefixed",
            "password": password + "extra",
        })
        assert resp.status_code == 401
        assert resp.json()["error"] == "invalid_credentials"

    async def test_login_missing_password(self, app_client: AsyncClient):
        resp = await app_client.post("/api/v1/auth/login", json={"username": "testuser"})
        assert resp.status_code == 400

    async def test_deactivated_user_cannot_login(
        self, app_client: AsyncClient, registered_user, db_session
    ):
        await db_session.execute(
            update(User).where(User.id == registered_user["id"]).values(is_active=False)
        )
        await db_session.commit()

        resp = await app_client.post("/api/v1/auth/login", json={
            "username": "testuser",
            "password": "testpass123",
        })
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid credentials"


class TestMe:
    """GET /api/v1/auth/me"""

    async def test_me_authenticated(self, app_client: AsyncClient, auth_headers):
        resp = await app_client.get("/api/v1/auth/me", headers=auth_headers)
        assert resp.status_code == 200
        user = resp.json()["user"]
        assert user["username"] == "testuser"
        assert user["email"] == "test@example.com"
        assert user["is_active"] is True

    async def test_me_no_token(self, app_client: AsyncClient):
        resp = await app_client.get("/api/v1/auth/me")
        assert resp.status_code == 401
        assert resp.json()["error"] == "unauthorized"

    async def test_me_invalid_token(self, app_client: AsyncClient):
        resp = await app_client.get(
            "/api/v1/auth/me",
            headers={"Authorization": "Bearer invalid.token.here"},
        )
        assert resp.status_code == 403
        assert resp.json()["error"] == "invalid_token"

    async def test_me_with_refresh_token_is_rejected(self, app_client: AsyncClient, auth_tokens):
        resp = await app_client.get(
            "/api/v1/auth/me",
            headers={"Authorization": f"Bearer {auth_tokens['refresh_token']}"},
        )
        assert resp.status_code == 403

    async def test_me_reflects_current_state_not_claims(
        self, app_client: AsyncClient, auth_headers, registered_user, db_session
    ):
        """A deactivated user's token still verifies, but the profile is gone."""
        await db_session.execute(
            update(User).where(User.id == registered_user["id"]).values(is_active=False)
        )
        await db_session.commit()

        resp = await app_client.get("/api/v1/auth/me", headers=auth_headers)
        assert resp.status_code == 404
        assert resp.json()["error"] == "not_found"


class TestTokenPersistence:
    async def test_token_works_across_multiple_requests(
        self, app_client: AsyncClient, auth_headers
    ):
        for _ in range(3):
            resp = await app_client.get("/api/v1/auth/me", headers=auth_headers)
            assert resp.status_code == 200
