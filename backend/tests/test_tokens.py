"""
Token service tests: issue / verify round trip, expiry, tampering.
"""

from datetime import timedelta

import pytest
from jose import jwt

from mess_feedback.config import settings
from mess_feedback.core import auth
from mess_feedback.core.exceptions import ConfigurationError, InvalidTokenException
from mess_feedback.models.role import RoleId
from mess_feedback.models.user import User


@pytest.fixture()
def user() -> User:
    return User(id=42, username="alice", email="alice@x.com", role_id=int(RoleId.USER))


class TestIssueAndVerify:
    def test_round_trip(self, user):
        tokens = auth.issue_tokens(user)
        claims = auth.verify_access_token(tokens.access_token)
        assert claims.user_id == 42
        assert claims.username == "alice"
        assert claims.email == "alice@x.com"
        assert claims.role_id is RoleId.USER
        assert claims.is_admin is False

    def test_admin_claims(self, user):
        user.role_id = int(RoleId.ADMIN)
        claims = auth.verify_access_token(auth.create_access_token(user))
        assert claims.is_admin is True

    def test_default_expiries(self, user):
        tokens = auth.issue_tokens(user)
        access = auth.decode_token(tokens.access_token)
        refresh = auth.decode_token(tokens.refresh_token)
        assert access["exp"] - access["iat"] == settings.JWT_ACCESS_TOKEN_EXPIRE_DAYS * 86400
        assert refresh["exp"] - refresh["iat"] == settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS * 86400

    def test_refresh_token_carries_only_identity(self, user):
        payload = auth.decode_token(auth.create_refresh_token(user))
        assert payload["sub"] == "42"
        assert payload["type"] == "refresh"
        assert "username" not in payload
        assert "role_id" not in payload


class TestRejection:
    def test_expired_token(self, user):
        token = auth.create_access_token(user, expires_delta=timedelta(seconds=-1))
        with pytest.raises(InvalidTokenException):
            auth.verify_access_token(token)

    def test_wrong_signature(self, user):
        forged = jwt.encode(
            {"sub": "42", "username": "alice", "email": "alice@x.com",
             "role_id": int(RoleId.ADMIN), "type": "access"},
            "some-other-secret",
            algorithm=settings.JWT_ALGORITHM,
        )
        with pytest.raises(InvalidTokenException):
            auth.verify_access_token(forged)

    def test_garbage(self):
        with pytest.raises(InvalidTokenException):
            auth.verify_access_token("not-a-jwt")

    def test_refresh_token_is_not_an_access_token(self, user):
        with pytest.raises(InvalidTokenException):
            auth.verify_access_token(auth.create_refresh_token(user))

    def test_unknown_role_id(self, user):
        user.role_id = 99
        with pytest.raises(InvalidTokenException):
            auth.verify_access_token(auth.create_access_token(user))


class TestSigningKey:
    def test_default_secret_refused_in_production(self, monkeypatch):
        monkeypatch.setattr(settings, "ENVIRONMENT", "production")
        monkeypatch.setattr(settings, "JWT_SECRET_KEY", "dev-secret-key-change-in-production-please")
        with pytest.raises(ConfigurationError):
            auth.check_signing_key()

    def test_custom_secret_accepted_in_production(self, monkeypatch):
        monkeypatch.setattr(settings, "ENVIRONMENT", "production")
        monkeypatch.setattr(settings, "JWT_SECRET_KEY", "a-real-secret")
        auth.check_signing_key()
