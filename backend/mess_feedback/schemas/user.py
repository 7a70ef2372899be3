"""
Pydantic schemas for auth / user endpoints.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from mess_feedback.core.security import MAX_PASSWORD_BYTES, password_too_long
from mess_feedback.models.role import RoleId


# ── Auth / Registration ─────────────────────────────────

class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=MAX_PASSWORD_BYTES)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if password_too_long(value):
            raise ValueError(f"must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded")
        return value


class UserLogin(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class TokenClaims(BaseModel):
    """Verified payload of an access token."""

    user_id: int
    username: str
    email: str
    role_id: RoleId

    @property
    def is_admin(self) -> bool:
        return self.role_id.is_admin


# ── User responses ──────────────────────────────────────

class UserOut(BaseModel):
    id: int
    username: str
    email: str
    role_id: int
    role_name: str
    is_active: bool
    created_at: datetime
    last_login: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RegisterResponse(BaseModel):
    message: str = "User registered successfully"
    user: UserOut


class LoginResponse(BaseModel):
    message: str = "Login successful"
    user: UserOut
    tokens: TokenResponse


class MeResponse(BaseModel):
    user: UserOut
