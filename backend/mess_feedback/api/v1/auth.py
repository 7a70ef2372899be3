"""
Auth API endpoints: register, login, me.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from mess_feedback.core.dependencies import get_current_claims, get_db
from mess_feedback.schemas.user import (
    LoginResponse,
    MeResponse,
    RegisterResponse,
    TokenClaims,
    UserCreate,
    UserLogin,
    UserOut,
)
from mess_feedback.services import auth_service

router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a new user account."""
    user = await auth_service.register_user(db, payload)
    return RegisterResponse(user=UserOut.model_validate(user))


@router.post("/login", response_model=LoginResponse)
async def login(payload: UserLogin, db: AsyncSession = Depends(get_db)):
    """Authenticate and receive JWT tokens."""
    user, tokens = await auth_service.authenticate_user(db, payload.username, payload.password)
    return LoginResponse(user=UserOut.model_validate(user), tokens=tokens)


@router.get("/me", response_model=MeResponse)
async def me(
    claims: TokenClaims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
):
    """Get the current authenticated user's profile."""
    user = await auth_service.get_profile(db, claims)
    return MeResponse(user=UserOut.model_validate(user))
