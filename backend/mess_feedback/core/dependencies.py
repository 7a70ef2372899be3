"""
Shared FastAPI dependencies: DB session and the access guard.

Usage:

    @router.get("/mine")
    async def mine(claims: TokenClaims = Depends(get_current_claims)): ...

    @router.get("/admin-only")
    async def admin_only(claims: TokenClaims = Depends(require_admin)): ...
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from mess_feedback.core.auth import verify_access_token
from mess_feedback.core.exceptions import ForbiddenException, UnauthorizedException
from mess_feedback.database import get_db
from mess_feedback.schemas.user import TokenClaims

__all__ = ["get_db", "get_current_claims", "require_admin"]

# auto_error=False so a missing header becomes our 401 instead of FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_claims(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> TokenClaims:
    """
    Require a valid bearer access token.

    Raises:
        UnauthorizedException (401): no bearer token on the request.
        InvalidTokenException (403): bad signature, expired, or wrong token type.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedException()

    claims = verify_access_token(credentials.credentials)
    request.state.claims = claims
    return claims


async def require_admin(claims: TokenClaims = Depends(get_current_claims)) -> TokenClaims:
    """Require the authenticated caller to hold the admin role."""
    if not claims.is_admin:
        raise ForbiddenException("Admin access required")
    return claims
