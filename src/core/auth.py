"""
Supabase JWT Authentication Module.

Verifies Supabase Auth access tokens for every API route.
All authenticated endpoints should use the `require_auth` dependency.

Usage:
    from core.auth import require_auth, SupabaseUser

    @router.post("/avatars")
    def create_avatar(user: SupabaseUser = Depends(require_auth)):
        user_id = user.id  # Verified user ID from JWT
"""

from dataclasses import dataclass
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config.settings import get_settings


security = HTTPBearer(
    scheme_name="Supabase JWT",
    description="Access token issued by Supabase Auth after login.",
    auto_error=False,
)


@dataclass
class SupabaseUser:
    """
    Authenticated user from Supabase JWT.

    Attributes:
        id: User's UUID (from 'sub' claim)
        email: User's email address
        role: Postgres role (usually 'authenticated')
        session_id: Current session UUID
        is_anonymous: True if anonymous auth
        user_metadata: User profile metadata (name, avatar, etc.)
    """
    id: str
    email: Optional[str] = None
    role: str = "authenticated"
    session_id: Optional[str] = None
    is_anonymous: bool = False
    user_metadata: Optional[dict] = None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_jwt(token: str) -> dict:
    """
    Verify and decode a Supabase JWT token.

    Raises:
        HTTPException: 401 if the token is invalid, expired, or malformed
    """
    settings = get_settings()
    if not settings.supabase_jwt_secret:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication is not configured",
        )

    try:
        return jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=["HS256"],
            audience="authenticated",
            options={
                "verify_exp": True,
                "verify_aud": True,
                "require": ["sub", "exp", "aud", "role"],
            },
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidAudienceError:
        raise _unauthorized("Invalid token audience")
    except jwt.InvalidTokenError as e:
        raise _unauthorized(f"Invalid token: {str(e)}")


def extract_user(payload: dict) -> SupabaseUser:
    """Build a SupabaseUser from a verified JWT payload."""
    return SupabaseUser(
        id=payload["sub"],
        email=payload.get("email"),
        role=payload.get("role", "authenticated"),
        session_id=payload.get("session_id"),
        is_anonymous=payload.get("is_anonymous", False),
        user_metadata=payload.get("user_metadata"),
    )


async def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> SupabaseUser:
    """
    FastAPI dependency that requires authentication.

    Raises 401 if no valid token is provided.
    """
    if not credentials or not credentials.credentials:
        raise _unauthorized("Authorization header required")

    payload = verify_jwt(credentials.credentials)
    return extract_user(payload)


def ensure_same_user(user: SupabaseUser, claimed_user_id: Optional[str]) -> str:
    """
    Check that a user id sent in a request body matches the token subject.

    Returns:
        The verified user id.

    Raises:
        HTTPException: 403 when the body names a different user
    """
    if claimed_user_id and claimed_user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="userId does not match the authenticated user",
        )
    return user.id
