"""FastAPI authentication dependency for JWT-based auth.

Tokens are verified only. The user id is the token's 'sub' claim; there is
no local user table to check against.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from loguru import logger

from liftcoach.core.auth_jwt import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


def _get_auth_token(request: Request, token: str | None) -> str | None:
    """Extract auth token from either Authorization header or cookie.

    - Mobile: Token in Authorization header (Bearer token)
    - Web: Token in cookie (session)
    """
    if token:
        return token
    return request.cookies.get("session") or None


def get_current_user_id(request: Request, token: str | None = Depends(oauth2_scheme)) -> str:
    """FastAPI dependency to get current authenticated user ID from JWT token.

    Args:
        request: FastAPI request object (for logging)
        token: JWT token from the Authorization header, if any

    Returns:
        User ID (string) from token

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired
    """
    auth_token = _get_auth_token(request, token)
    if not auth_token:
        logger.warning(
            f"Auth failed: Missing authentication token. Path: {request.url.path}, Method: {request.method}"
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header or a session cookie.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return decode_access_token(auth_token)
    except ValueError as e:
        logger.warning(f"Auth failed: {e}, Path: {request.url.path}, Method: {request.method}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def get_optional_user_id(request: Request, token: str | None = Depends(oauth2_scheme)) -> str | None:
    """FastAPI dependency to get current authenticated user ID (optional).

    Returns None instead of raising when the token is missing or invalid.
    Used by endpoints that also serve anonymous workouts.
    """
    auth_token = _get_auth_token(request, token)
    if not auth_token:
        return None

    try:
        return decode_access_token(auth_token)
    except ValueError:
        logger.debug(f"Optional auth: Invalid token for path={request.url.path}")
        return None
