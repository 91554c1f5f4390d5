"""Access tokens for LiftCoach users.

The identity provider in front of the API signs HS256 tokens with the shared
``AUTH_SECRET_KEY``; the user id travels in ``sub`` and the issuer must be
``liftcoach-backend``. ``create_access_token`` mints the same tokens for the
developer CLI and the tests.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError
from loguru import logger

from liftcoach.config.settings import settings

ISSUER = "liftcoach-backend"


def create_access_token(user_id: str, expires_in: timedelta | None = None) -> str:
    """Sign a token for ``user_id``.

    ``expires_in`` defaults to ``AUTH_TOKEN_EXPIRE_DAYS``.
    """
    if not user_id:
        raise ValueError("user_id cannot be empty")

    issued_at = datetime.now(timezone.utc)
    lifetime = expires_in if expires_in is not None else timedelta(days=settings.auth_token_expire_days)
    claims = {"sub": str(user_id), "iss": ISSUER, "iat": issued_at, "exp": issued_at + lifetime}
    return jwt.encode(claims, settings.auth_secret_key, algorithm=settings.auth_algorithm)


def decode_access_token(token: str) -> str:
    """Verify signature, expiry and issuer, and return the user id.

    Raises:
        ValueError: "Token expired", "Invalid token" or "Token missing user ID"
    """
    try:
        claims = jwt.decode(token, settings.auth_secret_key, algorithms=[settings.auth_algorithm], issuer=ISSUER)
    except ExpiredSignatureError as e:
        logger.info("Rejected expired access token")
        raise ValueError("Token expired") from e
    except JWTError as e:
        logger.warning(f"Rejected access token: {e}")
        raise ValueError("Invalid token") from e

    user_id = claims.get("sub")
    if not user_id:
        raise ValueError("Token missing user ID")
    return str(user_id)
