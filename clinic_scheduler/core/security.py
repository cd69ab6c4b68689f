"""Bearer tokens identifying the user behind a request."""

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from jose import JWTError, jwt

from clinic_scheduler.config import settings
from clinic_scheduler.core.exceptions import UnauthorizedException

TOKEN_TYPE = "access"


def create_access_token(
    user_id: UUID | str,
    expires_delta: timedelta | None = None,
    **claims: Any,
) -> str:
    """
    Issue a signed access token whose subject is a user id.

    Args:
        user_id: User the token identifies
        expires_delta: Lifetime, defaults to ``ACCESS_TOKEN_EXPIRE_MINUTES``
        claims: Extra informational claims (email, role, ...)

    Returns:
        Encoded JWT token
    """
    issued_at = datetime.now(UTC)
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)

    payload = {
        **claims,
        "sub": str(user_id),
        "exp": issued_at + lifetime,
        "iat": issued_at,
        "type": TOKEN_TYPE,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Verified payload of an access token, or None if it is invalid or expired."""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None

    if payload.get("type") != TOKEN_TYPE:
        return None
    return payload


def token_subject(token: str) -> UUID:
    """
    Resolve the user id a token was issued for.

    Raises:
        UnauthorizedException: If the token is invalid or its subject is not a user id
    """
    payload = decode_access_token(token)
    if payload is None:
        raise UnauthorizedException("Could not validate credentials")

    subject = payload.get("sub")
    if not isinstance(subject, str):
        raise UnauthorizedException("Could not validate credentials")

    try:
        return UUID(subject)
    except ValueError:
        raise UnauthorizedException("Invalid user ID format")
