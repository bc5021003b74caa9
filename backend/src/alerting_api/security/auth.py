"""Authentication utilities."""

from datetime import datetime, timedelta, timezone
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from alerting_api.config import get_settings
from alerting_api.exceptions import UnauthorizedError
from alerting_api.models.domain.ids import is_valid_id

DEFAULT_TOKEN_LIFETIME = timedelta(hours=1)


class Principal(BaseModel):
    """Authenticated caller."""

    user_id: str
    org_id: str | None = None


def create_access_token(
    user_id: str,
    org_id: str | None = None,
    expires_in: timedelta = DEFAULT_TOKEN_LIFETIME,
) -> str:
    """Create a JWT access token.

    Args:
        user_id: Platform user ID, stored as ``sub``
        org_id: Optional organization claim
        expires_in: Token lifetime

    Returns:
        JWT token string
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload = {"sub": user_id, "exp": now + expires_in, "iat": now}
    if org_id:
        payload["org"] = org_id
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token.

    Args:
        token: JWT token string

    Returns:
        Token payload

    Raises:
        UnauthorizedError: If token is invalid or expired
    """
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise UnauthorizedError("Invalid or expired token") from e


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(HTTPBearer(auto_error=False))] = None,
) -> Principal:
    """Get the authenticated principal from the bearer token.

    Raises:
        UnauthorizedError: If the request carries no valid token
    """
    if credentials is None:
        raise UnauthorizedError()

    payload = decode_token(credentials.credentials)
    user_id = payload.get("sub")
    if not is_valid_id(user_id):
        raise UnauthorizedError("Invalid token subject")
    org_id = payload.get("org")
    return Principal(user_id=user_id, org_id=org_id if is_valid_id(org_id) else None)
