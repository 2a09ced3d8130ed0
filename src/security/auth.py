"""Bearer-token actor resolution.

Access tokens are HS256 JWTs signed with JWT_SECRET; `sub` carries the
user UUID and `role` the UserRole. Issuing tokens is the auth service's
job — this module only turns an incoming token into an Actor.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.config import settings
from src.models.enums import UserRole

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Actor:
    """The authenticated user behind a request."""

    user_id: uuid.UUID
    role: UserRole = UserRole.USER


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_access_token(token: str) -> Actor:
    """Verify `token` and return its Actor.

    Raises HTTPException 401 for expired, tampered, or malformed tokens and
    503 when no signing secret is configured.
    """
    secret = settings.security.jwt_secret
    if not secret:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="JWT_SECRET not configured",
        )

    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[settings.security.jwt_algorithm],
            options={"require": ["sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Access token has expired") from None
    except jwt.InvalidTokenError:
        raise _unauthorized("Invalid access token") from None

    try:
        user_id = uuid.UUID(str(claims["sub"]))
        role = UserRole(claims.get("role", UserRole.USER.value))
    except ValueError:
        logger.warning("Rejected token with malformed claims: sub=%r", claims.get("sub"))
        raise _unauthorized("Invalid access token") from None

    return Actor(user_id=user_id, role=role)


async def get_optional_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),  # noqa: B008
) -> Actor | None:
    """FastAPI dependency — the Actor if a bearer token was sent, else None.

    No token means a system/unauthenticated action; a bad token is still 401.
    """
    if credentials is None:
        return None
    return decode_access_token(credentials.credentials)
