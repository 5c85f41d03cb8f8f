"""
Auth module: JWT creation/validation and the access-guard FastAPI dependencies.

Tokens are stateless HS256 JWTs carrying ``userId``, ``email`` and ``role``.
The signing secret comes from settings, which are read once per process, so
rotating it requires a restart and invalidates every outstanding token.

The guard does not trust the claims for authorization: it re-loads the user by
id on every request, so a role change or a removed account takes effect
immediately instead of after the token expires.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional
from jose import jwt, JWTError
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import get_settings
from app.database import get_db
from app.exceptions import Forbidden, Unauthenticated
from app.models.user import User, Role

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class TokenClaims:
    """Identity attributes carried by a session token."""
    user_id: int
    email: str
    role: Role
    expires_at: int


def create_token(user: User, ttl_seconds: Optional[int] = None) -> str:
    """Create a signed JWT for the given User model instance."""
    settings = get_settings()
    if ttl_seconds is None:
        ttl_seconds = int(settings.jwt_expires_in.total_seconds())
    now = int(time.time())
    payload = {
        "userId": user.id,
        "email": user.email,
        "role": user.role.value,
        "iat": now,
        "exp": now + ttl_seconds,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> Optional[TokenClaims]:
    """Decode and validate a JWT. Returns None if the signature, structure or expiry is bad."""
    try:
        payload = jwt.decode(
            token,
            get_settings().jwt_secret_key,
            algorithms=[ALGORITHM],
            options={"require_exp": True},
        )
        return TokenClaims(
            user_id=int(payload["userId"]),
            email=str(payload["email"]),
            role=Role(payload["role"]),
            expires_at=int(payload["exp"]),
        )
    except (JWTError, KeyError, TypeError, ValueError):
        return None


def _bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith(BEARER_PREFIX):
        return None
    return auth_header[len(BEARER_PREFIX):].strip() or None


async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)) -> User:
    """
    FastAPI dependency. Extracts the JWT from the Authorization header, verifies
    it and resolves the referenced user. Raises Unauthenticated on any failure.
    """
    token = _bearer_token(request)
    if token is None:
        raise Unauthenticated("Access token required")

    claims = decode_token(token)
    if claims is None:
        raise Unauthenticated("Invalid or expired token")

    user = await db.get(User, claims.user_id)
    if user is None:
        logger.warning("Token for missing user id=%s rejected", claims.user_id)
        raise Unauthenticated("Invalid or expired token")

    request.state.user = user
    return user


def require_roles(*roles: Role):
    """
    Dependency factory for a role allow-list. Authentication always runs first
    because the returned dependency depends on get_current_user.
    """
    allowed = frozenset(roles)

    async def role_filter(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            logger.info("User %s with role %s denied; allowed: %s",
                        user.id, user.role.value, sorted(r.value for r in allowed))
            raise Forbidden("Insufficient permissions")
        return user

    return role_filter
