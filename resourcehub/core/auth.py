"""Bearer-token authentication and the request actor.

Every service call takes an explicit :class:`Actor`; the FastAPI dependencies
below are the only place the actor is derived from request state.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
from fastapi import Depends, Header
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from resourcehub.config import settings
from resourcehub.core.exceptions import AuthorizationError, UnauthorizedError
from resourcehub.database import get_db
from resourcehub.models.profile import Profile, UserRole


@dataclass(frozen=True)
class Actor:
    id: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def can_sell(self) -> bool:
        return self.role in (UserRole.SELLER, UserRole.ADMIN)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against a bcrypt hash."""
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))


def create_access_token(user_id: str, email: str) -> str:
    """Create a JWT for a profile. The role is read from the database per request."""
    expire = datetime.now(timezone.utc) + timedelta(hours=settings.jwt_expire_hours)
    payload = {
        "sub": user_id,
        "email": email,
        "type": "user",
        "jti": str(uuid.uuid4()),
        "exp": expire,
        "iat": datetime.now(timezone.utc),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token. Returns the payload."""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise UnauthorizedError("Invalid or expired token")
    if payload.get("sub") is None:
        raise UnauthorizedError("Token missing subject")
    if payload.get("type") != "user":
        raise UnauthorizedError("Not a user token")
    return payload


def _bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise UnauthorizedError("Missing Authorization header")
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise UnauthorizedError("Authorization header must be: Bearer <token>")
    return parts[1]


async def get_current_actor(
    authorization: str | None = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> Actor:
    """FastAPI dependency resolving the bearer token to an ``Actor``."""
    payload = decode_token(_bearer_token(authorization))
    profile = await db.get(Profile, payload["sub"])
    if profile is None:
        raise UnauthorizedError("Account no longer exists")
    return Actor(id=profile.id, role=profile.role)


async def optional_actor(
    authorization: str | None = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> Actor | None:
    """Best-effort actor for endpoints that also serve anonymous visitors."""
    if not authorization:
        return None
    try:
        return await get_current_actor(authorization, db)
    except UnauthorizedError:
        return None


async def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    if not actor.is_admin:
        raise AuthorizationError("Admin access required")
    return actor


async def require_seller(actor: Actor = Depends(get_current_actor)) -> Actor:
    if not actor.can_sell:
        raise AuthorizationError("Seller access required")
    return actor
