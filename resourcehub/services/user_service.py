"""Account administration: user directory, role changes and account removal.

Removing a profile is a single DELETE; the ``ondelete="CASCADE"`` foreign keys
take the user's resources, seller requests, cart, orders and notifications
with it.
"""

import logging

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from resourcehub.core.auth import Actor
from resourcehub.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from resourcehub.models.order import Order
from resourcehub.models.profile import Profile, UserRole
from resourcehub.models.resource import Resource
from resourcehub.services import notification_service
from resourcehub.services.listing_service import escape_like

logger = logging.getLogger(__name__)


def _require_admin(actor: Actor) -> None:
    if not actor.is_admin:
        raise AuthorizationError("Admin access required")


async def get_profile(db: AsyncSession, user_id: str) -> Profile:
    profile = await db.get(Profile, user_id)
    if profile is None:
        raise NotFoundError("Profile", user_id)
    return profile


async def list_users(
    db: AsyncSession,
    search: str | None = None,
    role: UserRole | None = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[Profile], int]:
    """Newest accounts first; ``search`` matches username or email."""
    conditions = []
    if search and search.strip():
        pattern = f"%{escape_like(search.strip())}%"
        conditions.append(or_(
            Profile.username.ilike(pattern, escape="\\"),
            Profile.email.ilike(pattern, escape="\\"),
        ))
    if role is not None:
        conditions.append(Profile.role == role)

    total = (await db.execute(select(func.count(Profile.id)).where(*conditions))).scalar() or 0
    query = (
        select(Profile)
        .where(*conditions)
        .order_by(Profile.created_at.desc(), Profile.id)
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list((await db.execute(query)).scalars().all()), total


async def get_user_overview(
    db: AsyncSession, user_id: str,
) -> tuple[Profile, list[Resource], list[Order]]:
    """A profile with the resources it authored and the orders it placed."""
    profile = await get_profile(db, user_id)
    resources = (await db.execute(
        select(Resource).where(Resource.author_id == user_id).order_by(Resource.created_at.desc())
    )).scalars().all()
    orders = (await db.execute(
        select(Order).where(Order.buyer_id == user_id).order_by(Order.created_at.desc())
    )).scalars().all()
    return profile, list(resources), list(orders)


async def change_role(db: AsyncSession, actor: Actor, user_id: str, role: UserRole) -> Profile:
    _require_admin(actor)
    if user_id == actor.id:
        raise ConflictError("You cannot change your own role")
    profile = await get_profile(db, user_id)
    if profile.role == role:
        return profile

    previous = profile.role
    profile.role = role
    notification_service.notify(
        db,
        profile.id,
        "role_changed",
        "Account role updated",
        f"Your account role is now {role.value}.",
    )
    await db.commit()
    await db.refresh(profile)
    logger.info("Profile %s role %s -> %s by %s", profile.id, previous.value, role.value, actor.id)
    return profile


async def _remove_profile(db: AsyncSession, user_id: str) -> None:
    await db.execute(delete(Profile).where(Profile.id == user_id))
    await db.commit()


async def delete_account(db: AsyncSession, actor: Actor) -> None:
    """Self-service removal for buyers and sellers."""
    if actor.is_admin:
        raise AuthorizationError("Admin accounts can only be removed by another admin")
    await get_profile(db, actor.id)
    await _remove_profile(db, actor.id)
    logger.info("Profile %s deleted their account", actor.id)


async def delete_user(db: AsyncSession, actor: Actor, user_id: str) -> None:
    _require_admin(actor)
    if user_id == actor.id:
        raise ConflictError("You cannot delete your own admin account")
    await get_profile(db, user_id)
    await _remove_profile(db, user_id)
    logger.warning("Profile %s deleted by admin %s", user_id, actor.id)
