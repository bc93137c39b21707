"""In-app notifications for buyers, sellers and admins.

``notify`` only stages the row on the session; it is committed together with
the state change that triggered it.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from resourcehub.core.auth import Actor
from resourcehub.core.exceptions import NotFoundError
from resourcehub.models.notification import Notification

logger = logging.getLogger(__name__)


def notify(
    db: AsyncSession,
    user_id: str,
    type: str,
    title: str,
    message: str,
    order_id: str | None = None,
    resource_id: str | None = None,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        order_id=order_id,
        resource_id=resource_id,
    )
    db.add(notification)
    logger.debug("Queued %s notification for %s", type, user_id)
    return notification


async def list_notifications(
    db: AsyncSession, actor: Actor, unread_only: bool = False, limit: int = 50,
) -> tuple[list[Notification], int]:
    """Return the newest notifications and the unread count."""
    query = select(Notification).where(Notification.user_id == actor.id)
    if unread_only:
        query = query.where(Notification.is_read.is_(False))
    query = query.order_by(Notification.created_at.desc()).limit(limit)
    notifications = list((await db.execute(query)).scalars().all())

    unread = (await db.execute(
        select(func.count(Notification.id)).where(
            Notification.user_id == actor.id, Notification.is_read.is_(False),
        )
    )).scalar() or 0
    return notifications, unread


async def _get_own_notification(db: AsyncSession, actor: Actor, notification_id: str) -> Notification:
    notification = await db.get(Notification, notification_id)
    if notification is None or notification.user_id != actor.id:
        raise NotFoundError("Notification", notification_id)
    return notification


async def mark_read(db: AsyncSession, actor: Actor, notification_id: str) -> Notification:
    notification = await _get_own_notification(db, actor, notification_id)
    notification.is_read = True
    await db.commit()
    await db.refresh(notification)
    return notification


async def delete_notification(db: AsyncSession, actor: Actor, notification_id: str) -> None:
    notification = await _get_own_notification(db, actor, notification_id)
    await db.delete(notification)
    await db.commit()
