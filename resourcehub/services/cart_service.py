"""Shopping cart.

``Cart`` never caches totals: ``item_count`` and ``total`` are sums over the
items of the last ``load()``, and every mutation ends with a reload.
"""

import logging
from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from resourcehub.core.auth import Actor
from resourcehub.core.exceptions import NotFoundError, UnauthorizedError, ValidationError
from resourcehub.models.cart import CartItem
from resourcehub.services import order_service

logger = logging.getLogger(__name__)


async def fetch_items(db: AsyncSession, user_id: str) -> list[CartItem]:
    result = await db.execute(
        select(CartItem).where(CartItem.user_id == user_id).order_by(CartItem.created_at, CartItem.id)
    )
    return list(result.scalars().all())


async def add_item(db: AsyncSession, actor: Actor, resource_id: str, quantity: int = 1) -> CartItem:
    """Put a resource in the cart, snapshotting its current price.

    Digital resources are bought once, so any quantity other than 1 is
    rejected and adding a resource that is already in the cart leaves it
    unchanged.
    """
    if quantity != 1:
        raise ValidationError({"quantity": "Resources are sold one licence at a time"})
    resource = await order_service.get_purchasable_resource(db, actor, resource_id)

    existing = (await db.execute(
        select(CartItem).where(CartItem.user_id == actor.id, CartItem.resource_id == resource_id)
    )).scalar_one_or_none()
    if existing is not None:
        return existing

    item = CartItem(
        user_id=actor.id,
        resource_id=resource.id,
        quantity=1,
        price_at_time=resource.price,
    )
    db.add(item)
    await db.commit()
    await db.refresh(item)
    logger.info("Resource %s added to cart of %s", resource_id, actor.id)
    return item


async def remove_item(db: AsyncSession, actor: Actor, item_id: str) -> None:
    item = await db.get(CartItem, item_id)
    if item is None or item.user_id != actor.id:
        raise NotFoundError("CartItem", item_id)
    await db.delete(item)
    await db.commit()


async def clear_items(db: AsyncSession, actor: Actor) -> None:
    await db.execute(delete(CartItem).where(CartItem.user_id == actor.id))
    await db.commit()


class Cart:
    """A buyer's cart bound to one session."""

    def __init__(self, db: AsyncSession, actor: Actor | None):
        self._db = db
        self._actor = actor
        self._items: tuple[CartItem, ...] = ()

    @property
    def items(self) -> tuple[CartItem, ...]:
        return self._items

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self._items)

    @property
    def total(self) -> Decimal:
        return sum((item.subtotal for item in self._items), Decimal("0.00"))

    def _require_actor(self) -> Actor:
        if self._actor is None:
            raise UnauthorizedError("Sign in to use the cart")
        return self._actor

    async def load(self) -> "Cart":
        actor = self._require_actor()
        self._items = tuple(await fetch_items(self._db, actor.id))
        return self

    async def add(self, resource_id: str, quantity: int = 1) -> "Cart":
        await add_item(self._db, self._require_actor(), resource_id, quantity)
        return await self.load()

    async def remove(self, item_id: str) -> "Cart":
        await remove_item(self._db, self._require_actor(), item_id)
        return await self.load()

    async def clear(self) -> "Cart":
        await clear_items(self._db, self._require_actor())
        return await self.load()
