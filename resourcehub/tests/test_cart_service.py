"""Tests for the Cart aggregator."""

from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from resourcehub.core.auth import Actor
from resourcehub.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from resourcehub.models.profile import UserRole
from resourcehub.models.resource import ResourceStatus
from resourcehub.services import order_service
from resourcehub.services.cart_service import Cart


def _actor(profile) -> Actor:
    return Actor(id=profile.id, role=profile.role)


async def test_totals_are_recomputed(db: AsyncSession, make_user, make_resource):
    seller, _ = await make_user(UserRole.SELLER)
    buyer, _ = await make_user()
    first = await make_resource(seller, title="First Item", price=10.00)
    second = await make_resource(seller, title="Second Item", price=15.50)

    cart = Cart(db, _actor(buyer))
    await cart.add(first.id)
    await cart.add(second.id)

    assert cart.item_count == 2
    assert cart.total == Decimal("25.50")

    first_item = next(item for item in cart.items if item.resource_id == first.id)
    await cart.remove(first_item.id)
    assert cart.item_count == 1
    assert cart.total == Decimal("15.50")


async def test_quantity_is_always_one(db: AsyncSession, make_user, make_resource):
    seller, _ = await make_user(UserRole.SELLER)
    buyer, _ = await make_user()
    resource = await make_resource(seller)

    cart = Cart(db, _actor(buyer))
    with pytest.raises(ValidationError) as exc:
        await cart.add(resource.id, quantity=3)
    assert "quantity" in exc.value.errors
    await cart.load()
    assert cart.items == ()

    await cart.add(resource.id)
    await cart.add(resource.id)

    assert len(cart.items) == 1
    assert cart.items[0].quantity == 1
    assert cart.item_count == 1


async def test_price_is_snapshotted_server_side(db: AsyncSession, make_user, make_resource):
    seller, _ = await make_user(UserRole.SELLER)
    buyer, _ = await make_user()
    resource = await make_resource(seller, price=20.00)

    cart = await Cart(db, _actor(buyer)).add(resource.id)
    resource.price = Decimal("5.00")
    await db.commit()

    await cart.load()
    assert cart.items[0].price_at_time == Decimal("20.00")


async def test_anonymous_cart_is_unauthorized(db: AsyncSession):
    cart = Cart(db, None)
    with pytest.raises(UnauthorizedError):
        await cart.add("anything")
    with pytest.raises(UnauthorizedError):
        await cart.load()


async def test_rejects_own_unapproved_and_owned(db: AsyncSession, make_user, make_resource):
    seller, _ = await make_user(UserRole.SELLER)
    buyer, _ = await make_user()
    own = await make_resource(seller)
    pending = await make_resource(seller, title="Pending Item", status=ResourceStatus.PENDING)
    bought = await make_resource(seller, title="Bought Item")
    await order_service.create_order(db, _actor(buyer), bought.id)

    with pytest.raises(AuthorizationError):
        await Cart(db, _actor(seller)).add(own.id)
    with pytest.raises(NotFoundError):
        await Cart(db, _actor(buyer)).add(pending.id)
    with pytest.raises(ConflictError):
        await Cart(db, _actor(buyer)).add(bought.id)


async def test_carts_are_private(db: AsyncSession, make_user, make_resource):
    seller, _ = await make_user(UserRole.SELLER)
    alice, _ = await make_user()
    bob, _ = await make_user()
    resource = await make_resource(seller)

    alice_cart = await Cart(db, _actor(alice)).add(resource.id)
    with pytest.raises(NotFoundError):
        await Cart(db, _actor(bob)).remove(alice_cart.items[0].id)


async def test_clear(db: AsyncSession, make_user, make_resource):
    seller, _ = await make_user(UserRole.SELLER)
    buyer, _ = await make_user()
    first = await make_resource(seller, title="First Item")
    second = await make_resource(seller, title="Second Item")

    cart = Cart(db, _actor(buyer))
    await cart.add(first.id)
    await cart.add(second.id)
    await cart.clear()

    assert cart.items == ()
    assert cart.item_count == 0
    assert cart.total == Decimal("0")
