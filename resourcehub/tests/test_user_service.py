"""Tests for the admin user directory, role changes and account removal."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from resourcehub.core.auth import Actor
from resourcehub.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from resourcehub.models.cart import CartItem
from resourcehub.models.notification import Notification
from resourcehub.models.order import Order
from resourcehub.models.profile import Profile, UserRole
from resourcehub.models.resource import Resource, ResourceImage
from resourcehub.models.seller_request import SellerRequest
from resourcehub.schemas.account import SellerRequestCreate
from resourcehub.services import order_service, seller_request_service, user_service
from resourcehub.services.cart_service import Cart


def _actor(profile) -> Actor:
    return Actor(id=profile.id, role=profile.role)


async def _count(db: AsyncSession, column, *conditions) -> int:
    return (await db.execute(select(func.count(column)).where(*conditions))).scalar()


# ---------------------------------------------------------------------------
# directory
# ---------------------------------------------------------------------------


async def test_list_users_search_and_role(db: AsyncSession, make_user):
    await make_user(username="police_dev")
    await make_user(UserRole.SELLER, username="policeman")
    await make_user(username="mechanic")
    await make_user(username="firexdev")

    found, total = await user_service.list_users(db, search="POLICE")
    assert total == 2
    assert {p.username for p in found} == {"police_dev", "policeman"}

    sellers, total = await user_service.list_users(db, search="police", role=UserRole.SELLER)
    assert total == 1 and sellers[0].username == "policeman"

    by_email, _ = await user_service.list_users(db, search="mechanic@example")
    assert [p.username for p in by_email] == ["mechanic"]

    # "_" is matched literally, not as a single-character wildcard
    literal, total = await user_service.list_users(db, search="e_dev")
    assert total == 1 and literal[0].username == "police_dev"


async def test_list_users_paginates(db: AsyncSession, make_user):
    for _ in range(5):
        await make_user()

    page, total = await user_service.list_users(db, page=2, page_size=2)
    assert total == 5
    assert len(page) == 2


async def test_user_overview(db: AsyncSession, make_user, make_resource):
    seller, _ = await make_user(UserRole.SELLER)
    buyer, _ = await make_user()
    resource = await make_resource(seller)
    await order_service.create_order(db, _actor(buyer), resource.id)

    profile, resources, orders = await user_service.get_user_overview(db, seller.id)
    assert profile.id == seller.id
    assert [r.id for r in resources] == [resource.id]
    assert orders == []

    _, resources, orders = await user_service.get_user_overview(db, buyer.id)
    assert resources == []
    assert [o.resource_id for o in orders] == [resource.id]

    with pytest.raises(NotFoundError):
        await user_service.get_user_overview(db, "missing")


# ---------------------------------------------------------------------------
# role changes
# ---------------------------------------------------------------------------


async def test_admin_changes_role_and_user_is_notified(db: AsyncSession, make_user):
    buyer, _ = await make_user()
    admin, _ = await make_user(UserRole.ADMIN)

    profile = await user_service.change_role(db, _actor(admin), buyer.id, UserRole.SELLER)
    assert profile.role == UserRole.SELLER

    notes = (await db.execute(
        select(Notification).where(Notification.user_id == buyer.id)
    )).scalars().all()
    assert [n.type for n in notes] == ["role_changed"]


async def test_role_change_guards(db: AsyncSession, make_user):
    buyer, _ = await make_user()
    seller, _ = await make_user(UserRole.SELLER)
    admin, _ = await make_user(UserRole.ADMIN)

    with pytest.raises(AuthorizationError):
        await user_service.change_role(db, _actor(seller), buyer.id, UserRole.ADMIN)
    with pytest.raises(ConflictError):
        await user_service.change_role(db, _actor(admin), admin.id, UserRole.BUYER)
    with pytest.raises(NotFoundError):
        await user_service.change_role(db, _actor(admin), "missing", UserRole.SELLER)


# ---------------------------------------------------------------------------
# account removal
# ---------------------------------------------------------------------------


async def test_buyer_deletion_removes_requests_cart_and_orders(db: AsyncSession, make_user, make_resource):
    seller, _ = await make_user(UserRole.SELLER)
    buyer, _ = await make_user()
    owned = await make_resource(seller, title="Owned Item")
    wanted = await make_resource(seller, title="Wanted Item")
    await order_service.create_order(db, _actor(buyer), owned.id)
    await Cart(db, _actor(buyer)).add(wanted.id)
    await seller_request_service.submit_seller_request(db, _actor(buyer), SellerRequestCreate(
        business_name="Night Shift", business_type="solo", motivation="I script EMS jobs.",
    ))

    await user_service.delete_account(db, _actor(buyer))

    assert await _count(db, Profile.id, Profile.id == buyer.id) == 0
    assert await _count(db, CartItem.id, CartItem.user_id == buyer.id) == 0
    assert await _count(db, SellerRequest.id, SellerRequest.user_id == buyer.id) == 0
    assert await _count(db, Order.id, Order.buyer_id == buyer.id) == 0
    # the seller keeps their catalogue
    assert await _count(db, Resource.id, Resource.author_id == seller.id) == 2


async def test_seller_deletion_removes_their_resources(db: AsyncSession, make_user, make_resource):
    seller, _ = await make_user(UserRole.SELLER)
    other, _ = await make_user(UserRole.SELLER)
    await make_resource(seller)
    await make_resource(other, title="Someone Else")

    await user_service.delete_account(db, _actor(seller))

    assert await _count(db, Resource.id, Resource.author_id == seller.id) == 0
    assert await _count(db, Resource.id) == 1
    assert await _count(db, ResourceImage.id) == 1


async def test_admin_cannot_self_delete_account(db: AsyncSession, make_user):
    admin, _ = await make_user(UserRole.ADMIN)
    with pytest.raises(AuthorizationError):
        await user_service.delete_account(db, _actor(admin))
    with pytest.raises(ConflictError):
        await user_service.delete_user(db, _actor(admin), admin.id)


async def test_admin_deletes_user(db: AsyncSession, make_user):
    buyer, _ = await make_user()
    other, _ = await make_user()
    admin, _ = await make_user(UserRole.ADMIN)

    with pytest.raises(AuthorizationError):
        await user_service.delete_user(db, _actor(other), buyer.id)

    await user_service.delete_user(db, _actor(admin), buyer.id)
    assert await _count(db, Profile.id, Profile.id == buyer.id) == 0

    with pytest.raises(NotFoundError):
        await user_service.delete_user(db, _actor(admin), buyer.id)
