"""Tests for revenue split and dashboard statistics."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from resourcehub.config import settings
from resourcehub.core.auth import Actor
from resourcehub.core.exceptions import ValidationError
from resourcehub.models.order import OrderStatus
from resourcehub.models.profile import UserRole
from resourcehub.models.resource import ResourceStatus
from resourcehub.services import analytics_service, order_service


def _actor(profile) -> Actor:
    return Actor(id=profile.id, role=profile.role)


def test_default_split_is_eighty_twenty():
    split = analytics_service.split_revenue(Decimal("25.50"))
    assert split.platform == Decimal("5.10")
    assert split.seller == Decimal("20.40")


def test_split_always_sums_to_amount(monkeypatch):
    monkeypatch.setattr(settings, "platform_commission_pct", 0.15)
    for amount in ("0.01", "0.99", "9.99", "123.45"):
        split = analytics_service.split_revenue(Decimal(amount))
        assert split.seller + split.platform == Decimal(amount)


async def test_seller_stats(db: AsyncSession, make_user, make_resource):
    seller, _ = await make_user(UserRole.SELLER)
    buyer, _ = await make_user()
    first = await make_resource(seller, title="First Item", price=10.00)
    second = await make_resource(seller, title="Second Item", price=15.50)
    await make_resource(seller, title="Draft Item", status=ResourceStatus.DRAFT)
    await order_service.create_order(db, _actor(buyer), first.id)
    await order_service.create_order(db, _actor(buyer), second.id)

    stats = await analytics_service.get_seller_stats(db, _actor(seller), "30d")

    assert stats["total_revenue"] == 25.50
    assert stats["seller_earnings"] == 20.40
    assert stats["total_sales"] == 2
    assert stats["total_products"] == 3
    assert stats["active_products"] == 2
    assert stats["total_downloads"] == 2
    assert stats["revenue_change_pct"] == 100.0


async def test_cancelled_orders_do_not_count(db: AsyncSession, make_user, make_resource):
    seller, _ = await make_user(UserRole.SELLER)
    buyer, _ = await make_user()
    resource = await make_resource(seller)
    order = await order_service.create_order(db, _actor(buyer), resource.id)
    await order_service.cancel_order(db, _actor(buyer), order.id)

    stats = await analytics_service.get_seller_stats(db, _actor(seller), "7d")
    assert stats["total_sales"] == 0
    assert stats["total_revenue"] == 0


async def test_previous_period_comparison(db: AsyncSession, make_user, make_resource):
    seller, _ = await make_user(UserRole.SELLER)
    buyer, _ = await make_user()
    old = await make_resource(seller, title="Old Sale", price=20.00)
    new = await make_resource(seller, title="New Sale", price=10.00)
    old_order = await order_service.create_order(db, _actor(buyer), old.id)
    old_order.created_at = datetime.now(timezone.utc) - timedelta(days=10)
    await db.commit()
    await order_service.create_order(db, _actor(buyer), new.id)

    stats = await analytics_service.get_seller_stats(db, _actor(seller), "7d")
    assert stats["total_revenue"] == 10.00
    assert stats["revenue_change_pct"] == -50.0
    assert stats["sales_change_pct"] == 0.0


async def test_unknown_period(db: AsyncSession, make_user):
    seller, _ = await make_user(UserRole.SELLER)
    with pytest.raises(ValidationError):
        await analytics_service.get_seller_stats(db, _actor(seller), "2w")


async def test_platform_stats(db: AsyncSession, make_user, make_resource):
    seller, _ = await make_user(UserRole.SELLER)
    buyer, _ = await make_user()
    await make_user(UserRole.ADMIN)
    resource = await make_resource(seller, price=50.00)
    await make_resource(seller, title="Pending Item", status=ResourceStatus.PENDING)
    order = await order_service.create_order(db, _actor(buyer), resource.id)
    assert order.status == OrderStatus.COMPLETED

    stats = await analytics_service.get_platform_stats(db)

    assert stats["revenue"]["total"] == 50.0
    assert stats["revenue"]["monthly"] == 50.0
    assert stats["revenue"]["platform_total"] == 10.0
    assert stats["revenue"]["sellers_total"] == 40.0
    assert stats["orders"] == {"total": 1, "monthly": 1, "pending": 0, "delivered": 0}
    assert stats["products"] == {"total": 2, "approved": 1, "pending": 1}
    assert stats["users"] == {"total": 3, "sellers": 1, "admins": 1}


async def test_top_products_ranked_by_revenue(db: AsyncSession, make_user, make_resource):
    seller, _ = await make_user(UserRole.SELLER)
    rival, _ = await make_user(UserRole.SELLER)
    buyers = [(await make_user())[0] for _ in range(2)]
    bundle = await make_resource(seller, title="Job Bundle", price=10.00)
    garage = await make_resource(seller, title="Garage Script", price=25.00)
    refunded = await make_resource(seller, title="Refunded Item", price=5.00)
    elsewhere = await make_resource(rival, title="Rival Item", price=99.00)

    for buyer in buyers:
        await order_service.create_order(db, _actor(buyer), bundle.id)
    await order_service.create_order(db, _actor(buyers[0]), garage.id)
    await order_service.create_order(db, _actor(buyers[0]), elsewhere.id)
    cancelled = await order_service.create_order(db, _actor(buyers[1]), refunded.id)
    await order_service.cancel_order(db, _actor(buyers[1]), cancelled.id)

    top = await analytics_service.get_top_products(db, _actor(seller), "30d")

    assert [(p["rank"], p["title"], p["revenue"], p["sales"]) for p in top] == [
        (1, "Garage Script", 25.0, 1),
        (2, "Job Bundle", 20.0, 2),
    ]
    assert top[1]["downloads"] == 2
    assert top[0]["thumbnail_url"] == "https://cdn.example.com/mdt.png"

    assert len(await analytics_service.get_top_products(db, _actor(seller), "30d", limit=1)) == 1


def test_bucket_key():
    sunday = datetime(2026, 3, 15, 18, 30, tzinfo=timezone.utc)
    assert analytics_service.bucket_key(sunday, "day") == "2026-03-15"
    assert analytics_service.bucket_key(sunday, "week") == "2026-03-09"
    assert analytics_service.bucket_key(sunday, "month") == "2026-03"


async def test_revenue_chart_fills_empty_buckets(db: AsyncSession, make_user):
    seller, _ = await make_user(UserRole.SELLER)
    now = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)

    week = await analytics_service.get_revenue_chart(db, _actor(seller), "7d", now=now)
    assert week["granularity"] == "day"
    assert [p["date"] for p in week["points"]][0] == "2026-03-08"
    assert len(week["points"]) == 8
    assert all(p["revenue"] == 0 and p["sales"] == 0 for p in week["points"])

    quarter = await analytics_service.get_revenue_chart(db, _actor(seller), "90d", now=now)
    assert quarter["granularity"] == "week"
    assert quarter["points"][0]["date"] == "2025-12-15"
    assert quarter["points"][-1]["date"] == "2026-03-09"

    year = await analytics_service.get_revenue_chart(db, _actor(seller), "1y", now=now)
    assert year["granularity"] == "month"
    assert [p["date"] for p in year["points"]][::12] == ["2025-03", "2026-03"]
    assert len(year["points"]) == 13

    with pytest.raises(ValidationError):
        await analytics_service.get_revenue_chart(db, _actor(seller), "2w")


async def test_revenue_chart_places_sales_in_their_day(db: AsyncSession, make_user, make_resource):
    seller, _ = await make_user(UserRole.SELLER)
    buyer, _ = await make_user()
    kept = await make_resource(seller, title="Kept Sale", price=12.50)
    dropped = await make_resource(seller, title="Dropped Sale", price=30.00)
    await order_service.create_order(db, _actor(buyer), kept.id)
    order = await order_service.create_order(db, _actor(buyer), dropped.id)
    await order_service.cancel_order(db, _actor(buyer), order.id)

    chart = await analytics_service.get_revenue_chart(db, _actor(seller), "30d")

    assert len(chart["points"]) == 31
    today = chart["points"][-1]
    assert today["date"] == datetime.now(timezone.utc).date().isoformat()
    assert (today["revenue"], today["sales"]) == (12.5, 1)
    assert sum(p["sales"] for p in chart["points"]) == 1
