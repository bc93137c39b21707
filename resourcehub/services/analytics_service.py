"""Analytics service: revenue split, seller dashboard and platform totals."""

from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from resourcehub.config import settings
from resourcehub.core.auth import Actor
from resourcehub.core.exceptions import ValidationError
from resourcehub.models.order import Order, OrderStatus
from resourcehub.models.profile import Profile, UserRole
from resourcehub.models.resource import Resource, ResourceStatus

PERIODS = {
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "90d": timedelta(days=90),
    "1y": timedelta(days=365),
}
_PAID = (OrderStatus.COMPLETED, OrderStatus.DELIVERED)
_CENT = Decimal("0.01")


class RevenueSplit(NamedTuple):
    seller: Decimal
    platform: Decimal


def split_revenue(amount: Decimal | float) -> RevenueSplit:
    """Divide a sale between seller and platform using the configured commission."""
    total = Decimal(str(amount)).quantize(_CENT, rounding=ROUND_HALF_UP)
    platform = (total * Decimal(str(settings.platform_commission_pct))).quantize(_CENT, rounding=ROUND_HALF_UP)
    return RevenueSplit(seller=total - platform, platform=platform)


def _change_pct(current: Decimal | int, previous: Decimal | int) -> float:
    if not previous:
        return 100.0 if current else 0.0
    return round(float((Decimal(current) - Decimal(previous)) / Decimal(previous) * 100), 1)


# day buckets up to a month, ISO weeks (Monday start) for a quarter, months for a year
CHART_GRANULARITY = {
    "7d": "day",
    "30d": "day",
    "90d": "week",
    "1y": "month",
}


def _period_window(period: str, now: datetime | None = None) -> tuple[datetime, datetime]:
    if period not in PERIODS:
        raise ValidationError({"period": f"Period must be one of {', '.join(PERIODS)}"})
    now = now or datetime.now(timezone.utc)
    return now - PERIODS[period], now


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:  # SQLite drops the offset
        return moment.replace(tzinfo=timezone.utc)
    return moment


def bucket_key(moment: datetime, granularity: str) -> str:
    day = moment.date()
    if granularity == "day":
        return day.isoformat()
    if granularity == "week":
        return (day - timedelta(days=day.weekday())).isoformat()
    return f"{day.year}-{day.month:02d}"


async def _seller_amounts(db: AsyncSession, seller_id: str, start: datetime, end: datetime) -> list[Decimal]:
    result = await db.execute(
        select(Order.amount)
        .join(Resource, Order.resource_id == Resource.id)
        .where(
            Resource.author_id == seller_id,
            Order.status.in_(_PAID),
            Order.created_at >= start,
            Order.created_at < end,
        )
    )
    return [Decimal(amount) for amount in result.scalars().all()]


async def get_seller_stats(db: AsyncSession, actor: Actor, period: str = "30d") -> dict:
    """Revenue and sales for the period, compared with the period before it."""
    start, now = _period_window(period)
    previous_start = start - PERIODS[period]

    current = await _seller_amounts(db, actor.id, start, now)
    previous = await _seller_amounts(db, actor.id, previous_start, start)
    revenue = sum(current, Decimal("0"))
    previous_revenue = sum(previous, Decimal("0"))
    earnings = sum((split_revenue(amount).seller for amount in current), Decimal("0"))

    product_row = (await db.execute(
        select(
            func.count(Resource.id),
            func.coalesce(func.sum(Resource.download_count), 0),
        ).where(Resource.author_id == actor.id)
    )).one()
    active = (await db.execute(
        select(func.count(Resource.id)).where(
            Resource.author_id == actor.id, Resource.status == ResourceStatus.APPROVED,
        )
    )).scalar() or 0

    return {
        "period": period,
        "total_revenue": float(revenue),
        "seller_earnings": float(earnings),
        "revenue_change_pct": _change_pct(revenue, previous_revenue),
        "total_sales": len(current),
        "sales_change_pct": _change_pct(len(current), len(previous)),
        "total_products": product_row[0],
        "active_products": active,
        "total_downloads": int(product_row[1]),
    }


async def get_top_products(
    db: AsyncSession, actor: Actor, period: str = "30d", limit: int = 10, now: datetime | None = None,
) -> list[dict]:
    """The seller's best earners over the period, ranked by revenue then sales."""
    start, end = _period_window(period, now)
    revenue = func.sum(Order.amount).label("revenue")
    sales = func.count(Order.id).label("sales")
    result = await db.execute(
        select(Resource, revenue, sales)
        .join(Order, Order.resource_id == Resource.id)
        .where(
            Resource.author_id == actor.id,
            Order.status.in_(_PAID),
            Order.created_at >= start,
            Order.created_at < end,
        )
        .group_by(Resource.id)
        .order_by(revenue.desc(), sales.desc(), Resource.title)
        .limit(limit)
    )

    products = []
    for rank, (resource, total, count) in enumerate(result.all(), start=1):
        thumbnail = resource.thumbnail
        products.append({
            "rank": rank,
            "resource_id": resource.id,
            "title": resource.title,
            "thumbnail_url": thumbnail.url if thumbnail else None,
            "price": float(resource.price),
            "downloads": resource.download_count or 0,
            "revenue": float(Decimal(total)),
            "sales": count,
        })
    return products


async def get_revenue_chart(
    db: AsyncSession, actor: Actor, period: str = "30d", now: datetime | None = None,
) -> dict:
    """Revenue and sales per bucket, with empty buckets filled in."""
    start, end = _period_window(period, now)
    granularity = CHART_GRANULARITY[period]

    buckets: dict[str, list] = {}
    for offset in range((end.date() - start.date()).days + 1):
        buckets.setdefault(bucket_key(start + timedelta(days=offset), granularity), [Decimal("0"), 0])

    result = await db.execute(
        select(Order.amount, Order.created_at)
        .join(Resource, Order.resource_id == Resource.id)
        .where(
            Resource.author_id == actor.id,
            Order.status.in_(_PAID),
            Order.created_at >= start,
            Order.created_at <= end,
        )
    )
    for amount, created_at in result.all():
        bucket = buckets.get(bucket_key(_as_utc(created_at), granularity))
        if bucket is not None:
            bucket[0] += Decimal(amount)
            bucket[1] += 1

    return {
        "period": period,
        "granularity": granularity,
        "points": [
            {"date": key, "revenue": float(revenue), "sales": count}
            for key, (revenue, count) in sorted(buckets.items())
        ],
    }


async def _count(db: AsyncSession, column, *conditions) -> int:
    return (await db.execute(select(func.count(column)).where(*conditions))).scalar() or 0


async def get_platform_stats(db: AsyncSession) -> dict:
    """Marketplace-wide totals for the admin dashboard."""
    now = datetime.now(timezone.utc)
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    paid = (await db.execute(
        select(Order.amount, Order.created_at).where(Order.status.in_(_PAID))
    )).all()
    total = platform_total = monthly = platform_monthly = Decimal("0")
    for amount, created_at in paid:
        split = split_revenue(amount)
        total += Decimal(amount)
        platform_total += split.platform
        if _as_utc(created_at) >= month_start:
            monthly += Decimal(amount)
            platform_monthly += split.platform

    return {
        "revenue": {
            "total": float(total),
            "monthly": float(monthly),
            "platform_total": float(platform_total),
            "platform_monthly": float(platform_monthly),
            "sellers_total": float(total - platform_total),
            "commission_pct": settings.platform_commission_pct,
        },
        "orders": {
            "total": await _count(db, Order.id),
            "monthly": await _count(db, Order.id, Order.created_at >= month_start),
            "pending": await _count(db, Order.id, Order.status == OrderStatus.PENDING),
            "delivered": await _count(db, Order.id, Order.status == OrderStatus.DELIVERED),
        },
        "products": {
            "total": await _count(db, Resource.id),
            "approved": await _count(db, Resource.id, Resource.status == ResourceStatus.APPROVED),
            "pending": await _count(db, Resource.id, Resource.status == ResourceStatus.PENDING),
        },
        "users": {
            "total": await _count(db, Profile.id),
            "sellers": await _count(db, Profile.id, Profile.role == UserRole.SELLER),
            "admins": await _count(db, Profile.id, Profile.role == UserRole.ADMIN),
        },
    }
