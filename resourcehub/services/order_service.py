"""Order and delivery workflow.

Orders move ``pending -> completed -> delivered``; ``pending`` and
``completed`` orders can also be cancelled. Whether new orders start as
``pending`` or ``completed`` is decided by ``settings.payment_mode``.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from resourcehub.config import settings
from resourcehub.core.auth import Actor
from resourcehub.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from resourcehub.models.cart import CartItem
from resourcehub.models.order import Download, Order, OrderStatus
from resourcehub.models.resource import Resource, ResourceFile, ResourceStatus, ResourceType
from resourcehub.schemas.order import CheckoutLine, EscrowFields
from resourcehub.services import notification_service
from resourcehub.services.validation import validate_escrow_fields

logger = logging.getLogger(__name__)

CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.COMPLETED})
PAID_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.DELIVERED})


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _initial_status() -> OrderStatus:
    return OrderStatus.COMPLETED if settings.payment_mode == "simulated" else OrderStatus.PENDING


def required_escrow_fields(resource: Resource) -> list[str]:
    if resource.resource_type != ResourceType.ESCROW or resource.escrow_info is None:
        return []
    return resource.escrow_info.required_fields()


def _missing_escrow_fields(order: Order) -> dict[str, str]:
    return validate_escrow_fields(required_escrow_fields(order.resource), order.escrow_values())


async def has_active_order(db: AsyncSession, buyer_id: str, resource_id: str) -> bool:
    """True when the buyer already holds a non-cancelled order for the resource."""
    result = await db.execute(
        select(func.count(Order.id)).where(
            Order.buyer_id == buyer_id,
            Order.resource_id == resource_id,
            Order.status != OrderStatus.CANCELLED,
        )
    )
    return (result.scalar() or 0) > 0


async def get_purchasable_resource(db: AsyncSession, actor: Actor, resource_id: str) -> Resource:
    """Load an approved resource the actor is allowed to buy."""
    resource = await db.get(Resource, resource_id)
    if resource is None or resource.status != ResourceStatus.APPROVED:
        raise NotFoundError("Resource", resource_id)
    if resource.author_id == actor.id:
        raise AuthorizationError("You cannot purchase your own resource")
    if await has_active_order(db, actor.id, resource_id):
        raise ConflictError(f"You already own '{resource.title}'")
    return resource


async def checkout(db: AsyncSession, actor: Actor, lines: list[CheckoutLine]) -> list[Order]:
    """Create one order per line. Every line is validated before anything is written.

    Purchased resources are dropped from the buyer's cart in the same commit.
    """
    resource_ids = [line.resource_id for line in lines]
    if len(set(resource_ids)) != len(resource_ids):
        raise ValidationError({"items": "Each resource can only be purchased once per checkout"})

    staged: list[tuple[Resource, dict[str, str | None]]] = []
    errors: dict[str, str] = {}
    for line in lines:
        resource = await get_purchasable_resource(db, actor, line.resource_id)
        supplied = line.escrow_fields.model_dump() if line.escrow_fields else {}
        if resource.resource_type == ResourceType.ESCROW:
            for name, reason in validate_escrow_fields(required_escrow_fields(resource), supplied).items():
                errors.setdefault(name, f"{reason} for '{resource.title}'")
        staged.append((resource, supplied))
    if errors:
        raise ValidationError(errors, message="Missing or invalid escrow information")

    status = _initial_status()
    now = _now()
    orders = []
    for resource, supplied in staged:
        is_escrow = resource.resource_type == ResourceType.ESCROW
        order = Order(
            buyer_id=actor.id,
            resource_id=resource.id,
            amount=resource.price,
            status=status,
            completed_at=now if status == OrderStatus.COMPLETED else None,
        )
        if is_escrow:
            order.buyer_cfx_id = (supplied.get("cfx_id") or "").strip() or None
            order.buyer_email = (supplied.get("email") or "").strip() or None
            order.buyer_username = (supplied.get("username") or "").strip() or None
        resource.download_count = (resource.download_count or 0) + 1
        db.add(order)
        orders.append(order)

    await db.flush()
    for order, (resource, _) in zip(orders, staged):
        notification_service.notify(
            db,
            resource.author_id,
            "order_received",
            "New order",
            f"'{resource.title}' was purchased for {Decimal(resource.price):.2f}.",
            order_id=order.id,
            resource_id=resource.id,
        )
    await db.execute(
        delete(CartItem).where(
            CartItem.user_id == actor.id,
            CartItem.resource_id.in_([resource.id for resource, _ in staged]),
        )
    )
    await db.commit()
    for order in orders:
        await db.refresh(order)
        logger.info("Order %s created for resource %s by %s (%s)", order.id, order.resource_id, actor.id, order.status.value)
    return orders


async def create_order(
    db: AsyncSession, actor: Actor, resource_id: str, escrow_fields: EscrowFields | None = None,
) -> Order:
    orders = await checkout(db, actor, [CheckoutLine(resource_id=resource_id, escrow_fields=escrow_fields)])
    return orders[0]


async def checkout_cart(
    db: AsyncSession, actor: Actor, escrow_fields: EscrowFields | None = None,
) -> list[Order]:
    """Buy everything in the cart; one escrow field set covers every escrow line."""
    result = await db.execute(
        select(CartItem).where(CartItem.user_id == actor.id).order_by(CartItem.created_at)
    )
    items = list(result.scalars().all())
    if not items:
        raise ValidationError({"cart": "Your cart is empty"})

    lines = [CheckoutLine(resource_id=item.resource_id, escrow_fields=escrow_fields) for item in items]
    return await checkout(db, actor, lines)


async def get_order_record(db: AsyncSession, order_id: str) -> Order:
    order = await db.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order", order_id)
    return order


async def get_order(db: AsyncSession, actor: Actor, order_id: str) -> Order:
    """Visible to its buyer, the seller of the resource and admins."""
    order = await get_order_record(db, order_id)
    if order.buyer_id != actor.id and order.resource.author_id != actor.id and not actor.is_admin:
        raise NotFoundError("Order", order_id)
    return order


async def _get_buyer_order(db: AsyncSession, actor: Actor, order_id: str, allow_admin: bool = False) -> Order:
    order = await get_order_record(db, order_id)
    if order.buyer_id == actor.id or (allow_admin and actor.is_admin):
        return order
    if order.resource.author_id == actor.id or actor.is_admin:
        raise AuthorizationError("Only the buyer can perform this action")
    raise NotFoundError("Order", order_id)


async def confirm_payment(db: AsyncSession, actor: Actor, order_id: str) -> Order:
    """``pending -> completed`` once payment has been settled."""
    order = await _get_buyer_order(db, actor, order_id, allow_admin=True)
    if order.status != OrderStatus.PENDING:
        raise InvalidTransitionError("Order", order.status.value, OrderStatus.COMPLETED.value)

    order.status = OrderStatus.COMPLETED
    order.completed_at = _now()
    await db.commit()
    await db.refresh(order)
    logger.info("Order %s payment confirmed by %s", order.id, actor.id)
    return order


async def confirm_delivery(db: AsyncSession, actor: Actor, order_id: str) -> Order:
    """Seller marks a paid order as delivered."""
    order = await get_order_record(db, order_id)
    if order.resource.author_id != actor.id:
        if order.buyer_id == actor.id or actor.is_admin:
            raise AuthorizationError("Only the seller can confirm delivery")
        raise NotFoundError("Order", order_id)
    if order.status != OrderStatus.COMPLETED:
        raise InvalidTransitionError("Order", order.status.value, OrderStatus.DELIVERED.value)
    missing = _missing_escrow_fields(order)
    if missing:
        raise ValidationError(missing, message="Order is missing buyer information required for delivery")

    order.status = OrderStatus.DELIVERED
    order.delivered_at = _now()
    notification_service.notify(
        db,
        order.buyer_id,
        "order_delivered",
        "Order delivered",
        f"The seller has delivered '{order.resource.title}'.",
        order_id=order.id,
        resource_id=order.resource_id,
    )
    await db.commit()
    await db.refresh(order)
    logger.info("Order %s delivered by seller %s", order.id, actor.id)
    return order


async def grant_download(db: AsyncSession, actor: Actor, order_id: str) -> tuple[Order, ResourceFile]:
    """Hand the buyer the archive of a paid direct order."""
    order = await _get_buyer_order(db, actor, order_id)
    resource = order.resource
    if resource.resource_type != ResourceType.DIRECT:
        raise ConflictError("Escrow resources are delivered by the seller, not downloaded")
    if order.status not in PAID_STATUSES:
        raise ConflictError(f"Order is {order.status.value}; only paid orders can be downloaded")
    if resource.file is None:
        raise NotFoundError("ResourceFile", resource.id)

    if order.status == OrderStatus.COMPLETED:
        order.status = OrderStatus.DELIVERED
        order.delivered_at = _now()
    db.add(Download(order_id=order.id, buyer_id=actor.id, resource_id=resource.id))
    await db.commit()
    await db.refresh(order)
    logger.info("Order %s downloaded by %s", order.id, actor.id)
    return order, resource.file


async def submit_escrow_fields(
    db: AsyncSession, actor: Actor, order_id: str, fields: EscrowFields,
) -> Order:
    """Attach or correct the buyer's escrow details on an open order."""
    order = await _get_buyer_order(db, actor, order_id)
    if order.resource.resource_type != ResourceType.ESCROW:
        raise ValidationError({"resource_type": "Only escrow orders carry buyer delivery fields"})
    if order.status not in CANCELLABLE_STATUSES:
        raise ConflictError(f"Order is {order.status.value}; escrow details can no longer change")

    supplied = fields.model_dump(exclude_unset=True)
    merged = {**order.escrow_values(), **supplied}
    errors = validate_escrow_fields(required_escrow_fields(order.resource), merged)
    if errors:
        raise ValidationError(errors, message="Missing or invalid escrow information")

    order.buyer_cfx_id = (merged.get("cfx_id") or "").strip() or None
    order.buyer_email = (merged.get("email") or "").strip() or None
    order.buyer_username = (merged.get("username") or "").strip() or None
    await db.commit()
    await db.refresh(order)
    return order


async def cancel_order(db: AsyncSession, actor: Actor, order_id: str, reason: str | None = None) -> Order:
    order = await _get_buyer_order(db, actor, order_id, allow_admin=True)
    if order.status not in CANCELLABLE_STATUSES:
        raise InvalidTransitionError("Order", order.status.value, OrderStatus.CANCELLED.value)

    order.status = OrderStatus.CANCELLED
    order.cancelled_at = _now()
    resource = order.resource
    resource.download_count = max((resource.download_count or 0) - 1, 0)
    await db.commit()
    await db.refresh(order)
    logger.info("Order %s cancelled by %s%s", order.id, actor.id, f": {reason}" if reason else "")
    return order


async def list_purchases(
    db: AsyncSession, actor: Actor, page: int = 1, page_size: int = 20,
) -> tuple[list[Order], int]:
    conditions = [Order.buyer_id == actor.id]
    total = (await db.execute(select(func.count(Order.id)).where(*conditions))).scalar() or 0
    query = (
        select(Order)
        .where(*conditions)
        .order_by(Order.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list((await db.execute(query)).scalars().all()), total


async def list_seller_orders(
    db: AsyncSession,
    actor: Actor,
    status: OrderStatus | None = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[Order], int]:
    """Orders placed on any of the seller's resources."""
    conditions = [Resource.author_id == actor.id]
    if status is not None:
        conditions.append(Order.status == status)
    total = (await db.execute(
        select(func.count(Order.id)).join(Resource, Order.resource_id == Resource.id).where(*conditions)
    )).scalar() or 0
    query = (
        select(Order)
        .join(Resource, Order.resource_id == Resource.id)
        .where(*conditions)
        .order_by(Order.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list((await db.execute(query)).scalars().all()), total
