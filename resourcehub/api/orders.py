from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from resourcehub.core.auth import Actor, get_current_actor
from resourcehub.database import get_db
from resourcehub.schemas.order import (
    CancelOrderRequest,
    CartCheckoutRequest,
    CheckoutRequest,
    CheckoutResponse,
    DownloadResponse,
    EscrowFields,
    OrderResponse,
)
from resourcehub.services import order_service

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("/checkout", response_model=CheckoutResponse, status_code=201)
async def checkout(
    req: CheckoutRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    orders = await order_service.checkout(db, actor, req.items)
    return _checkout_response(orders)


@router.post("/checkout/cart", response_model=CheckoutResponse, status_code=201)
async def checkout_cart(
    req: CartCheckoutRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    orders = await order_service.checkout_cart(db, actor, req.escrow_fields)
    return _checkout_response(orders)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    order = await order_service.get_order(db, actor, order_id)
    return order_to_response(order)


@router.post("/{order_id}/confirm-payment", response_model=OrderResponse)
async def confirm_payment(
    order_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    order = await order_service.confirm_payment(db, actor, order_id)
    return order_to_response(order)


@router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    req: CancelOrderRequest | None = None,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    order = await order_service.cancel_order(db, actor, order_id, req.reason if req else None)
    return order_to_response(order)


@router.put("/{order_id}/escrow", response_model=OrderResponse)
async def submit_escrow_fields(
    order_id: str,
    req: EscrowFields,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    order = await order_service.submit_escrow_fields(db, actor, order_id, req)
    return order_to_response(order)


@router.get("/{order_id}/download", response_model=DownloadResponse)
async def download(
    order_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    order, resource_file = await order_service.grant_download(db, actor, order_id)
    return DownloadResponse(
        order_id=order.id,
        order_status=order.status,
        resource_title=order.resource.title,
        download_url=resource_file.file_url,
        file_name=resource_file.file_name,
    )


def order_to_response(order) -> OrderResponse:
    resource = order.resource
    return OrderResponse(
        id=order.id,
        buyer_id=order.buyer_id,
        resource_id=order.resource_id,
        resource_title=resource.title if resource else None,
        resource_type=resource.resource_type if resource else None,
        amount=float(order.amount),
        status=order.status,
        buyer_cfx_id=order.buyer_cfx_id,
        buyer_email=order.buyer_email,
        buyer_username=order.buyer_username,
        created_at=order.created_at,
        completed_at=order.completed_at,
        delivered_at=order.delivered_at,
        cancelled_at=order.cancelled_at,
    )


def _checkout_response(orders) -> CheckoutResponse:
    return CheckoutResponse(
        orders=[order_to_response(order) for order in orders],
        total=float(sum(order.amount for order in orders)),
    )
