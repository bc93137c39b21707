from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from resourcehub.config import settings
from resourcehub.core.auth import Actor, get_current_actor
from resourcehub.database import get_db
from resourcehub.schemas.account import (
    NotificationListResponse,
    NotificationResponse,
    SellerRequestCreate,
    SellerRequestResponse,
)
from resourcehub.schemas.order import OrderListResponse
from resourcehub.services import notification_service, order_service, seller_request_service, user_service

from .orders import order_to_response

router = APIRouter(prefix="/account", tags=["account"])


@router.get("/purchases", response_model=OrderListResponse)
async def list_purchases(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    orders, total = await order_service.list_purchases(db, actor, page, page_size)
    return OrderListResponse(
        total=total,
        page=page,
        page_size=page_size,
        results=[order_to_response(order) for order in orders],
    )


@router.get("/seller-request", response_model=SellerRequestResponse | None)
async def get_seller_request(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    request = await seller_request_service.get_latest_request(db, actor)
    return seller_request_to_response(request) if request else None


@router.post("/seller-request", response_model=SellerRequestResponse, status_code=201)
async def submit_seller_request(
    req: SellerRequestCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    request = await seller_request_service.submit_seller_request(db, actor, req)
    return seller_request_to_response(request)


@router.get("/notifications", response_model=NotificationListResponse)
async def list_notifications(
    unread_only: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    notifications, unread = await notification_service.list_notifications(db, actor, unread_only)
    return NotificationListResponse(
        unread_count=unread,
        results=[NotificationResponse.model_validate(n) for n in notifications],
    )


@router.post("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    notification = await notification_service.mark_read(db, actor, notification_id)
    return NotificationResponse.model_validate(notification)


@router.delete("/notifications/{notification_id}")
async def delete_notification(
    notification_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await notification_service.delete_notification(db, actor, notification_id)
    return {"status": "deleted", "notification_id": notification_id}


@router.delete("")
async def delete_account(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await user_service.delete_account(db, actor)
    return {"status": "deleted", "user_id": actor.id}


def seller_request_to_response(request) -> SellerRequestResponse:
    return SellerRequestResponse(
        id=request.id,
        user_id=request.user_id,
        username=request.user.username if request.user else None,
        status=request.status,
        business_name=request.business_name,
        business_type=request.business_type,
        motivation=request.motivation,
        resolved_by=request.resolved_by,
        created_at=request.created_at,
        updated_at=request.updated_at,
    )
