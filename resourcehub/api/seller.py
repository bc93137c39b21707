from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from resourcehub.config import settings
from resourcehub.core.auth import Actor, require_seller
from resourcehub.database import get_db
from resourcehub.models.order import OrderStatus
from resourcehub.models.resource import ResourceStatus
from resourcehub.schemas.analytics import RevenueChartResponse, SellerStatsResponse, TopProductResponse
from resourcehub.schemas.order import OrderListResponse, OrderResponse
from resourcehub.schemas.resource import ResourceListResponse
from resourcehub.services import analytics_service, order_service, resource_service

from .orders import order_to_response
from .resources import resource_list_response

router = APIRouter(prefix="/seller", tags=["seller"])


@router.get("/resources", response_model=ResourceListResponse)
async def list_my_resources(
    status: ResourceStatus | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_seller),
):
    resources, total = await resource_service.list_seller_resources(db, actor, status, page, page_size)
    return resource_list_response(resources, total, page, page_size)


@router.get("/orders", response_model=OrderListResponse)
async def list_my_orders(
    status: OrderStatus | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_seller),
):
    orders, total = await order_service.list_seller_orders(db, actor, status, page, page_size)
    return OrderListResponse(
        total=total,
        page=page,
        page_size=page_size,
        results=[order_to_response(order) for order in orders],
    )


@router.post("/orders/{order_id}/confirm-delivery", response_model=OrderResponse)
async def confirm_delivery(
    order_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_seller),
):
    order = await order_service.confirm_delivery(db, actor, order_id)
    return order_to_response(order)


@router.get("/stats", response_model=SellerStatsResponse)
async def seller_stats(
    period: str = Query("30d"),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_seller),
):
    return SellerStatsResponse(**await analytics_service.get_seller_stats(db, actor, period))


@router.get("/top-products", response_model=list[TopProductResponse])
async def top_products(
    period: str = Query("30d"),
    limit: int = Query(10, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_seller),
):
    return [TopProductResponse(**p) for p in await analytics_service.get_top_products(db, actor, period, limit)]


@router.get("/revenue-chart", response_model=RevenueChartResponse)
async def revenue_chart(
    period: str = Query("30d"),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_seller),
):
    return RevenueChartResponse(**await analytics_service.get_revenue_chart(db, actor, period))
