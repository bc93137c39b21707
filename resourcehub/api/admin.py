from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from resourcehub.config import settings
from resourcehub.core.auth import Actor, require_admin
from resourcehub.database import get_db
from resourcehub.models.profile import UserRole
from resourcehub.models.resource import ResourceStatus
from resourcehub.models.seller_request import SellerRequestStatus
from resourcehub.schemas.account import (
    ProfileResponse,
    RoleChangeRequest,
    SellerRequestDecision,
    SellerRequestListResponse,
    SellerRequestResponse,
    UserDetailResponse,
    UserListResponse,
)
from resourcehub.schemas.analytics import PlatformStatsResponse
from resourcehub.schemas.resource import ResourceListResponse
from resourcehub.services import analytics_service, resource_service, seller_request_service, user_service

from .account import seller_request_to_response
from .orders import order_to_response
from .resources import resource_list_response, resource_to_response

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/resources", response_model=ResourceListResponse)
async def list_resources(
    status: ResourceStatus | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: AsyncSession = Depends(get_db),
    _: Actor = Depends(require_admin),
):
    resources, total = await resource_service.list_admin_resources(db, status, page, page_size)
    return resource_list_response(resources, total, page, page_size)


@router.get("/seller-requests", response_model=SellerRequestListResponse)
async def list_seller_requests(
    status: SellerRequestStatus | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: AsyncSession = Depends(get_db),
    _: Actor = Depends(require_admin),
):
    requests, total = await seller_request_service.list_seller_requests(db, status, page, page_size)
    return SellerRequestListResponse(
        total=total,
        page=page,
        page_size=page_size,
        results=[seller_request_to_response(r) for r in requests],
    )


@router.patch("/seller-requests/{request_id}", response_model=SellerRequestResponse)
async def resolve_seller_request(
    request_id: str,
    req: SellerRequestDecision,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_admin),
):
    request = await seller_request_service.resolve_seller_request(
        db, actor, request_id, SellerRequestStatus(req.status),
    )
    return seller_request_to_response(request)


@router.get("/stats", response_model=PlatformStatsResponse)
async def platform_stats(
    db: AsyncSession = Depends(get_db),
    _: Actor = Depends(require_admin),
):
    return PlatformStatsResponse(**await analytics_service.get_platform_stats(db))


@router.get("/users", response_model=UserListResponse)
async def list_users(
    search: str | None = Query(None, max_length=100),
    role: UserRole | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: AsyncSession = Depends(get_db),
    _: Actor = Depends(require_admin),
):
    users, total = await user_service.list_users(db, search, role, page, page_size)
    return UserListResponse(
        total=total,
        page=page,
        page_size=page_size,
        results=[ProfileResponse.model_validate(u) for u in users],
    )


@router.get("/users/{user_id}", response_model=UserDetailResponse)
async def get_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    _: Actor = Depends(require_admin),
):
    profile, resources, orders = await user_service.get_user_overview(db, user_id)
    return UserDetailResponse(
        profile=ProfileResponse.model_validate(profile),
        resources=[resource_to_response(r) for r in resources],
        purchases=[order_to_response(o) for o in orders],
    )


@router.patch("/users/{user_id}/role", response_model=ProfileResponse)
async def change_user_role(
    user_id: str,
    req: RoleChangeRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_admin),
):
    profile = await user_service.change_role(db, actor, user_id, req.role)
    return ProfileResponse.model_validate(profile)


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_admin),
):
    await user_service.delete_user(db, actor, user_id)
    return {"status": "deleted", "user_id": user_id}
