"""Buyer -> seller onboarding requests, resolved by admins."""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from resourcehub.core.auth import Actor
from resourcehub.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from resourcehub.models.profile import Profile, UserRole
from resourcehub.models.seller_request import SellerRequest, SellerRequestStatus
from resourcehub.schemas.account import SellerRequestCreate
from resourcehub.services import notification_service

logger = logging.getLogger(__name__)


async def submit_seller_request(db: AsyncSession, actor: Actor, req: SellerRequestCreate) -> SellerRequest:
    if actor.role == UserRole.SELLER:
        raise ConflictError("You are already a seller")
    if actor.role != UserRole.BUYER:
        raise AuthorizationError("Only buyers can apply to become sellers")

    pending = (await db.execute(
        select(func.count(SellerRequest.id)).where(
            SellerRequest.user_id == actor.id,
            SellerRequest.status == SellerRequestStatus.PENDING,
        )
    )).scalar() or 0
    if pending:
        raise ConflictError("You already have a pending seller request")

    request = SellerRequest(
        user_id=actor.id,
        business_name=req.business_name.strip(),
        business_type=req.business_type.strip(),
        motivation=req.motivation.strip(),
    )
    db.add(request)
    await db.commit()
    await db.refresh(request)
    logger.info("Seller request %s submitted by %s", request.id, actor.id)
    return request


async def get_latest_request(db: AsyncSession, actor: Actor) -> SellerRequest | None:
    result = await db.execute(
        select(SellerRequest)
        .where(SellerRequest.user_id == actor.id)
        .order_by(SellerRequest.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def list_seller_requests(
    db: AsyncSession,
    status: SellerRequestStatus | None = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[SellerRequest], int]:
    conditions = []
    if status is not None:
        conditions.append(SellerRequest.status == status)
    total = (await db.execute(select(func.count(SellerRequest.id)).where(*conditions))).scalar() or 0
    query = (
        select(SellerRequest)
        .where(*conditions)
        .order_by(SellerRequest.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list((await db.execute(query)).scalars().all()), total


async def resolve_seller_request(
    db: AsyncSession, actor: Actor, request_id: str, decision: SellerRequestStatus,
) -> SellerRequest:
    """Approve or reject a pending request. Approval promotes the requester to seller."""
    if not actor.is_admin:
        raise AuthorizationError("Admin access required")
    request = await db.get(SellerRequest, request_id)
    if request is None:
        raise NotFoundError("SellerRequest", request_id)
    if request.status != SellerRequestStatus.PENDING:
        raise ConflictError(f"Seller request is already {request.status.value}")

    request.status = decision
    request.resolved_by = actor.id
    if decision == SellerRequestStatus.APPROVED:
        profile = await db.get(Profile, request.user_id)
        if profile is not None and profile.role == UserRole.BUYER:
            profile.role = UserRole.SELLER
        title, message = "Seller request approved", "You can now publish resources on the marketplace."
    else:
        title, message = "Seller request rejected", "Your seller request was not approved."
    notification_service.notify(db, request.user_id, "seller_request_resolved", title, message)

    await db.commit()
    await db.refresh(request)
    logger.info("Seller request %s %s by %s", request.id, decision.value, actor.id)
    return request
