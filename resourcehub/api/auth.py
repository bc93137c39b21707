import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from resourcehub.core.auth import (
    Actor,
    create_access_token,
    get_current_actor,
    hash_password,
    verify_password,
)
from resourcehub.core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from resourcehub.database import get_db
from resourcehub.models.profile import Profile
from resourcehub.schemas.account import (
    LoginRequest,
    ProfileResponse,
    RegisterRequest,
    TokenResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(req: RegisterRequest, db: AsyncSession = Depends(get_db)):
    email = req.email.strip().lower()
    existing = (await db.execute(select(Profile).where(Profile.email == email))).scalar_one_or_none()
    if existing:
        raise ConflictError("An account with this email already exists")

    profile = Profile(
        email=email,
        password_hash=hash_password(req.password),
        username=req.username.strip(),
    )
    db.add(profile)
    await db.commit()
    await db.refresh(profile)
    logger.info("Profile %s registered", profile.id)
    return TokenResponse(
        access_token=create_access_token(profile.id, profile.email),
        profile=ProfileResponse.model_validate(profile),
    )


@router.post("/login", response_model=TokenResponse)
async def login(req: LoginRequest, db: AsyncSession = Depends(get_db)):
    email = req.email.strip().lower()
    profile = (await db.execute(select(Profile).where(Profile.email == email))).scalar_one_or_none()
    if not profile or not verify_password(req.password, profile.password_hash):
        raise UnauthorizedError("Invalid email or password")
    return TokenResponse(
        access_token=create_access_token(profile.id, profile.email),
        profile=ProfileResponse.model_validate(profile),
    )


@router.get("/me", response_model=ProfileResponse)
async def me(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    profile = await db.get(Profile, actor.id)
    if profile is None:
        raise NotFoundError("Profile", actor.id)
    return ProfileResponse.model_validate(profile)
