"""Shared test fixtures for the ResourceHub test suite.

Uses an in-memory SQLite database with StaticPool so all sessions share the
same connection (committed data is visible across sessions).
"""

import uuid
from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from resourcehub.core.auth import create_access_token, hash_password
from resourcehub.database import Base, get_db
from resourcehub.main import app
from resourcehub.models import *  # noqa: ensure all models are loaded for create_all
from resourcehub.models.profile import Profile, UserRole
from resourcehub.models.resource import (
    Category,
    EscrowInfo,
    Framework,
    Resource,
    ResourceFile,
    ResourceImage,
    ResourceStatus,
    ResourceType,
)

DEFAULT_DESCRIPTION = (
    "A complete police mobile data terminal with warrants, fines and "
    "a searchable citizen database for roleplay servers."
)


# ---------------------------------------------------------------------------
# In-memory SQLite test engine (shared via StaticPool)
# ---------------------------------------------------------------------------

test_engine = create_async_engine(
    "sqlite+aiosqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
    echo=False,
)
TestSession = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@event.listens_for(test_engine.sync_engine, "connect")
def _set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# ---------------------------------------------------------------------------
# Auto-use: create/drop tables for every test
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# ---------------------------------------------------------------------------
# Core fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
async def db():
    """Yield a fresh AsyncSession for direct service-layer tests."""
    async with TestSession() as session:
        yield session


@pytest.fixture
async def client():
    """httpx AsyncClient wired to the FastAPI app with test DB override."""
    import httpx

    async def _override_get_db():
        async with TestSession() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Seeding helpers
# ---------------------------------------------------------------------------

def _new_id() -> str:
    return str(uuid.uuid4())


@pytest.fixture
def auth_header():
    """Return a callable that builds an Authorization header from a JWT."""
    def _build(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}
    return _build


@pytest.fixture
def make_user(db: AsyncSession):
    """Factory fixture: create a Profile and return (profile, jwt_token)."""

    async def _make(role: UserRole = UserRole.BUYER, username: str = None):
        username = username or f"user-{_new_id()[:8]}"
        profile = Profile(
            id=_new_id(),
            email=f"{username}@example.com",
            password_hash=hash_password("correct-horse-battery"),
            username=username,
            role=role,
        )
        db.add(profile)
        await db.commit()
        await db.refresh(profile)
        return profile, create_access_token(profile.id, profile.email)

    return _make


@pytest.fixture
def make_resource(db: AsyncSession):
    """Factory fixture: create a Resource with media and delivery assets."""

    async def _make(
        author: Profile,
        *,
        title: str = "Police MDT System",
        description: str = DEFAULT_DESCRIPTION,
        price: float = 10.00,
        resource_type: ResourceType = ResourceType.DIRECT,
        status: ResourceStatus = ResourceStatus.APPROVED,
        framework: Framework = Framework.ESX,
        category: Category = Category.POLICE,
        with_image: bool = True,
        with_file: bool | None = None,
        escrow_fields: tuple[str, ...] = ("cfx_id",),
        download_count: int = 0,
        created_at: datetime | None = None,
    ):
        resource = Resource(
            id=_new_id(),
            author_id=author.id,
            title=title,
            description=description,
            price=Decimal(str(price)),
            resource_type=resource_type,
            framework=framework,
            category=category,
            status=status,
            download_count=download_count,
        )
        if created_at is not None:
            resource.created_at = created_at
        if with_image:
            resource.images = [ResourceImage(
                url="https://cdn.example.com/mdt.png",
                file_name="mdt.png",
                content_type="image/png",
                size=120_000,
                is_thumbnail=True,
                upload_order=0,
            )]
        if with_file is None:
            with_file = resource_type == ResourceType.DIRECT
        if with_file:
            resource.file = ResourceFile(
                file_url="https://files.example.com/mdt.zip",
                file_name="mdt.zip",
                file_size=2_000_000,
                content_type="application/zip",
            )
        if resource_type == ResourceType.ESCROW:
            resource.escrow_info = EscrowInfo(
                requires_cfx_id="cfx_id" in escrow_fields,
                requires_email="email" in escrow_fields,
                requires_username="username" in escrow_fields,
                delivery_instructions="Access is granted through the CFX keymaster within 24 hours.",
            )
        db.add(resource)
        await db.commit()
        await db.refresh(resource)
        return resource

    return _make
