"""Seed the local database with demo accounts and approved resources."""

import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from resourcehub.core.auth import Actor, hash_password
from resourcehub.database import async_session, dispose_engine, init_db
from resourcehub.models.profile import Profile, UserRole
from resourcehub.schemas.resource import (
    EscrowInfoRequest,
    ImageUpload,
    ResourceCreateRequest,
    ResourceFileUpload,
)
from resourcehub.services import lifecycle_service, resource_service

DEMO_PASSWORD = "demo-password-123"

ACCOUNTS = [
    ("admin@resourcehub.local", "hub_admin", UserRole.ADMIN),
    ("seller@resourcehub.local", "northside_scripts", UserRole.SELLER),
    ("buyer@resourcehub.local", "city_rp_owner", UserRole.BUYER),
]

CATALOG = [
    {
        "title": "Police MDT System",
        "description": "Mobile data terminal with warrants, fines, vehicle lookups and a searchable citizen database.",
        "price": 24.99,
        "resource_type": "direct",
        "framework": "ESX",
        "category": "Police",
        "slug": "mdt",
    },
    {
        "title": "Advanced Garage",
        "description": "Public and job garages with impound, vehicle transfers and per-gang parking zones.",
        "price": 14.50,
        "resource_type": "escrow",
        "framework": "QBCore",
        "category": "Vehicles",
        "slug": "garage",
    },
    {
        "title": "Minimal HUD",
        "description": "Lightweight status HUD showing health, armour, hunger and voice range with zero idle cost.",
        "price": 4.99,
        "resource_type": "direct",
        "framework": "Standalone",
        "category": "UI",
        "slug": "hud",
    },
]


def _request(entry: dict) -> ResourceCreateRequest:
    slug = entry["slug"]
    escrow = entry["resource_type"] == "escrow"
    return ResourceCreateRequest(
        title=entry["title"],
        description=entry["description"],
        price=entry["price"],
        resource_type=entry["resource_type"],
        framework=entry["framework"],
        category=entry["category"],
        images=[ImageUpload(
            url=f"https://cdn.resourcehub.local/{slug}.png",
            file_name=f"{slug}.png",
            content_type="image/png",
            size=250_000,
        )],
        resource_file=ResourceFileUpload(
            file_url=f"https://files.resourcehub.local/{slug}.zip",
            file_name=f"{slug}.zip",
            content_type="application/zip",
            file_size=4_000_000,
        ),
        escrow_info=EscrowInfoRequest(
            requires_cfx_id=True,
            delivery_instructions="The asset is granted to your Cfx.re account within 24 hours.",
        ) if escrow else None,
    )


async def seed_catalog():
    async with async_session() as db:
        print("=== Seeding ResourceHub demo data ===\n")

        profiles = {}
        for email, username, role in ACCOUNTS:
            profile = Profile(
                email=email,
                password_hash=hash_password(DEMO_PASSWORD),
                username=username,
                role=role,
            )
            db.add(profile)
            profiles[role] = profile
            print(f"  Account: {email} ({role.value})")
        await db.commit()

        admin = Actor(id=profiles[UserRole.ADMIN].id, role=UserRole.ADMIN)
        seller = Actor(id=profiles[UserRole.SELLER].id, role=UserRole.SELLER)

        for entry in CATALOG:
            resource = await resource_service.create_resource(db, seller, _request(entry))
            await lifecycle_service.submit_for_review(db, seller, resource.id)
            await lifecycle_service.approve(db, admin, resource.id)
            print(f"  Approved: {resource.title} (ID: {resource.id[:8]}...)")

        print(f"\nDone. All demo accounts use the password '{DEMO_PASSWORD}'.")


async def main():
    await init_db()
    await seed_catalog()
    await dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
