"""Tests for the submission completeness predicate."""

from sqlalchemy.ext.asyncio import AsyncSession

from resourcehub.models.profile import UserRole
from resourcehub.models.resource import EscrowInfo, ResourceFile, ResourceStatus, ResourceType
from resourcehub.services.completeness import (
    form_from_resource,
    is_complete,
    missing_requirements,
    resource_missing_requirements,
)
from resourcehub.services.validation import EscrowTerms, FileMeta, ResourceForm

ZIP = FileMeta(file_name="pack.zip", content_type="application/zip", size=1024)


def _form(**overrides) -> ResourceForm:
    values = {
        "title": "Vehicle Shop",
        "description": "v" * 80,
        "price": 25,
        "resource_type": "direct",
        "resource_file": ZIP,
    }
    values.update(overrides)
    return ResourceForm(**values)


def test_complete_direct_form():
    assert missing_requirements(_form()) == {}


def test_images_are_optional_for_submission():
    assert "images" not in missing_requirements(_form(images=()))


def test_short_description_names_description():
    assert set(missing_requirements(_form(description="d" * 40))) == {"description"}


def test_direct_requires_file_escrow_does_not():
    assert "resource_file" in missing_requirements(_form(resource_file=None))
    escrow_form = _form(resource_type="escrow", resource_file=None, escrow=EscrowTerms())
    assert missing_requirements(escrow_form) == {}


def test_escrow_requires_escrow_terms():
    assert "escrow_info" in missing_requirements(_form(resource_type="escrow", resource_file=None))


def test_thumbnail_must_be_unique_when_images_exist():
    png = FileMeta(file_name="a.png", content_type="image/png", size=10)
    assert "images" in missing_requirements(_form(images=(png, png)), thumbnail_count=0)
    assert "images" in missing_requirements(_form(images=(png, png)), thumbnail_count=2)
    assert missing_requirements(_form(images=(png, png)), thumbnail_count=1) == {}


def test_file_is_monotonic_for_direct_forms():
    for overrides in ({}, {"title": ""}, {"price": 0}, {"description": "short"}):
        without_file = _form(resource_file=None, **overrides)
        with_file = _form(resource_file=ZIP, **overrides)
        if not missing_requirements(without_file):
            assert not missing_requirements(with_file)
        assert set(missing_requirements(with_file)) <= set(missing_requirements(without_file))


async def test_resource_predicate_reads_relationships(db: AsyncSession, make_user, make_resource):
    seller, _ = await make_user(UserRole.SELLER)
    resource = await make_resource(seller, status=ResourceStatus.DRAFT, with_file=False)

    assert resource_missing_requirements(resource) == {
        "resource_file": "A ZIP archive is required for direct-delivery resources",
    }

    resource.file = ResourceFile(
        file_url="https://files.example.com/x.zip",
        file_name="x.zip",
        file_size=10,
        content_type="application/zip",
    )
    await db.commit()
    await db.refresh(resource)
    assert is_complete(resource)


async def test_proposed_changes_are_merged(make_user, make_resource):
    seller, _ = await make_user(UserRole.SELLER)
    resource = await make_resource(seller, status=ResourceStatus.DRAFT)

    assert is_complete(resource)
    assert not is_complete(resource, {"title": "x"})
    assert form_from_resource(resource, {"resource_type": ResourceType.ESCROW}).resource_type == "escrow"


async def test_escrow_resource_needs_escrow_info(db: AsyncSession, make_user, make_resource):
    seller, _ = await make_user(UserRole.SELLER)
    resource = await make_resource(seller, status=ResourceStatus.DRAFT, resource_type=ResourceType.ESCROW)
    assert is_complete(resource)

    resource.escrow_info = None
    await db.commit()
    await db.refresh(resource)
    assert "escrow_info" in resource_missing_requirements(resource)

    resource.escrow_info = EscrowInfo(delivery_instructions="")
    await db.commit()
    await db.refresh(resource)
    assert is_complete(resource)
