"""Seller-side resource management: drafts, media, delivery file and escrow terms.

Moderation status changes live in ``lifecycle_service``; everything here only
touches a resource while it is editable.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from resourcehub.config import settings
from resourcehub.core.auth import Actor
from resourcehub.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from resourcehub.models.resource import (
    EscrowInfo,
    Resource,
    ResourceFile,
    ResourceImage,
    ResourceStatus,
    ResourceType,
)
from resourcehub.schemas.resource import (
    EscrowInfoRequest,
    ImageUpload,
    ResourceCreateRequest,
    ResourceFileUpload,
    ResourceUpdateRequest,
)
from resourcehub.services.validation import (
    FileMeta,
    round_price,
    validate_delivery_instructions,
    validate_image_file,
    validate_resource_file,
)

logger = logging.getLogger(__name__)

EDITABLE_STATUSES = frozenset({ResourceStatus.DRAFT, ResourceStatus.REJECTED, ResourceStatus.SUSPENDED})


def _image_meta(image: ImageUpload) -> FileMeta:
    return FileMeta(file_name=image.file_name, content_type=image.content_type, size=image.size)


def _file_meta(upload: ResourceFileUpload) -> FileMeta:
    return FileMeta(file_name=upload.file_name, content_type=upload.content_type, size=upload.file_size)


def _image_errors(images: list[ImageUpload], existing: int = 0) -> str | None:
    if existing + len(images) > settings.image_max_files:
        return f"You can upload at most {settings.image_max_files} images"
    for image in images:
        error = validate_image_file(_image_meta(image))
        if error:
            return error
    return None


def _check_editable(resource: Resource) -> None:
    if resource.status not in EDITABLE_STATUSES:
        raise ConflictError(
            f"Resource is {resource.status.value}; move it back to draft before editing"
        )


def is_visible(resource: Resource, actor: Actor | None) -> bool:
    """Approved resources are public; anything else only to its owner and admins."""
    if resource.status == ResourceStatus.APPROVED:
        return True
    return actor is not None and (actor.id == resource.author_id or actor.is_admin)


async def get_resource(db: AsyncSession, resource_id: str) -> Resource:
    """Get a resource by ID or raise 404."""
    result = await db.execute(select(Resource).where(Resource.id == resource_id))
    resource = result.scalar_one_or_none()
    if not resource:
        raise NotFoundError("Resource", resource_id)
    return resource


async def get_visible_resource(db: AsyncSession, actor: Actor | None, resource_id: str) -> Resource:
    resource = await get_resource(db, resource_id)
    if not is_visible(resource, actor):
        raise NotFoundError("Resource", resource_id)
    return resource


async def get_owned_resource(
    db: AsyncSession, actor: Actor, resource_id: str, allow_admin: bool = False,
) -> Resource:
    """Load a resource the actor may mutate.

    Resources the actor cannot even see are reported as missing.
    """
    resource = await get_resource(db, resource_id)
    if resource.author_id == actor.id or (allow_admin and actor.is_admin):
        return resource
    if not is_visible(resource, actor):
        raise NotFoundError("Resource", resource_id)
    logger.warning("Actor %s denied mutation of resource %s", actor.id, resource_id)
    raise AuthorizationError("Not the resource owner")


async def create_resource(db: AsyncSession, actor: Actor, req: ResourceCreateRequest) -> Resource:
    """Create a draft together with its images, delivery file and escrow terms."""
    if not actor.can_sell:
        raise AuthorizationError("Only sellers can create resources")

    errors: dict[str, str] = {}
    if req.images:
        image_error = _image_errors(req.images)
        if image_error:
            errors["images"] = image_error
    if req.resource_file is not None:
        file_error = validate_resource_file(_file_meta(req.resource_file), ResourceType.DIRECT.value)
        if file_error:
            errors["resource_file"] = file_error
    if req.escrow_info is not None:
        if req.resource_type != ResourceType.ESCROW:
            errors["escrow_info"] = "Escrow requirements only apply to escrow resources"
        else:
            instructions_error = validate_delivery_instructions(req.escrow_info.delivery_instructions)
            if instructions_error:
                errors["delivery_instructions"] = instructions_error
    if errors:
        raise ValidationError(errors)

    resource = Resource(
        author_id=actor.id,
        title=req.title.strip(),
        description=req.description.strip(),
        price=round_price(req.price),
        resource_type=req.resource_type,
        framework=req.framework,
        category=req.category,
        status=ResourceStatus.DRAFT,
    )
    resource.images = [
        ResourceImage(
            url=image.url,
            file_name=image.file_name,
            content_type=image.content_type,
            size=image.size,
            is_thumbnail=index == 0,
            upload_order=index,
        )
        for index, image in enumerate(req.images)
    ]
    if req.resource_file is not None:
        resource.file = ResourceFile(
            file_url=req.resource_file.file_url,
            file_name=req.resource_file.file_name,
            file_size=req.resource_file.file_size,
            content_type=req.resource_file.content_type,
        )
    if req.escrow_info is not None:
        resource.escrow_info = EscrowInfo(
            requires_cfx_id=req.escrow_info.requires_cfx_id,
            requires_email=req.escrow_info.requires_email,
            requires_username=req.escrow_info.requires_username,
            delivery_instructions=req.escrow_info.delivery_instructions.strip(),
        )

    db.add(resource)
    await db.commit()
    await db.refresh(resource)
    logger.info("Resource %s created by %s", resource.id, actor.id)
    return resource


async def update_resource(
    db: AsyncSession, actor: Actor, resource_id: str, req: ResourceUpdateRequest,
) -> Resource:
    """Update draft fields (owner only, editable states only)."""
    resource = await get_owned_resource(db, actor, resource_id)
    _check_editable(resource)

    update_data = req.model_dump(exclude_unset=True)
    for field in ("title", "description", "price", "resource_type"):
        if update_data.get(field, ...) is None:
            del update_data[field]
    if "title" in update_data:
        update_data["title"] = update_data["title"].strip()
    if "description" in update_data:
        update_data["description"] = update_data["description"].strip()
    if "price" in update_data:
        update_data["price"] = round_price(update_data["price"])

    for field, value in update_data.items():
        setattr(resource, field, value)

    await db.commit()
    await db.refresh(resource)
    return resource


async def delete_resource(db: AsyncSession, actor: Actor, resource_id: str) -> None:
    """Hard-delete a resource (owner or admin). Orders and cart rows cascade."""
    resource = await get_owned_resource(db, actor, resource_id, allow_admin=True)
    await db.delete(resource)
    await db.commit()
    logger.info("Resource %s deleted by %s", resource_id, actor.id)


async def add_images(
    db: AsyncSession, actor: Actor, resource_id: str, images: list[ImageUpload],
) -> Resource:
    resource = await get_owned_resource(db, actor, resource_id)
    _check_editable(resource)

    error = _image_errors(images, existing=len(resource.images))
    if error:
        raise ValidationError({"images": error})

    next_order = max((image.upload_order for image in resource.images), default=-1) + 1
    has_thumbnail = resource.thumbnail is not None
    for offset, image in enumerate(images):
        resource.images.append(ResourceImage(
            url=image.url,
            file_name=image.file_name,
            content_type=image.content_type,
            size=image.size,
            is_thumbnail=not has_thumbnail and offset == 0,
            upload_order=next_order + offset,
        ))

    await db.commit()
    await db.refresh(resource)
    return resource


async def set_thumbnail(db: AsyncSession, actor: Actor, resource_id: str, image_id: str) -> Resource:
    resource = await get_owned_resource(db, actor, resource_id)
    _check_editable(resource)
    if not any(image.id == image_id for image in resource.images):
        raise NotFoundError("Image", image_id)

    for image in resource.images:
        image.is_thumbnail = image.id == image_id

    await db.commit()
    await db.refresh(resource)
    return resource


async def remove_image(db: AsyncSession, actor: Actor, resource_id: str, image_id: str) -> Resource:
    resource = await get_owned_resource(db, actor, resource_id)
    _check_editable(resource)
    target = next((image for image in resource.images if image.id == image_id), None)
    if target is None:
        raise NotFoundError("Image", image_id)

    resource.images.remove(target)
    for index, image in enumerate(resource.images):
        image.upload_order = index
    if resource.images and resource.thumbnail is None:
        resource.images[0].is_thumbnail = True

    await db.commit()
    await db.refresh(resource)
    return resource


async def attach_file(
    db: AsyncSession, actor: Actor, resource_id: str, upload: ResourceFileUpload,
) -> Resource:
    """Attach or replace the downloadable archive."""
    resource = await get_owned_resource(db, actor, resource_id)
    _check_editable(resource)
    error = validate_resource_file(_file_meta(upload), ResourceType.DIRECT.value)
    if error:
        raise ValidationError({"resource_file": error})

    # Updated in place: the one-to-one is unique on resource_id.
    if resource.file is None:
        resource.file = ResourceFile(
            file_url=upload.file_url,
            file_name=upload.file_name,
            file_size=upload.file_size,
            content_type=upload.content_type,
        )
    else:
        resource.file.file_url = upload.file_url
        resource.file.file_name = upload.file_name
        resource.file.file_size = upload.file_size
        resource.file.content_type = upload.content_type

    await db.commit()
    await db.refresh(resource)
    return resource


async def detach_file(db: AsyncSession, actor: Actor, resource_id: str) -> Resource:
    resource = await get_owned_resource(db, actor, resource_id)
    _check_editable(resource)
    if resource.file is None:
        raise NotFoundError("ResourceFile", resource_id)
    resource.file = None
    await db.commit()
    await db.refresh(resource)
    return resource


async def upsert_escrow_info(
    db: AsyncSession, actor: Actor, resource_id: str, req: EscrowInfoRequest,
) -> Resource:
    """Set the buyer fields and delivery instructions of an escrow resource."""
    resource = await get_owned_resource(db, actor, resource_id)
    _check_editable(resource)
    if resource.resource_type != ResourceType.ESCROW:
        raise ValidationError({"resource_type": "Escrow requirements only apply to escrow resources"})
    error = validate_delivery_instructions(req.delivery_instructions)
    if error:
        raise ValidationError({"delivery_instructions": error})

    info = resource.escrow_info
    if info is None:
        info = EscrowInfo()
        resource.escrow_info = info
    info.requires_cfx_id = req.requires_cfx_id
    info.requires_email = req.requires_email
    info.requires_username = req.requires_username
    info.delivery_instructions = req.delivery_instructions.strip()

    await db.commit()
    await db.refresh(resource)
    return resource


async def _paginate(
    db: AsyncSession, conditions: list, page: int, page_size: int,
) -> tuple[list[Resource], int]:
    total = (await db.execute(select(func.count(Resource.id)).where(*conditions))).scalar() or 0
    query = (
        select(Resource)
        .where(*conditions)
        .order_by(Resource.updated_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    resources = list((await db.execute(query)).scalars().all())
    return resources, total


async def list_seller_resources(
    db: AsyncSession,
    actor: Actor,
    status: ResourceStatus | None = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[Resource], int]:
    """All of the seller's own resources, any status."""
    conditions = [Resource.author_id == actor.id]
    if status is not None:
        conditions.append(Resource.status == status)
    return await _paginate(db, conditions, page, page_size)


async def list_admin_resources(
    db: AsyncSession,
    status: ResourceStatus | None = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[Resource], int]:
    """Moderation queue view. Defaults to every status."""
    conditions = []
    if status is not None:
        conditions.append(Resource.status == status)
    return await _paginate(db, conditions, page, page_size)
