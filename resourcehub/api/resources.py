import math

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from resourcehub.config import settings
from resourcehub.core.auth import Actor, get_current_actor, optional_actor
from resourcehub.database import get_db
from resourcehub.schemas.listing import (
    CategoryFacet,
    FrameworkFacet,
    ListingFilters,
    PopularityFacet,
    RecencyFacet,
    ResourceTypeFacet,
    SortOption,
)
from resourcehub.schemas.resource import (
    EscrowInfoRequest,
    EscrowInfoResponse,
    ImageUpload,
    ResourceCreateRequest,
    ResourceFileResponse,
    ResourceFileUpload,
    ResourceFormRequest,
    ResourceFormValidation,
    ResourceImageResponse,
    ResourceListResponse,
    ResourceResponse,
    ResourceUpdateRequest,
    StatusChangeRequest,
)
from resourcehub.services import lifecycle_service, listing_service, resource_service
from resourcehub.services.validation import (
    EscrowTerms,
    FileMeta,
    ResourceForm,
    sanitize_resource_form,
    validate_resource_form,
)

router = APIRouter(prefix="/resources", tags=["resources"])


@router.get("", response_model=ResourceListResponse)
async def list_resources(
    framework: FrameworkFacet = Query("all"),
    category: CategoryFacet = Query("all"),
    resource_type: ResourceTypeFacet = Query("all"),
    price_ceiling: float | None = Query(None, ge=0),
    free_only: bool = Query(False),
    recency: RecencyFacet = Query("all"),
    popularity: PopularityFacet = Query("all"),
    sort: SortOption = Query("newest"),
    q: str | None = Query(None, max_length=200),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: AsyncSession = Depends(get_db),
):
    filters = ListingFilters(
        framework=framework,
        category=category,
        resource_type=resource_type,
        price_ceiling=price_ceiling,
        free_only=free_only,
        recency=recency,
        popularity=popularity,
        sort=sort,
    )
    resources, total = await listing_service.list_resources(db, filters, q, page, page_size)
    return resource_list_response(resources, total, page, page_size)


@router.post("/validate", response_model=ResourceFormValidation)
async def validate_resource(
    req: ResourceFormRequest,
    actor: Actor = Depends(get_current_actor),
):
    """Dry-run the submission rules against a form without saving anything."""
    form = ResourceForm(
        title=req.title,
        description=req.description,
        price=req.price,
        resource_type=req.resource_type,
        images=tuple(
            FileMeta(file_name=i.file_name, content_type=i.content_type, size=i.size) for i in req.images
        ),
        resource_file=(
            FileMeta(
                file_name=req.resource_file.file_name,
                content_type=req.resource_file.content_type,
                size=req.resource_file.file_size,
            )
            if req.resource_file else None
        ),
        escrow=EscrowTerms(**req.escrow_info.model_dump()) if req.escrow_info else None,
    )
    errors = validate_resource_form(sanitize_resource_form(form))
    return ResourceFormValidation(valid=not errors, errors=errors)


@router.post("", response_model=ResourceResponse, status_code=201)
async def create_resource(
    req: ResourceCreateRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    resource = await resource_service.create_resource(db, actor, req)
    return resource_to_response(resource)


@router.get("/{resource_id}", response_model=ResourceResponse)
async def get_resource(
    resource_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor | None = Depends(optional_actor),
):
    resource = await resource_service.get_visible_resource(db, actor, resource_id)
    return resource_to_response(resource)


@router.patch("/{resource_id}", response_model=ResourceResponse)
async def update_resource(
    resource_id: str,
    req: ResourceUpdateRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    resource = await resource_service.update_resource(db, actor, resource_id, req)
    return resource_to_response(resource)


@router.delete("/{resource_id}")
async def delete_resource(
    resource_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await resource_service.delete_resource(db, actor, resource_id)
    return {"status": "deleted", "resource_id": resource_id}


@router.post("/{resource_id}/status", response_model=ResourceResponse)
async def change_status(
    resource_id: str,
    req: StatusChangeRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    resource = await lifecycle_service.transition(db, actor, resource_id, req.status, req.reason)
    return resource_to_response(resource)


@router.post("/{resource_id}/images", response_model=ResourceResponse, status_code=201)
async def add_images(
    resource_id: str,
    images: list[ImageUpload],
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    resource = await resource_service.add_images(db, actor, resource_id, images)
    return resource_to_response(resource)


@router.put("/{resource_id}/images/{image_id}/thumbnail", response_model=ResourceResponse)
async def set_thumbnail(
    resource_id: str,
    image_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    resource = await resource_service.set_thumbnail(db, actor, resource_id, image_id)
    return resource_to_response(resource)


@router.delete("/{resource_id}/images/{image_id}", response_model=ResourceResponse)
async def remove_image(
    resource_id: str,
    image_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    resource = await resource_service.remove_image(db, actor, resource_id, image_id)
    return resource_to_response(resource)


@router.put("/{resource_id}/file", response_model=ResourceResponse)
async def attach_file(
    resource_id: str,
    req: ResourceFileUpload,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    resource = await resource_service.attach_file(db, actor, resource_id, req)
    return resource_to_response(resource)


@router.delete("/{resource_id}/file", response_model=ResourceResponse)
async def detach_file(
    resource_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    resource = await resource_service.detach_file(db, actor, resource_id)
    return resource_to_response(resource)


@router.put("/{resource_id}/escrow-info", response_model=ResourceResponse)
async def upsert_escrow_info(
    resource_id: str,
    req: EscrowInfoRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    resource = await resource_service.upsert_escrow_info(db, actor, resource_id, req)
    return resource_to_response(resource)


def resource_to_response(resource) -> ResourceResponse:
    thumbnail = resource.thumbnail
    return ResourceResponse(
        id=resource.id,
        author_id=resource.author_id,
        author_username=resource.author.username if resource.author else None,
        title=resource.title,
        description=resource.description,
        price=float(resource.price),
        resource_type=resource.resource_type,
        framework=resource.framework,
        category=resource.category,
        status=resource.status,
        images=[ResourceImageResponse.model_validate(image) for image in resource.images],
        thumbnail_url=thumbnail.url if thumbnail else None,
        file=ResourceFileResponse.model_validate(resource.file) if resource.file else None,
        escrow_info=EscrowInfoResponse.model_validate(resource.escrow_info) if resource.escrow_info else None,
        download_count=resource.download_count or 0,
        created_at=resource.created_at,
        updated_at=resource.updated_at,
        approved_at=resource.approved_at,
        approved_by=resource.approved_by,
    )


def resource_list_response(resources, total: int, page: int, page_size: int) -> ResourceListResponse:
    return ResourceListResponse(
        total=total,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size) if total else 0,
        results=[resource_to_response(resource) for resource in resources],
    )
