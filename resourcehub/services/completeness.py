"""Completeness predicate: may a resource leave ``draft`` for moderation?"""

from __future__ import annotations

from typing import Any

from resourcehub.models.resource import Resource
from resourcehub.services.validation import (
    EscrowTerms,
    FileMeta,
    ResourceForm,
    validate_delivery_instructions,
    validate_description,
    validate_price,
    validate_resource_file,
    validate_resource_type,
    validate_title,
)


def form_from_resource(resource: Resource, changes: dict[str, Any] | None = None) -> ResourceForm:
    """Merge the persisted resource with proposed field changes."""
    values = {
        "title": resource.title,
        "description": resource.description,
        "price": resource.price,
        "resource_type": resource.resource_type.value if resource.resource_type else None,
    }
    for key, value in (changes or {}).items():
        if key in values:
            values[key] = value.value if hasattr(value, "value") else value

    images = tuple(
        FileMeta(file_name=image.file_name, content_type=image.content_type, size=image.size)
        for image in resource.images
    )
    resource_file = None
    if resource.file is not None:
        resource_file = FileMeta(
            file_name=resource.file.file_name,
            content_type=resource.file.content_type,
            size=resource.file.file_size,
        )
    escrow = None
    if resource.escrow_info is not None:
        info = resource.escrow_info
        escrow = EscrowTerms(
            requires_cfx_id=info.requires_cfx_id,
            requires_email=info.requires_email,
            requires_username=info.requires_username,
            delivery_instructions=info.delivery_instructions,
        )
    return ResourceForm(images=images, resource_file=resource_file, escrow=escrow, **values)


def missing_requirements(form: ResourceForm, thumbnail_count: int | None = None) -> dict[str, str]:
    """Return ``{field: reason}`` for every unmet submission requirement."""
    checks = {
        "title": validate_title(form.title),
        "description": validate_description(form.description),
        "price": validate_price(form.price),
        "resource_type": validate_resource_type(form.resource_type),
    }
    if form.resource_type == "direct":
        checks["resource_file"] = validate_resource_file(form.resource_file, form.resource_type)
    elif form.resource_type == "escrow":
        if form.escrow is None:
            checks["escrow_info"] = "Escrow resources need delivery requirements before submission"
        else:
            checks["delivery_instructions"] = validate_delivery_instructions(form.escrow.delivery_instructions)
    if form.images and thumbnail_count is not None and thumbnail_count != 1:
        checks["images"] = "Exactly one image must be marked as thumbnail"
    return {name: error for name, error in checks.items() if error}


def resource_missing_requirements(resource: Resource, changes: dict[str, Any] | None = None) -> dict[str, str]:
    form = form_from_resource(resource, changes)
    thumbnails = sum(1 for image in resource.images if image.is_thumbnail)
    return missing_requirements(form, thumbnail_count=thumbnails)


def is_complete(resource: Resource, changes: dict[str, Any] | None = None) -> bool:
    return not resource_missing_requirements(resource, changes)
