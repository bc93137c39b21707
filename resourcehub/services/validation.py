"""Field and whole-object validation for resource submissions.

Every ``validate_*`` function is side-effect free and returns ``None`` when the
value is acceptable, or a human-readable reason otherwise.
``validate_resource_form`` aggregates them into ``{field: reason}``; an absent
key means the field is valid.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field, replace
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from resourcehub.config import settings

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 100
DESCRIPTION_MIN_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 5000
DELIVERY_INSTRUCTIONS_MAX_LENGTH = 1000
CFX_ID_MAX_LENGTH = 50

RESOURCE_TYPES = ("escrow", "direct")

IMAGE_EXTENSIONS_BY_TYPE = {
    "image/jpeg": (".jpg", ".jpeg"),
    "image/jpg": (".jpg", ".jpeg"),
    "image/png": (".png",),
}
ARCHIVE_TYPES = ("application/zip", "application/x-zip-compressed")
ARCHIVE_EXTENSIONS = (".zip",)

_FORBIDDEN_TITLE_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_CFX_ID_RE = re.compile(r"^[a-zA-Z0-9]+$")
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class FileMeta:
    file_name: str
    content_type: str
    size: int


@dataclass(frozen=True)
class EscrowTerms:
    requires_cfx_id: bool = False
    requires_email: bool = False
    requires_username: bool = False
    delivery_instructions: str | None = None


@dataclass(frozen=True)
class ResourceForm:
    title: str = ""
    description: str = ""
    price: float | Decimal | None = None
    resource_type: str | None = None
    images: tuple[FileMeta, ...] = field(default_factory=tuple)
    resource_file: FileMeta | None = None
    escrow: EscrowTerms | None = None


def _extension(file_name: str) -> str:
    dot = file_name.rfind(".")
    return file_name[dot:].lower() if dot >= 0 else ""


def _format_amount(value: float) -> str:
    return f"{value:.2f}"


def validate_title(title: str | None) -> str | None:
    value = (title or "").strip()
    if not value:
        return "Title is required"
    if len(value) < TITLE_MIN_LENGTH:
        return f"Title must be at least {TITLE_MIN_LENGTH} characters"
    if len(value) > TITLE_MAX_LENGTH:
        return f"Title cannot exceed {TITLE_MAX_LENGTH} characters"
    if _FORBIDDEN_TITLE_CHARS.search(value):
        return "Title contains forbidden characters"
    return None


def validate_description(description: str | None) -> str | None:
    value = (description or "").strip()
    if not value:
        return "Description is required"
    if len(value) < DESCRIPTION_MIN_LENGTH:
        return f"Description must be at least {DESCRIPTION_MIN_LENGTH} characters"
    if len(value) > DESCRIPTION_MAX_LENGTH:
        return f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters"
    return None


def validate_price(price: float | Decimal | None) -> str | None:
    if price is None or isinstance(price, bool):
        return "Price must be a positive number"
    if isinstance(price, float) and math.isnan(price):
        return "Price must be a positive number"
    try:
        amount = Decimal(str(price))
    except InvalidOperation:
        return "Price must be a positive number"
    if not amount.is_finite() or amount <= 0:
        return "Price must be a positive number"
    if amount < Decimal(str(settings.price_min)):
        return f"Minimum price is {_format_amount(settings.price_min)}"
    if amount > Decimal(str(settings.price_max)):
        return f"Maximum price is {_format_amount(settings.price_max)}"
    if amount.normalize().as_tuple().exponent < -2:
        return "Price can have at most 2 decimal places"
    return None


def validate_resource_type(resource_type: str | None) -> str | None:
    if not resource_type:
        return "Resource type is required"
    if resource_type not in RESOURCE_TYPES:
        return "Invalid resource type"
    return None


def validate_image_file(image: FileMeta) -> str | None:
    if image.size > settings.image_max_bytes:
        return f'Image "{image.file_name}" exceeds the {settings.image_max_bytes // (1024 * 1024)} MB limit'
    allowed_extensions = IMAGE_EXTENSIONS_BY_TYPE.get(image.content_type)
    if allowed_extensions is None:
        return f'Image "{image.file_name}" has an unsupported format. Accepted formats: JPG, PNG'
    if _extension(image.file_name) not in allowed_extensions:
        return (
            f'Image "{image.file_name}" has an extension that does not match its format. '
            f"Accepted extensions: {', '.join(allowed_extensions)}"
        )
    return None


def validate_images(images: list[FileMeta] | tuple[FileMeta, ...] | None) -> str | None:
    if not images:
        return "At least one image is required"
    if len(images) > settings.image_max_files:
        return f"You can upload at most {settings.image_max_files} images"
    for image in images:
        error = validate_image_file(image)
        if error:
            return error
    return None


def validate_resource_file(resource_file: FileMeta | None, resource_type: str | None) -> str | None:
    if resource_type == "escrow":
        return None
    if resource_file is None:
        return "A ZIP archive is required for direct-delivery resources"
    if resource_file.size > settings.resource_file_max_bytes:
        return f"File exceeds the {settings.resource_file_max_bytes // (1024 * 1024)} MB limit"
    if resource_file.content_type not in ARCHIVE_TYPES:
        return "File must be a ZIP archive"
    if _extension(resource_file.file_name) not in ARCHIVE_EXTENSIONS:
        return "File must have the .zip extension"
    return None


def validate_delivery_instructions(instructions: str | None) -> str | None:
    if instructions and len(instructions.strip()) > DELIVERY_INSTRUCTIONS_MAX_LENGTH:
        return f"Delivery instructions cannot exceed {DELIVERY_INSTRUCTIONS_MAX_LENGTH} characters"
    return None


def validate_cfx_id(cfx_id: str | None) -> str | None:
    value = (cfx_id or "").strip()
    if not value:
        return "CFX ID is required"
    if len(value) > CFX_ID_MAX_LENGTH or not _CFX_ID_RE.match(value):
        return "CFX ID must be 1 to 50 letters or digits"
    return None


def validate_email(email: str | None) -> str | None:
    value = (email or "").strip()
    if not value:
        return "Email is required"
    if not _EMAIL_RE.match(value):
        return "Email address is not valid"
    return None


def validate_username(username: str | None) -> str | None:
    value = (username or "").strip()
    if not value:
        return "Username is required"
    if len(value) > 100:
        return "Username cannot exceed 100 characters"
    return None


_BUYER_FIELD_VALIDATORS = {
    "cfx_id": validate_cfx_id,
    "email": validate_email,
    "username": validate_username,
}


def validate_escrow_fields(required: list[str], supplied: dict[str, str | None]) -> dict[str, str]:
    """Check buyer-supplied escrow fields.

    Required fields must be present; optional fields that are present must
    still be well-formed.
    """
    errors: dict[str, str] = {}
    for name, validator in _BUYER_FIELD_VALIDATORS.items():
        value = supplied.get(name)
        if name in required or (value is not None and value.strip()):
            error = validator(value)
            if error:
                errors[name] = error
    return errors


def validate_resource_form(form: ResourceForm) -> dict[str, str]:
    """Run every field validator and collect the failures."""
    checks = {
        "title": validate_title(form.title),
        "description": validate_description(form.description),
        "price": validate_price(form.price),
        "resource_type": validate_resource_type(form.resource_type),
        "images": validate_images(form.images),
        "resource_file": validate_resource_file(form.resource_file, form.resource_type),
    }
    if form.resource_type == "escrow" and form.escrow is not None:
        checks["delivery_instructions"] = validate_delivery_instructions(form.escrow.delivery_instructions)
    return {name: error for name, error in checks.items() if error}


def round_price(price: float | Decimal) -> Decimal:
    return Decimal(str(price)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def sanitize_resource_form(form: ResourceForm) -> ResourceForm:
    """Normalize a submission before persistence."""
    price = form.price
    if price is not None and not isinstance(price, bool) and Decimal(str(price)).is_finite():
        price = round_price(price)
    escrow = form.escrow
    if escrow is not None:
        escrow = replace(escrow, delivery_instructions=(escrow.delivery_instructions or "").strip())
    return replace(
        form,
        title=(form.title or "").strip(),
        description=(form.description or "").strip(),
        price=price,
        escrow=escrow,
    )
