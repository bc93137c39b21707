from datetime import datetime

from pydantic import BaseModel, Field

from resourcehub.config import settings
from resourcehub.models.resource import Category, Framework, ResourceStatus, ResourceType


class ImageUpload(BaseModel):
    url: str = Field(..., min_length=1, max_length=1024)
    file_name: str = Field(..., min_length=1, max_length=255)
    content_type: str = Field(..., min_length=1, max_length=50)
    size: int = Field(..., ge=0)


class ResourceFileUpload(BaseModel):
    file_url: str = Field(..., min_length=1, max_length=1024)
    file_name: str = Field(..., min_length=1, max_length=255)
    content_type: str = Field(..., min_length=1, max_length=100)
    file_size: int = Field(..., ge=0)


class EscrowInfoRequest(BaseModel):
    requires_cfx_id: bool = False
    requires_email: bool = False
    requires_username: bool = False
    delivery_instructions: str = ""


class ResourceCreateRequest(BaseModel):
    """Draft payload. Submission rules are enforced when moving to ``pending``."""

    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=5000)
    price: float = Field(default=0, ge=0, le=settings.price_max)
    resource_type: ResourceType
    framework: Framework | None = None
    category: Category | None = None
    images: list[ImageUpload] = []
    resource_file: ResourceFileUpload | None = None
    escrow_info: EscrowInfoRequest | None = None


class ResourceUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=5000)
    price: float | None = Field(default=None, ge=0, le=settings.price_max)
    resource_type: ResourceType | None = None
    framework: Framework | None = None
    category: Category | None = None


class StatusChangeRequest(BaseModel):
    status: ResourceStatus
    reason: str | None = Field(default=None, max_length=1000)


class ResourceFormRequest(BaseModel):
    """Full submission form checked by ``POST /resources/validate``."""

    title: str = ""
    description: str = ""
    price: float | None = None
    resource_type: str | None = None
    images: list[ImageUpload] = []
    resource_file: ResourceFileUpload | None = None
    escrow_info: EscrowInfoRequest | None = None


class ResourceFormValidation(BaseModel):
    valid: bool
    errors: dict[str, str]


class ResourceImageResponse(BaseModel):
    id: str
    url: str
    file_name: str
    is_thumbnail: bool
    upload_order: int

    model_config = {"from_attributes": True}


class ResourceFileResponse(BaseModel):
    file_name: str
    file_size: int
    content_type: str

    model_config = {"from_attributes": True}


class EscrowInfoResponse(BaseModel):
    requires_cfx_id: bool
    requires_email: bool
    requires_username: bool
    delivery_instructions: str

    model_config = {"from_attributes": True}


class ResourceResponse(BaseModel):
    id: str
    author_id: str
    author_username: str | None = None
    title: str
    description: str
    price: float
    resource_type: ResourceType
    framework: Framework | None = None
    category: Category | None = None
    status: ResourceStatus
    images: list[ResourceImageResponse] = []
    thumbnail_url: str | None = None
    file: ResourceFileResponse | None = None
    escrow_info: EscrowInfoResponse | None = None
    download_count: int
    created_at: datetime
    updated_at: datetime
    approved_at: datetime | None = None
    approved_by: str | None = None


class ResourceListResponse(BaseModel):
    total: int
    page: int
    page_size: int
    total_pages: int
    results: list[ResourceResponse]
