from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from resourcehub.models.profile import UserRole
from resourcehub.models.seller_request import SellerRequestStatus
from resourcehub.schemas.order import OrderResponse
from resourcehub.schemas.resource import ResourceResponse


class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    username: str = Field(..., min_length=2, max_length=50)


class LoginRequest(BaseModel):
    email: str
    password: str


class ProfileResponse(BaseModel):
    id: str
    email: str
    username: str
    role: UserRole
    created_at: datetime

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    profile: ProfileResponse


class SellerRequestCreate(BaseModel):
    business_name: str = Field(..., min_length=1, max_length=100)
    business_type: str = Field(..., min_length=1, max_length=50)
    motivation: str = Field(..., min_length=1, max_length=2000)


class SellerRequestDecision(BaseModel):
    status: Literal["approved", "rejected"]


class SellerRequestResponse(BaseModel):
    id: str
    user_id: str
    username: str | None = None
    status: SellerRequestStatus
    business_name: str
    business_type: str
    motivation: str
    resolved_by: str | None = None
    created_at: datetime
    updated_at: datetime


class SellerRequestListResponse(BaseModel):
    total: int
    page: int
    page_size: int
    results: list[SellerRequestResponse]


class NotificationResponse(BaseModel):
    id: str
    type: str
    title: str
    message: str
    order_id: str | None = None
    resource_id: str | None = None
    is_read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationListResponse(BaseModel):
    unread_count: int
    results: list[NotificationResponse]


class UserListResponse(BaseModel):
    total: int
    page: int
    page_size: int
    results: list[ProfileResponse]


class RoleChangeRequest(BaseModel):
    role: UserRole


class UserDetailResponse(BaseModel):
    profile: ProfileResponse
    resources: list[ResourceResponse]
    purchases: list[OrderResponse]
