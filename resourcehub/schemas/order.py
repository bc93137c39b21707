from datetime import datetime

from pydantic import BaseModel, Field

from resourcehub.models.order import OrderStatus
from resourcehub.models.resource import ResourceType


class EscrowFields(BaseModel):
    cfx_id: str | None = Field(default=None, max_length=50)
    email: str | None = Field(default=None, max_length=255)
    username: str | None = Field(default=None, max_length=100)


class CheckoutLine(BaseModel):
    resource_id: str
    escrow_fields: EscrowFields | None = None


class CheckoutRequest(BaseModel):
    items: list[CheckoutLine] = Field(..., min_length=1, max_length=50)


class CartCheckoutRequest(BaseModel):
    escrow_fields: EscrowFields | None = None


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=1000)


class OrderResponse(BaseModel):
    id: str
    buyer_id: str
    resource_id: str
    resource_title: str | None = None
    resource_type: ResourceType | None = None
    amount: float
    status: OrderStatus
    buyer_cfx_id: str | None = None
    buyer_email: str | None = None
    buyer_username: str | None = None
    created_at: datetime
    completed_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None


class OrderListResponse(BaseModel):
    total: int
    page: int
    page_size: int
    results: list[OrderResponse]


class CheckoutResponse(BaseModel):
    orders: list[OrderResponse]
    total: float


class DownloadResponse(BaseModel):
    order_id: str
    order_status: OrderStatus
    resource_title: str
    download_url: str
    file_name: str
