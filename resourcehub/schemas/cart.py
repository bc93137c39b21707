from pydantic import BaseModel, Field


class AddToCartRequest(BaseModel):
    resource_id: str
    quantity: int = Field(default=1, ge=1)


class CartItemResponse(BaseModel):
    id: str
    resource_id: str
    resource_title: str
    resource_thumbnail_url: str | None = None
    author_username: str | None = None
    quantity: int
    price_at_time: float
    subtotal: float


class CartResponse(BaseModel):
    items: list[CartItemResponse]
    item_count: int
    total: float
