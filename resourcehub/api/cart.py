from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from resourcehub.core.auth import Actor, get_current_actor
from resourcehub.database import get_db
from resourcehub.schemas.cart import AddToCartRequest, CartItemResponse, CartResponse
from resourcehub.services.cart_service import Cart

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartResponse)
async def get_cart(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    cart = await Cart(db, actor).load()
    return _cart_to_response(cart)


@router.post("/items", response_model=CartResponse, status_code=201)
async def add_item(
    req: AddToCartRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    cart = await Cart(db, actor).add(req.resource_id, req.quantity)
    return _cart_to_response(cart)


@router.delete("/items/{item_id}", response_model=CartResponse)
async def remove_item(
    item_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    cart = await Cart(db, actor).remove(item_id)
    return _cart_to_response(cart)


@router.delete("", response_model=CartResponse)
async def clear_cart(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    cart = await Cart(db, actor).clear()
    return _cart_to_response(cart)


def _cart_to_response(cart: Cart) -> CartResponse:
    items = []
    for item in cart.items:
        resource = item.resource
        thumbnail = resource.thumbnail
        items.append(CartItemResponse(
            id=item.id,
            resource_id=item.resource_id,
            resource_title=resource.title,
            resource_thumbnail_url=thumbnail.url if thumbnail else None,
            author_username=resource.author.username if resource.author else None,
            quantity=item.quantity,
            price_at_time=float(item.price_at_time),
            subtotal=float(item.subtotal),
        ))
    return CartResponse(items=items, item_count=cart.item_count, total=float(cart.total))
