"""
kart_api.api.routers.cart

Cart endpoints for the authenticated user.

Responsibilities:
- Add one unit of an item/size, overwrite a quantity, read the cart.
- Return the cart verbatim as `{itemId: {size: quantity}}`.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from starlette.status import HTTP_201_CREATED

from kart_api.api.deps import cart_from_app
from kart_api.auth.deps import get_principal
from kart_api.auth.models import Principal
from kart_api.errors import ValidationError
from kart_api.services.cart_service import CartAggregator
from kart_api.services.cart_state import CartItems

router = APIRouter(prefix="/api/cart", tags=["cart"])


class AddToCartRequest(BaseModel):
    # `token` may also be present in the body as a credential channel.
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    item_id: str = Field(default="", alias="itemId")
    size: str = ""


class UpdateCartRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    item_id: str = Field(default="", alias="itemId")
    size: str = ""
    # Checked by the aggregator (non-negative int, no coercion).
    quantity: Any = None


@router.post("/add", status_code=HTTP_201_CREATED)
async def add_to_cart(
    body: AddToCartRequest,
    principal: Principal = Depends(get_principal),
    cart: CartAggregator = Depends(cart_from_app),
) -> dict[str, Any]:
    items = await cart.add(principal.subject, body.item_id, body.size)
    return {"message": "Added to cart", "cartData": items}


@router.post("/update")
async def update_cart(
    body: UpdateCartRequest,
    principal: Principal = Depends(get_principal),
    cart: CartAggregator = Depends(cart_from_app),
) -> dict[str, Any]:
    if not body.item_id or not body.size or body.quantity is None:
        raise ValidationError("itemId, size, and quantity are required")
    items = await cart.update(principal.subject, body.item_id, body.size, body.quantity)
    return {"message": "Cart updated", "cartData": items}


@router.api_route("/get", methods=["GET", "POST"])
async def get_user_cart(
    principal: Principal = Depends(get_principal),
    cart: CartAggregator = Depends(cart_from_app),
) -> CartItems:
    return await cart.read(principal.subject)
