"""Cart routes. The cart always belongs to the calling user."""

from fastapi import APIRouter
from protean.utils.globals import current_domain

from storefront.api.identity import CurrentCaller
from storefront.api.schemas import AddToCartRequest, CartResponse, RemoveFromCartRequest, UpdateCartItemRequest
from storefront.cart.cart import Cart
from storefront.cart.items import AddToCart, RemoveFromCart, UpdateCartItem

cart_router = APIRouter(prefix="/cart", tags=["cart"])


def _cart_of(user_id) -> CartResponse:
    return CartResponse.from_cart(current_domain.repository_for(Cart).get_by_user(user_id))


@cart_router.get("", response_model=CartResponse)
async def get_cart(caller: CurrentCaller) -> CartResponse:
    return _cart_of(caller.user_id)


@cart_router.post("/add", status_code=201, response_model=CartResponse)
async def add_to_cart(body: AddToCartRequest, caller: CurrentCaller) -> CartResponse:
    command = AddToCart(
        user_id=caller.user_id,
        product_id=body.product_id,
        size=body.size,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_of(caller.user_id)


@cart_router.put("/update", response_model=CartResponse)
async def update_cart_item(body: UpdateCartItemRequest, caller: CurrentCaller) -> CartResponse:
    command = UpdateCartItem(user_id=caller.user_id, item_id=body.item_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return _cart_of(caller.user_id)


@cart_router.delete("/remove", response_model=CartResponse)
async def remove_from_cart(body: RemoveFromCartRequest, caller: CurrentCaller) -> CartResponse:
    command = RemoveFromCart(
        user_id=caller.user_id,
        item_id=body.item_id,
        product_id=body.product_id,
        size=body.size,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_of(caller.user_id)
