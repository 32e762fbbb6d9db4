"""Order routes: placement and history for customers, status changes for admins."""

import json

from fastapi import APIRouter
from protean.utils.globals import current_domain

from storefront.api.identity import AdminCaller, CurrentCaller
from storefront.api.schemas import (
    CheckoutRequest,
    OrderResponse,
    PlacedOrderResponse,
    PlaceOrderRequest,
    StockUpdateResponse,
    UpdateOrderStatusRequest,
)
from storefront.ordering.history import all_orders, order_for, orders_for_user
from storefront.ordering.order import Order
from storefront.ordering.placement import CheckoutCart, PlaceOrder, place_order
from storefront.ordering.status import UpdateOrderStatus

order_router = APIRouter(prefix="/orders", tags=["orders"])


def _placed(result) -> PlacedOrderResponse:
    order = current_domain.repository_for(Order).get(result["order_id"])
    return PlacedOrderResponse(
        order=OrderResponse.from_order(order),
        stock_updates=[StockUpdateResponse(**update) for update in result["stock_updates"]],
    )


@order_router.post("", status_code=201, response_model=PlacedOrderResponse)
async def create_order(body: PlaceOrderRequest, caller: CurrentCaller) -> PlacedOrderResponse:
    command = PlaceOrder(
        user_id=caller.user_id,
        items=json.dumps([item.model_dump() for item in body.items]),
        delivery_method=body.delivery_method,
        wilaya=body.wilaya,
        address=body.address,
        subtotal=body.subtotal,
        total=body.total,
    )
    return _placed(place_order(command))


@order_router.post("/checkout", status_code=201, response_model=PlacedOrderResponse)
async def checkout(body: CheckoutRequest, caller: CurrentCaller) -> PlacedOrderResponse:
    command = CheckoutCart(
        user_id=caller.user_id,
        delivery_method=body.delivery_method,
        wilaya=body.wilaya,
        address=body.address,
        subtotal=body.subtotal,
        total=body.total,
    )
    return _placed(place_order(command))


@order_router.get("", response_model=list[OrderResponse])
async def list_my_orders(caller: CurrentCaller) -> list[OrderResponse]:
    return [OrderResponse.from_order(o) for o in orders_for_user(caller.user_id)]


@order_router.get("/admin", response_model=list[OrderResponse])
async def list_all_orders(caller: AdminCaller, status: str | None = None) -> list[OrderResponse]:
    return [OrderResponse.from_order(o) for o in all_orders(status=status)]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, caller: CurrentCaller) -> OrderResponse:
    return OrderResponse.from_order(order_for(order_id, caller.user_id, is_admin=caller.is_admin))


@order_router.put("/{order_id}", response_model=OrderResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest, caller: AdminCaller) -> OrderResponse:
    current_domain.process(UpdateOrderStatus(order_id=order_id, status=body.status), asynchronous=False)
    return OrderResponse.from_order(current_domain.repository_for(Order).get(order_id))
