"""BDD tests for order placement and stock withdrawal."""

import json

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then, when

from storefront.catalogue.product import Product
from storefront.errors import InsufficientStockError
from storefront.notification.inbox import notifications_for
from storefront.ordering.delivery import delivery_fee_for
from storefront.ordering.order import Order
from storefront.ordering.placement import PlaceOrder, place_order

scenarios("features/order_placement.feature")


@pytest.fixture()
def shop():
    return {"products": {}, "placed": [], "error": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a "{name}" priced {price:d} with {quantity:d} units in size "{size}"'))
def listed_product(shop, make_product, name, price, quantity, size):
    shop["products"][name] = make_product(name=name, price=float(price), stock=[{"size": size, "quantity": quantity}])


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('"{user_id}" orders {quantity:d} of "{name}" in size "{size}" for desk pickup in "{wilaya}"'))
def order_product(shop, user_id, quantity, name, size, wilaya):
    product = current_domain.repository_for(Product).get(shop["products"][name])
    subtotal = product.price * quantity
    command = PlaceOrder(
        user_id=user_id,
        items=json.dumps([{"product_id": str(product.id), "size": size, "quantity": quantity}]),
        delivery_method="desk",
        wilaya=wilaya,
        subtotal=subtotal,
        total=subtotal + delivery_fee_for("desk", wilaya),
    )
    try:
        shop["placed"].append(place_order(command)["order_id"])
    except InsufficientStockError as exc:
        shop["error"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the order is placed with a total of {total:d}"))
def order_placed(shop, total):
    assert shop["error"] is None
    order = current_domain.repository_for(Order).get(shop["placed"][-1])
    assert order.total == float(total)


@then("the order is rejected for insufficient stock")
def order_rejected(shop):
    assert isinstance(shop["error"], InsufficientStockError)


@then(parsers.cfparse('"{name}" has {quantity:d} units left in size "{size}"'))
def units_left(shop, name, quantity, size):
    product = current_domain.repository_for(Product).get(shop["products"][name])
    assert product.available(size) == quantity


@then(parsers.cfparse('"{user_id}" has a notification saying the order is pending confirmation'))
def pending_notification(shop, user_id):
    messages = [n.message for n in notifications_for(user_id)]
    assert messages == [f"Your order #{shop['placed'][-1]} is pending confirmation"]
