"""Order placement: validate every line, then commit order, stock and cart together.

The handler runs in one Unit of Work. Every product is loaded and every
(product, size) demand checked before anything changes; only then is the
order created, stock withdrawn and the cart emptied.

``place_order`` runs that Unit of Work under the stock lock, so a competing
placement waits and then sees the committed stock. Products are also saved
with their version; when another process got there first the save fails with
``ExpectedVersionError`` and the placement is re-run against fresh stock.
"""

import json
from collections import defaultdict

import structlog
from protean import handle
from protean.exceptions import ExpectedVersionError, ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalogue.product import Product
from storefront.catalogue.stock import exclusive_stock
from storefront.domain import storefront
from storefront.ordering.delivery import delivery_fee_for
from storefront.ordering.order import Order

logger = structlog.get_logger(__name__)

MAX_PLACEMENT_ATTEMPTS = 3


@storefront.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    items = Text(required=True)  # JSON: [{"product_id", "size", "quantity"}]
    delivery_method = String(required=True, max_length=20)
    wilaya = String(required=True, max_length=50)
    address = String(max_length=500)
    subtotal = Float(required=True, min_value=0.0)
    total = Float(required=True, min_value=0.0)


@storefront.command(part_of="Order")
class CheckoutCart:
    """Place an order for exactly what is in the user's cart."""

    user_id = Identifier(required=True)
    delivery_method = String(required=True, max_length=20)
    wilaya = String(required=True, max_length=50)
    address = String(max_length=500)
    subtotal = Float(required=True, min_value=0.0)
    total = Float(required=True, min_value=0.0)


def _requested_lines(raw) -> list[dict]:
    """Parse and check the requested lines; every problem is reported at once."""
    try:
        items = json.loads(raw) if isinstance(raw, str) else raw
    except json.JSONDecodeError:
        raise ValidationError({"items": ["Items must be a JSON list"]}) from None

    if not isinstance(items, list) or not items:
        raise ValidationError({"items": ["An order needs at least one item"]})

    lines, errors = [], []
    for position, item in enumerate(items):
        if not isinstance(item, dict):
            errors.append(f"Item {position} must be an object")
            continue
        missing = [key for key in ("product_id", "size", "quantity") if not item.get(key)]
        if missing:
            errors.append(f"Item {position} is missing {', '.join(missing)}")
            continue
        quantity = item["quantity"]
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            errors.append(f"Item {position} quantity must be a whole number of at least 1")
            continue
        lines.append({"product_id": str(item["product_id"]), "size": str(item["size"]), "quantity": quantity})

    if errors:
        raise ValidationError({"items": errors})
    return lines


@storefront.command_handler(part_of=Order)
class OrderPlacementHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        return _place(command, _requested_lines(command.items))

    @handle(CheckoutCart)
    def checkout_cart(self, command):
        cart = current_domain.repository_for(Cart).get_by_user(command.user_id)
        if cart.is_empty():
            raise ValidationError({"cart": ["Cart is empty"]})

        lines = [
            {"product_id": str(item.product_id), "size": item.size, "quantity": item.quantity}
            for item in cart.items
        ]
        return _place(command, lines)


def _place(command, lines) -> dict:
    product_repo = current_domain.repository_for(Product)

    # Validate everything before touching anything
    products = {}
    for line in lines:
        if line["product_id"] not in products:
            products[line["product_id"]] = product_repo.get(line["product_id"])

    demand = defaultdict(int)
    for line in lines:
        demand[(line["product_id"], line["size"])] += line["quantity"]

    for (product_id, size), quantity in demand.items():
        product = products[product_id]
        if not product.is_active():
            raise ValidationError({"items": [f"{product.name} is no longer available"]})
        product.ensure_available(size, quantity)

    fee = delivery_fee_for(command.delivery_method, command.wilaya)
    snapshot = [
        {
            **line,
            "product_name": products[line["product_id"]].name,
            "unit_price": products[line["product_id"]].price,
        }
        for line in lines
    ]
    order = Order.place(
        user_id=command.user_id,
        lines=snapshot,
        delivery_method=command.delivery_method,
        wilaya=command.wilaya,
        address=command.address,
        delivery_fee=fee,
        declared_subtotal=command.subtotal,
        declared_total=command.total,
    )

    # Commit: order, stock withdrawals, emptied cart
    stock_updates = []
    for line in lines:
        remaining = products[line["product_id"]].withdraw(line["size"], line["quantity"])
        stock_updates.append({"product_id": line["product_id"], "size": line["size"], "new_quantity": remaining})

    current_domain.repository_for(Order).add(order)
    for product in products.values():
        product_repo.add(product)

    cart_repo = current_domain.repository_for(Cart)
    cart = cart_repo.find_by_user(command.user_id)
    if cart is not None and not cart.is_empty():
        cart.clear()
        cart_repo.add(cart)

    logger.info(
        "Order placed",
        order_id=str(order.id),
        user_id=str(command.user_id),
        lines=len(lines),
        total=order.total,
    )
    return {"order_id": str(order.id), "stock_updates": stock_updates}


def place_order(command, attempts=MAX_PLACEMENT_ATTEMPTS) -> dict:
    """Process a PlaceOrder/CheckoutCart command, re-running it if it lost a stock race."""
    for attempt in range(1, attempts + 1):
        try:
            with exclusive_stock():
                return current_domain.process(command, asynchronous=False)
        except ExpectedVersionError:
            if attempt == attempts:
                logger.error("Order placement kept losing stock races", user_id=str(command.user_id))
                raise
            logger.warning(
                "Stock changed while placing order, retrying",
                user_id=str(command.user_id),
                attempt=attempt,
            )
