"""Domain events for orders and delivery pricing.

``OrderPlaced`` and ``OrderStatusChanged`` are the durable facts the
notification and email handlers react to after the order has committed.
"""

from protean.fields import DateTime, Float, Identifier, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A customer placed an order and its stock was withdrawn."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of snapshot line dicts
    delivery_method = String(required=True)
    wilaya = String(required=True)
    address = String()
    subtotal = Float(required=True)
    delivery_fee = Float(required=True)
    total = Float(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    """An admin moved an order along its lifecycle."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@storefront.event(part_of="DeliveryPricing")
class DeliveryPricesUpdated:
    __version__ = 1

    pricing_id = Identifier(required=True)
    prices = Text(required=True)  # JSON
    updated_at = DateTime(required=True)
