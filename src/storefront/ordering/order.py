"""Order aggregate: the immutable record of a purchase and its status.

Line items are snapshots (name, size, quantity, unit price at the moment of
placement), so later catalogue edits never alter a placed order. After
placement only the status moves, and only forward:

    pending → processing → shipped → completed
    pending → cancelled
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.domain import storefront
from storefront.ordering.delivery import DeliveryMethod, normalise_delivery_method
from storefront.ordering.events import OrderPlaced, OrderStatusChanged
from storefront.ordering.wilaya import canonical_wilaya

# Declared totals may differ from the computed ones by rounding only
_MONEY_TOLERANCE = 0.01


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: {OrderStatus.COMPLETED},
    OrderStatus.COMPLETED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


@storefront.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=200)
    size = String(required=True, max_length=20)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)

    def line_total(self) -> float:
        return self.unit_price * self.quantity

    def snapshot(self) -> dict:
        return {
            "product_id": str(self.product_id),
            "product_name": self.product_name,
            "size": self.size,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
        }


@storefront.aggregate
class Order:
    user_id = Identifier(required=True)
    items = HasMany(OrderItem)
    delivery_method = String(choices=DeliveryMethod, required=True)
    wilaya = String(required=True, max_length=50)
    address = String(max_length=500)
    subtotal = Float(required=True, min_value=0.0)
    delivery_fee = Float(required=True, min_value=0.0)
    total = Float(required=True, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    placed_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        user_id,
        lines,
        delivery_method,
        wilaya,
        delivery_fee,
        declared_subtotal,
        declared_total,
        address=None,
    ):
        """Create a pending order from snapshot lines.

        Args:
            lines: dicts with product_id, product_name, size, quantity, unit_price.
            delivery_fee: the server-side fee for this method and wilaya.
            declared_subtotal, declared_total: what the client computed; both
                must agree with the snapshot and the fee.
        """
        if not lines:
            raise ValidationError({"items": ["An order needs at least one item"]})

        method = normalise_delivery_method(delivery_method)
        address = (address or "").strip() or None
        if method == DeliveryMethod.ADDRESS.value and not address:
            raise ValidationError({"address": ["An address is required for home delivery"]})

        subtotal = round(sum(line["unit_price"] * line["quantity"] for line in lines), 2)
        total = round(subtotal + delivery_fee, 2)
        errors = {}
        if abs(float(declared_subtotal) - subtotal) > _MONEY_TOLERANCE:
            errors["subtotal"] = [f"Subtotal does not match the items ordered (expected {subtotal:.2f})"]
        if abs(float(declared_total) - total) > _MONEY_TOLERANCE:
            errors["total"] = [f"Total must equal subtotal plus delivery fee (expected {total:.2f})"]
        if errors:
            raise ValidationError(errors)

        now = datetime.now(UTC)
        order = cls(
            user_id=user_id,
            delivery_method=method,
            wilaya=canonical_wilaya(wilaya),
            address=address,
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            total=total,
            status=OrderStatus.PENDING.value,
            placed_at=now,
            updated_at=now,
        )
        for line in lines:
            order.add_items(
                OrderItem(
                    product_id=line["product_id"],
                    product_name=line["product_name"],
                    size=line["size"],
                    quantity=line["quantity"],
                    unit_price=line["unit_price"],
                )
            )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id),
                items=json.dumps([item.snapshot() for item in order.items]),
                delivery_method=method,
                wilaya=order.wilaya,
                address=address,
                subtotal=subtotal,
                delivery_fee=delivery_fee,
                total=total,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target):
        current = OrderStatus(self.status)
        if target not in _VALID_TRANSITIONS[current]:
            raise ValidationError({"status": [f"Cannot move order from {current.value} to {target.value}"]})

    def transition_to(self, new_status):
        try:
            target = OrderStatus(new_status)
        except ValueError:
            allowed = ", ".join(s.value for s in OrderStatus)
            raise ValidationError({"status": [f"Status must be one of: {allowed}"]}) from None

        self._assert_can_transition(target)

        previous = self.status
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                user_id=str(self.user_id),
                previous_status=previous,
                new_status=target.value,
                changed_at=now,
            )
        )

    def belongs_to(self, user_id) -> bool:
        return str(self.user_id) == str(user_id)

