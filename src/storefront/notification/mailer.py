"""Order confirmation email, sent once the order has committed."""

import json

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.channel import EMAIL, get_channel
from storefront.domain import storefront
from storefront.identity.user import User
from storefront.ordering.events import OrderPlaced
from storefront.ordering.order import Order

logger = structlog.get_logger(__name__)


def render_confirmation(customer_name, event: OrderPlaced) -> tuple[str, str]:
    """Return (subject, body) for an order confirmation."""
    items = json.loads(event.items)
    lines = [
        f"- {item['product_name']} (size: {item['size']}) x {item['quantity']} @ {item['unit_price']:.2f}"
        for item in items
    ]
    destination = event.wilaya if not event.address else f"{event.address}, {event.wilaya}"
    body = "\n".join(
        [
            f"Hello {customer_name},",
            "",
            f"Thank you for your order #{event.order_id}. It is pending confirmation.",
            "",
            *lines,
            "",
            f"Subtotal: {event.subtotal:.2f}",
            f"Delivery ({event.delivery_method}): {event.delivery_fee:.2f}",
            f"Total: {event.total:.2f}",
            f"Deliver to: {destination}",
        ]
    )
    subject = f"Order confirmation #{str(event.order_id)[-8:]}"
    return subject, body


@storefront.event_handler(part_of=Order)
class OrderConfirmationMailer:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        try:
            user = current_domain.repository_for(User).get(str(event.user_id))
        except ObjectNotFoundError:
            logger.warning("No directory entry for customer, skipping confirmation email", user_id=str(event.user_id))
            return

        try:
            subject, body = render_confirmation(user.name, event)
            result = get_channel(EMAIL).send(to=user.email, subject=subject, body=body)
        except Exception:
            logger.exception("Order confirmation email failed", order_id=str(event.order_id))
            return

        if result.get("status") != "sent":
            logger.warning(
                "Order confirmation email not delivered",
                order_id=str(event.order_id),
                error=result.get("error"),
            )
