"""Writes inbox notifications when orders are placed or change status.

Runs after the order has committed. Each recipient's notification is saved
on its own; a failure for one recipient is logged and the rest still get
theirs. A user is never notified twice about the same order and type, so a
redelivered event does not duplicate messages.
"""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.identity.registration import admins, display_name
from storefront.notification.notification import Notification, NotificationType
from storefront.ordering.events import OrderPlaced, OrderStatusChanged
from storefront.ordering.order import Order, OrderStatus

logger = structlog.get_logger(__name__)

_STATUS_MESSAGES = {
    OrderStatus.PROCESSING.value: (
        NotificationType.ORDER_ACCEPTED,
        "Your order #{order_id} has been accepted and is being processed",
    ),
    OrderStatus.CANCELLED.value: (NotificationType.ORDER_REJECTED, "Your order #{order_id} has been cancelled"),
    OrderStatus.SHIPPED.value: (NotificationType.ORDER_SHIPPED, "Your order #{order_id} has been shipped"),
    OrderStatus.COMPLETED.value: (NotificationType.ORDER_COMPLETED, "Your order #{order_id} has been completed"),
}


def _already_notified(user_id, order_id, notification_type) -> bool:
    repo = current_domain.repository_for(Notification)
    return bool(
        repo._dao.query.filter(
            user_id=str(user_id),
            related_order_id=str(order_id),
            notification_type=notification_type,
        )
        .all()
        .items
    )


def _notify(user_id, message, notification_type, order_id) -> bool:
    """Save one notification; returns False (after logging) if it could not be written."""
    try:
        if _already_notified(user_id, order_id, notification_type.value):
            logger.info(
                "Notification already recorded, skipping",
                user_id=str(user_id),
                order_id=str(order_id),
                notification_type=notification_type.value,
            )
            return True

        notification = Notification.create(
            user_id=str(user_id),
            message=message,
            notification_type=notification_type.value,
            related_order_id=str(order_id),
        )
        current_domain.repository_for(Notification).add(notification)
        return True
    except Exception:
        logger.exception(
            "Failed to record notification",
            user_id=str(user_id),
            order_id=str(order_id),
            notification_type=notification_type.value,
        )
        return False


@storefront.event_handler(part_of=Order)
class OrderNotifier:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        order_id = str(event.order_id)
        _notify(
            event.user_id,
            f"Your order #{order_id} is pending confirmation",
            NotificationType.ORDER,
            order_id,
        )

        try:
            recipients = admins()
            customer = display_name(event.user_id)
        except Exception:
            logger.exception("Could not look up admins for new order", order_id=order_id)
            return

        for admin in recipients:
            if str(admin.id) == str(event.user_id):
                continue
            _notify(admin.id, f"New order #{order_id} placed by user {customer}", NotificationType.ORDER, order_id)

    @handle(OrderStatusChanged)
    def on_order_status_changed(self, event: OrderStatusChanged) -> None:
        entry = _STATUS_MESSAGES.get(event.new_status)
        if entry is None:
            logger.warning("No notification defined for order status", new_status=event.new_status)
            return

        notification_type, template = entry
        _notify(event.user_id, template.format(order_id=event.order_id), notification_type, event.order_id)
