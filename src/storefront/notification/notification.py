"""Notification aggregate: one message in a user's inbox.

Notifications are append-only. The single mutable bit is the read flag,
and only the owning user may set it.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import Boolean, DateTime, Identifier, String, Text

from storefront.domain import storefront
from storefront.errors import ForbiddenError
from storefront.notification.events import NotificationCreated, NotificationRead


class NotificationType(Enum):
    ORDER = "order"
    ORDER_ACCEPTED = "order_accepted"
    ORDER_REJECTED = "order_rejected"
    ORDER_SHIPPED = "order_shipped"
    ORDER_COMPLETED = "order_completed"
    SYSTEM = "system"


@storefront.aggregate
class Notification:
    user_id: Identifier(required=True)
    message: Text(required=True)
    notification_type: String(choices=NotificationType, default=NotificationType.SYSTEM.value)
    related_order_id: Identifier()
    is_read: Boolean(default=False)
    created_at: DateTime()
    read_at: DateTime()

    @classmethod
    def create(cls, user_id, message, notification_type=NotificationType.SYSTEM.value, related_order_id=None):
        now = datetime.now(UTC)
        notification = cls(
            user_id=user_id,
            message=message,
            notification_type=notification_type,
            related_order_id=related_order_id,
            is_read=False,
            created_at=now,
        )
        notification.raise_(
            NotificationCreated(
                notification_id=str(notification.id),
                user_id=str(user_id),
                message=message,
                notification_type=notification_type,
                related_order_id=str(related_order_id) if related_order_id else None,
                created_at=now,
            )
        )
        return notification

    def mark_read(self, user_id):
        """Mark as read on behalf of ``user_id``. Reading twice is harmless."""
        if str(self.user_id) != str(user_id):
            raise ForbiddenError("You can only update your own notifications")
        if self.is_read:
            return

        now = datetime.now(UTC)
        self.is_read = True
        self.read_at = now
        self.raise_(NotificationRead(notification_id=str(self.id), user_id=str(self.user_id), read_at=now))

    def push_payload(self) -> dict:
        return {
            "id": str(self.id),
            "message": self.message,
            "type": self.notification_type,
            "related_order_id": str(self.related_order_id) if self.related_order_id else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
