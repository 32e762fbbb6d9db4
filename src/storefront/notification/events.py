"""Domain events for the Notification aggregate."""

from protean.fields import DateTime, Identifier, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Notification")
class NotificationCreated:
    __version__ = 1

    notification_id = Identifier(required=True)
    user_id = Identifier(required=True)
    message = Text(required=True)
    notification_type = String(required=True)
    related_order_id = Identifier()
    created_at = DateTime(required=True)


@storefront.event(part_of="Notification")
class NotificationRead:
    __version__ = 1

    notification_id = Identifier(required=True)
    user_id = Identifier(required=True)
    read_at = DateTime(required=True)
