"""Pushes new notifications to users who are online right now.

Offline users get nothing more than the stored notification; nothing is
queued for later delivery.
"""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.channel import PUSH, get_channel
from storefront.domain import storefront
from storefront.notification.events import NotificationCreated
from storefront.notification.notification import Notification

logger = structlog.get_logger(__name__)


@storefront.event_handler(part_of=Notification)
class PushDispatcher:
    @handle(NotificationCreated)
    def on_notification_created(self, event: NotificationCreated) -> None:
        user_id = str(event.user_id)

        try:
            adapter = get_channel(PUSH)
            if not adapter.is_connected(user_id):
                logger.debug("User offline, notification kept in inbox only", user_id=user_id)
                return

            notification = current_domain.repository_for(Notification).get(str(event.notification_id))
            result = adapter.send(user_id, notification.push_payload())
            if result.get("status") != "sent":
                logger.warning(
                    "Push delivery failed",
                    notification_id=str(event.notification_id),
                    error=result.get("error"),
                )
        except Exception as e:
            logger.error(
                "Push dispatch failed",
                notification_id=str(event.notification_id),
                user_id=user_id,
                error=str(e),
            )
