"""Reading a user's inbox: listing, counting and marking notifications read."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.notification.notification import Notification


def notifications_for(user_id) -> list[Notification]:
    """All of a user's notifications, newest first."""
    repo = current_domain.repository_for(Notification)
    found = repo._dao.query.filter(user_id=str(user_id)).all().items
    return sorted(found, key=lambda n: n.created_at, reverse=True)


def unread_count(user_id) -> int:
    repo = current_domain.repository_for(Notification)
    return len(repo._dao.query.filter(user_id=str(user_id), is_read=False).all().items)


@storefront.command(part_of="Notification")
class MarkNotificationRead:
    notification_id = Identifier(required=True)
    user_id = Identifier(required=True)


@storefront.command(part_of="Notification")
class MarkAllNotificationsRead:
    user_id = Identifier(required=True)


@storefront.command_handler(part_of=Notification)
class InboxHandler:
    @handle(MarkNotificationRead)
    def mark_read(self, command):
        repo = current_domain.repository_for(Notification)
        notification = repo.get(command.notification_id)
        notification.mark_read(command.user_id)
        repo.add(notification)

    @handle(MarkAllNotificationsRead)
    def mark_all_read(self, command):
        repo = current_domain.repository_for(Notification)
        unread = [n for n in notifications_for(command.user_id) if not n.is_read]
        for notification in unread:
            notification.mark_read(command.user_id)
            repo.add(notification)
        return len(unread)
