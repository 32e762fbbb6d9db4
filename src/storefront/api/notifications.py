"""Inbox routes for the calling user."""

from fastapi import APIRouter
from protean.utils.globals import current_domain

from storefront.api.identity import CurrentCaller
from storefront.api.schemas import NotificationResponse, StatusResponse, UnreadCountResponse, UpdatedCountResponse
from storefront.notification.inbox import (
    MarkAllNotificationsRead,
    MarkNotificationRead,
    notifications_for,
    unread_count,
)

notification_router = APIRouter(prefix="/notifications", tags=["notifications"])


@notification_router.get("", response_model=list[NotificationResponse])
async def list_notifications(caller: CurrentCaller) -> list[NotificationResponse]:
    return [NotificationResponse.from_notification(n) for n in notifications_for(caller.user_id)]


@notification_router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(caller: CurrentCaller) -> UnreadCountResponse:
    return UnreadCountResponse(unread=unread_count(caller.user_id))


@notification_router.put("/read-all", response_model=UpdatedCountResponse)
async def mark_all_read(caller: CurrentCaller) -> UpdatedCountResponse:
    updated = current_domain.process(MarkAllNotificationsRead(user_id=caller.user_id), asynchronous=False)
    return UpdatedCountResponse(updated=updated)


@notification_router.put("/{notification_id}/read", response_model=StatusResponse)
async def mark_read(notification_id: str, caller: CurrentCaller) -> StatusResponse:
    command = MarkNotificationRead(notification_id=notification_id, user_id=caller.user_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()
