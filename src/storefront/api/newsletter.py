"""Newsletter routes: public subscribe/unsubscribe, admin management and mailing."""

import json

from fastapi import APIRouter
from protean.utils.globals import current_domain

from storefront.api.identity import AdminCaller
from storefront.api.schemas import (
    DeletedCountResponse,
    DeleteSubscribersRequest,
    NewsletterDeliveryResponse,
    NewsletterRequest,
    SendNewsletterRequest,
    StatusResponse,
    SubscriberResponse,
)
from storefront.newsletter.subscriber import (
    DeleteSubscriber,
    DeleteSubscribers,
    SendNewsletter,
    Subscribe,
    Unsubscribe,
    subscribers,
)

newsletter_router = APIRouter(prefix="/newsletter", tags=["newsletter"])


@newsletter_router.post("/subscribe", status_code=201, response_model=StatusResponse)
async def subscribe(body: NewsletterRequest) -> StatusResponse:
    current_domain.process(Subscribe(email=body.email), asynchronous=False)
    return StatusResponse(status="subscribed")


@newsletter_router.post("/unsubscribe", response_model=StatusResponse)
async def unsubscribe(body: NewsletterRequest) -> StatusResponse:
    current_domain.process(Unsubscribe(email=body.email), asynchronous=False)
    return StatusResponse(status="unsubscribed")


@newsletter_router.get("", response_model=list[SubscriberResponse])
async def list_subscribers(caller: AdminCaller) -> list[SubscriberResponse]:
    return [SubscriberResponse.from_subscriber(s) for s in subscribers()]


@newsletter_router.delete("", response_model=DeletedCountResponse)
async def delete_subscribers(body: DeleteSubscribersRequest, caller: AdminCaller) -> DeletedCountResponse:
    command = DeleteSubscribers(subscriber_ids=json.dumps(body.ids))
    deleted = current_domain.process(command, asynchronous=False)
    return DeletedCountResponse(deleted=deleted, message=f"{deleted} subscription(s) deleted")


@newsletter_router.delete("/{subscriber_id}", response_model=StatusResponse)
async def delete_subscriber(subscriber_id: str, caller: AdminCaller) -> StatusResponse:
    current_domain.process(DeleteSubscriber(subscriber_id=subscriber_id), asynchronous=False)
    return StatusResponse(status="deleted")


@newsletter_router.post("/send-email", response_model=NewsletterDeliveryResponse)
async def send_newsletter(body: SendNewsletterRequest, caller: AdminCaller) -> NewsletterDeliveryResponse:
    command = SendNewsletter(emails=json.dumps(body.emails), subject=body.subject, message=body.message)
    result = current_domain.process(command, asynchronous=False)
    return NewsletterDeliveryResponse(**result)
