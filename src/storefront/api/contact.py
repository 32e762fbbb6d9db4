"""Contact form: anyone may write in, admins read and delete."""

from fastapi import APIRouter
from protean.utils.globals import current_domain

from storefront.api.identity import AdminCaller
from storefront.api.schemas import (
    ContactMessageIdResponse,
    ContactMessageRequest,
    ContactMessageResponse,
    StatusResponse,
)
from storefront.contact.message import DeleteContactMessage, SendContactMessage, contact_messages

contact_router = APIRouter(prefix="/contact", tags=["contact"])


@contact_router.post("", status_code=201, response_model=ContactMessageIdResponse)
async def send_message(body: ContactMessageRequest) -> ContactMessageIdResponse:
    command = SendContactMessage(name=body.name, email=body.email, phone=body.phone, message=body.message)
    message_id = current_domain.process(command, asynchronous=False)
    return ContactMessageIdResponse(message_id=message_id)


@contact_router.get("", response_model=list[ContactMessageResponse])
async def list_messages(caller: AdminCaller) -> list[ContactMessageResponse]:
    return [ContactMessageResponse.from_message(m) for m in contact_messages()]


@contact_router.delete("/{message_id}", response_model=StatusResponse)
async def delete_message(message_id: str, caller: AdminCaller) -> StatusResponse:
    current_domain.process(DeleteContactMessage(message_id=message_id), asynchronous=False)
    return StatusResponse(status="deleted")
