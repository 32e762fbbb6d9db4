"""Messages sent through the storefront's contact form."""

import re
from datetime import UTC, datetime

import structlog
from protean import handle, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront

logger = structlog.get_logger(__name__)

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@storefront.aggregate
class ContactMessage:
    name: String(required=True, max_length=100)
    email: String(required=True, max_length=254)
    phone: String(max_length=30)
    message: Text(required=True)
    created_at: DateTime()

    @invariant.post
    def email_must_look_like_an_address(self):
        if not _EMAIL_PATTERN.match(self.email or ""):
            raise ValidationError({"email": [f"'{self.email}' is not a valid email address"]})


def contact_messages() -> list[ContactMessage]:
    """All messages, newest first."""
    repo = current_domain.repository_for(ContactMessage)
    return sorted(repo._dao.query.all().items, key=lambda m: m.created_at, reverse=True)


@storefront.command(part_of="ContactMessage")
class SendContactMessage:
    name = String(required=True, max_length=100)
    email = String(required=True, max_length=254)
    phone = String(max_length=30)
    message = Text(required=True)


@storefront.command(part_of="ContactMessage")
class DeleteContactMessage:
    message_id = Identifier(required=True)


@storefront.command_handler(part_of=ContactMessage)
class ContactMessageHandler:
    @handle(SendContactMessage)
    def send_contact_message(self, command):
        contact = ContactMessage(
            name=command.name.strip(),
            email=command.email.strip().lower(),
            phone=command.phone.strip() if command.phone else None,
            message=command.message.strip(),
            created_at=datetime.now(UTC),
        )
        current_domain.repository_for(ContactMessage).add(contact)
        logger.info("Contact message received", message_id=str(contact.id))
        return str(contact.id)

    @handle(DeleteContactMessage)
    def delete_contact_message(self, command):
        repo = current_domain.repository_for(ContactMessage)
        contact = repo.get(command.message_id)
        repo._dao.delete(contact)
        logger.info("Contact message deleted", message_id=str(contact.id))
