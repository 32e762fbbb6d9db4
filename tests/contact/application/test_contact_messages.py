import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.contact.message import ContactMessage, DeleteContactMessage, SendContactMessage, contact_messages


def _send(name="Amina", email="amina@example.com", message="Do you ship to Tamanrasset?", phone=None):
    return current_domain.process(
        SendContactMessage(name=name, email=email, phone=phone, message=message),
        asynchronous=False,
    )


class TestContactMessages:
    def test_send_message(self):
        message_id = _send(email=" Amina@Example.com ", phone="0555 00 00 00")
        contact = current_domain.repository_for(ContactMessage).get(message_id)
        assert contact.email == "amina@example.com"
        assert contact.phone == "0555 00 00 00"
        assert contact.created_at is not None

    def test_invalid_email(self):
        with pytest.raises(ValidationError) as exc:
            _send(email="amina-at-example")
        assert "email" in exc.value.messages

    def test_message_is_required(self):
        with pytest.raises(ValidationError):
            _send(message="")

    def test_newest_first(self):
        first = _send(name="First")
        second = _send(name="Second")
        assert [str(m.id) for m in contact_messages()] == [second, first]

    def test_delete(self):
        message_id = _send()
        current_domain.process(DeleteContactMessage(message_id=message_id), asynchronous=False)
        assert contact_messages() == []

    def test_delete_unknown(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(DeleteContactMessage(message_id="missing"), asynchronous=False)
