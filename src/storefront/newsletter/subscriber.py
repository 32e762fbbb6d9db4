"""Newsletter subscriptions, and the admin tools for managing and mailing subscribers."""

import json
import re
from datetime import UTC, datetime

import structlog
from protean import handle, invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.channel import EMAIL, get_channel
from storefront.domain import storefront
from storefront.errors import ConflictError

logger = structlog.get_logger(__name__)

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@storefront.aggregate
class Subscriber:
    email: String(required=True, max_length=254)
    is_active: Boolean(default=True)
    subscribed_at: DateTime()
    unsubscribed_at: DateTime()

    @invariant.post
    def email_must_look_like_an_address(self):
        if not _EMAIL_PATTERN.match(self.email or ""):
            raise ValidationError({"email": [f"'{self.email}' is not a valid email address"]})

    def resubscribe(self):
        if self.is_active:
            raise ConflictError({"email": [f"{self.email} is already subscribed"]})
        self.is_active = True
        self.subscribed_at = datetime.now(UTC)
        self.unsubscribed_at = None

    def unsubscribe(self):
        self.is_active = False
        self.unsubscribed_at = datetime.now(UTC)


@storefront.command(part_of="Subscriber")
class Subscribe:
    email = String(required=True, max_length=254)


@storefront.command(part_of="Subscriber")
class Unsubscribe:
    email = String(required=True, max_length=254)


def _find(email) -> Subscriber | None:
    repo = current_domain.repository_for(Subscriber)
    found = repo._dao.query.filter(email=email).all().items
    return found[0] if found else None


@storefront.command_handler(part_of=Subscriber)
class SubscriptionHandler:
    @handle(Subscribe)
    def subscribe(self, command):
        email = command.email.strip().lower()
        repo = current_domain.repository_for(Subscriber)
        subscriber = _find(email)
        if subscriber is None:
            subscriber = Subscriber(email=email, is_active=True, subscribed_at=datetime.now(UTC))
        else:
            subscriber.resubscribe()
        repo.add(subscriber)
        return str(subscriber.id)

    @handle(Unsubscribe)
    def unsubscribe(self, command):
        email = command.email.strip().lower()
        subscriber = _find(email)
        if subscriber is None or not subscriber.is_active:
            raise ObjectNotFoundError(f"{email} is not subscribed")
        subscriber.unsubscribe()
        current_domain.repository_for(Subscriber).add(subscriber)


def subscribers() -> list[Subscriber]:
    """Every subscription, active or not, most recently subscribed first."""
    repo = current_domain.repository_for(Subscriber)
    return sorted(
        repo._dao.query.all().items,
        key=lambda s: s.subscribed_at or datetime.min.replace(tzinfo=UTC),
        reverse=True,
    )


@storefront.command(part_of="Subscriber")
class DeleteSubscriber:
    subscriber_id = Identifier(required=True)


@storefront.command(part_of="Subscriber")
class DeleteSubscribers:
    subscriber_ids = Text(required=True)  # JSON list of ids


@storefront.command(part_of="Subscriber")
class SendNewsletter:
    emails = Text(required=True)  # JSON list of addresses
    subject = String(required=True, max_length=200)
    message = Text(required=True)


def _json_list(raw, field_name) -> list:
    try:
        values = json.loads(raw) if isinstance(raw, str) else raw
    except json.JSONDecodeError:
        raise ValidationError({field_name: [f"{field_name} must be a JSON list"]}) from None
    if not isinstance(values, list):
        raise ValidationError({field_name: [f"{field_name} must be a JSON list"]})
    return [str(value) for value in values if value]


@storefront.command_handler(part_of=Subscriber)
class SubscriberAdminHandler:
    @handle(DeleteSubscriber)
    def delete_subscriber(self, command):
        repo = current_domain.repository_for(Subscriber)
        subscriber = repo.get(command.subscriber_id)
        repo._dao.delete(subscriber)
        logger.info("Subscription deleted", subscriber_id=str(subscriber.id))

    @handle(DeleteSubscribers)
    def delete_subscribers(self, command):
        """Delete the listed subscriptions; unknown ids are skipped. Returns how many went."""
        ids = set(_json_list(command.subscriber_ids, "subscriber_ids"))
        if not ids:
            raise ValidationError({"subscriber_ids": ["Select at least one subscription to delete"]})

        repo = current_domain.repository_for(Subscriber)
        found = [s for s in repo._dao.query.all().items if str(s.id) in ids]
        if not found:
            raise ObjectNotFoundError("No subscriptions found for the given ids")

        for subscriber in found:
            repo._dao.delete(subscriber)
        logger.info("Subscriptions deleted", requested=len(ids), deleted=len(found))
        return len(found)

    @handle(SendNewsletter)
    def send_newsletter(self, command):
        """Email every listed address. Returns the sent count and the addresses that failed."""
        emails = [email.strip().lower() for email in _json_list(command.emails, "emails")]
        if not emails:
            raise ValidationError({"emails": ["Select at least one email address"]})
        invalid = [email for email in emails if not _EMAIL_PATTERN.match(email)]
        if invalid:
            raise ValidationError({"emails": [f"'{email}' is not a valid email address" for email in invalid]})

        subject = command.subject.strip()
        body = command.message.strip()
        if not subject or not body:
            raise ValidationError({"message": ["Subject and message are required"]})

        channel = get_channel(EMAIL)
        sent, failed = 0, []
        for email in dict.fromkeys(emails):
            try:
                result = channel.send(to=email, subject=subject, body=body)
            except Exception:
                logger.exception("Newsletter email failed", to=email)
                failed.append(email)
                continue
            if result.get("status") == "sent":
                sent += 1
            else:
                logger.warning("Newsletter email not delivered", to=email, error=result.get("error"))
                failed.append(email)

        logger.info("Newsletter sent", subject=subject, sent=sent, failed=len(failed))
        return {"sent": sent, "failed": failed}
