"""Promotional offers shown on the storefront's main page.

At most ``MAX_FEATURED_OFFERS`` offers may be featured at once. The check
counts the other featured offers when an offer is created featured, or when
an existing one is switched on; an offer that stays featured through an edit
is not counted against itself.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront

logger = structlog.get_logger(__name__)

MAX_FEATURED_OFFERS = 4


@storefront.aggregate
class Offer:
    title: String(required=True, max_length=200)
    description: Text(required=True)
    image: String(required=True, max_length=500)
    show_on_main_page: Boolean(default=True)
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(cls, title, description, image, show_on_main_page=True):
        now = datetime.now(UTC)
        return cls(
            title=_required_text("title", title),
            description=_required_text("description", description),
            image=_required_text("image", image),
            show_on_main_page=show_on_main_page,
            created_at=now,
            updated_at=now,
        )

    def revise(self, title, description, image=None, show_on_main_page=None):
        """Apply an edit. Returns the replaced image URL, if the image changed."""
        self.title = _required_text("title", title)
        self.description = _required_text("description", description)
        if show_on_main_page is not None:
            self.show_on_main_page = show_on_main_page

        replaced = None
        if image and image != self.image:
            replaced = self.image
            self.image = image
        self.updated_at = datetime.now(UTC)
        return replaced


def _required_text(field_name, value) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError({field_name: [f"{field_name.capitalize()} is required"]})
    return value


def _newest_first(offers):
    return sorted(offers, key=lambda o: o.created_at, reverse=True)


def all_offers() -> list[Offer]:
    repo = current_domain.repository_for(Offer)
    return _newest_first(repo._dao.query.all().items)


def featured_offers() -> list[Offer]:
    """The offers for the main page, newest first."""
    repo = current_domain.repository_for(Offer)
    found = repo._dao.query.filter(show_on_main_page=True).all().items
    return _newest_first(found)[:MAX_FEATURED_OFFERS]


def _ensure_room_on_main_page(excluding=None):
    repo = current_domain.repository_for(Offer)
    featured = [
        offer
        for offer in repo._dao.query.filter(show_on_main_page=True).all().items
        if str(offer.id) != str(excluding)
    ]
    if len(featured) >= MAX_FEATURED_OFFERS:
        raise ValidationError(
            {
                "show_on_main_page": [
                    f"Cannot show more than {MAX_FEATURED_OFFERS} offers on the main page at the same time"
                ]
            }
        )


@storefront.command(part_of="Offer")
class CreateOffer:
    title = String(required=True, max_length=200)
    description = Text(required=True)
    image = String(required=True, max_length=500)
    show_on_main_page = Boolean(default=True)


@storefront.command(part_of="Offer")
class UpdateOffer:
    offer_id = Identifier(required=True)
    title = String(required=True, max_length=200)
    description = Text(required=True)
    image = String(max_length=500)
    show_on_main_page = Boolean()


@storefront.command(part_of="Offer")
class DeleteOffer:
    offer_id = Identifier(required=True)


@storefront.command_handler(part_of=Offer)
class OfferHandler:
    @handle(CreateOffer)
    def create_offer(self, command):
        featured = command.show_on_main_page is not False
        if featured:
            _ensure_room_on_main_page()

        offer = Offer.create(
            title=command.title,
            description=command.description,
            image=command.image,
            show_on_main_page=featured,
        )
        current_domain.repository_for(Offer).add(offer)
        logger.info("Offer created", offer_id=str(offer.id), featured=featured)
        return str(offer.id)

    @handle(UpdateOffer)
    def update_offer(self, command):
        repo = current_domain.repository_for(Offer)
        offer = repo.get(command.offer_id)
        if command.show_on_main_page and not offer.show_on_main_page:
            _ensure_room_on_main_page(excluding=offer.id)

        replaced = offer.revise(
            title=command.title,
            description=command.description,
            image=command.image,
            show_on_main_page=command.show_on_main_page,
        )
        repo.add(offer)
        logger.info("Offer updated", offer_id=str(offer.id), image_replaced=replaced is not None)
        return replaced

    @handle(DeleteOffer)
    def delete_offer(self, command):
        """Delete the offer and return its image URL so the caller can drop the stored file."""
        repo = current_domain.repository_for(Offer)
        offer = repo.get(command.offer_id)
        repo._dao.delete(offer)
        logger.info("Offer deleted", offer_id=str(offer.id))
        return offer.image
