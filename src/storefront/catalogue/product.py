"""Product aggregate: a catalogue listing with per-size stock counters.

Stock lives on the aggregate itself, so every change to it (an order
withdrawing units, an admin restocking, an edit replacing the size list)
is a versioned save of the whole Product. Two writers that loaded the same
version cannot both commit; the loser's Unit of Work is discarded.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Integer, String, Text

from storefront.catalogue.events import (
    ProductAdded,
    ProductArchived,
    ProductDetailsUpdated,
    ProductImageAdded,
    ProductImageRemoved,
    ProductRestocked,
    StockWithdrawn,
)
from storefront.catalogue.taxonomy import SUBCATEGORIES, AgeGroup, Category, Gender, Season, is_valid_size
from storefront.domain import storefront
from storefront.errors import InsufficientStockError

MAX_IMAGES = 10


class ProductStatus(Enum):
    ACTIVE = "Active"
    ARCHIVED = "Archived"


@storefront.entity(part_of="Product")
class StockEntry:
    size = String(required=True, max_length=20)
    quantity = Integer(required=True, min_value=0)


@storefront.entity(part_of="Product")
class ProductImage:
    url = String(required=True, max_length=1000)
    position = Integer(default=0, min_value=0)


@storefront.aggregate
class Product:
    name = String(required=True, max_length=200)
    description = Text()
    price = Float(required=True, min_value=0.0)
    category = String(choices=Category, required=True)
    subcategory = String(required=True, max_length=50)
    gender = String(choices=Gender, required=True)
    age = String(choices=AgeGroup, required=True)
    season = String(choices=Season, required=True)
    is_newest = Boolean(default=False)
    is_trending = Boolean(default=False)
    status = String(choices=ProductStatus, default=ProductStatus.ACTIVE.value)
    stock = HasMany(StockEntry)
    images = HasMany(ProductImage)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def subcategory_must_belong_to_category(self):
        allowed = SUBCATEGORIES.get(self.category, [])
        if self.subcategory not in allowed:
            raise ValidationError(
                {"subcategory": [f"'{self.subcategory}' is not a {self.category} subcategory"]}
            )

    @invariant.post
    def stock_sizes_must_be_valid_and_unique(self):
        seen = set()
        for entry in self.stock:
            if not is_valid_size(self.category, entry.size):
                raise ValidationError({"stock": [f"Size '{entry.size}' is not valid for {self.category}"]})
            if entry.size in seen:
                raise ValidationError({"stock": [f"Size '{entry.size}' is listed more than once"]})
            seen.add(entry.size)

    @invariant.post
    def images_cannot_exceed_maximum(self):
        if len(self.images) > MAX_IMAGES:
            raise ValidationError({"images": [f"Cannot have more than {MAX_IMAGES} images"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        name,
        price,
        category,
        subcategory,
        gender,
        age,
        season,
        description=None,
        stock=None,
        images=None,
        is_newest=False,
        is_trending=False,
    ):
        """List a new product.

        Args:
            stock: list of ``{"size": str, "quantity": int}`` dicts.
            images: list of image URIs already held by the image store.
        """
        now = datetime.now(UTC)
        product = cls(
            name=name,
            description=description,
            price=price,
            category=category,
            subcategory=subcategory,
            gender=gender,
            age=age,
            season=season,
            is_newest=is_newest,
            is_trending=is_trending,
            status=ProductStatus.ACTIVE.value,
            created_at=now,
            updated_at=now,
        )

        with atomic_change(product):
            for entry in stock or []:
                product.add_stock(StockEntry(size=entry["size"], quantity=entry["quantity"]))
            for position, url in enumerate(images or []):
                product.add_images(ProductImage(url=url, position=position))

        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                name=name,
                category=category,
                subcategory=subcategory,
                price=price,
                stock=json.dumps(product.stock_levels()),
                added_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Stock queries
    # -------------------------------------------------------------------
    def _entry_for(self, size):
        return next((e for e in self.stock if e.size == size), None)

    def carries(self, size) -> bool:
        return self._entry_for(size) is not None

    def available(self, size) -> int:
        entry = self._entry_for(size)
        return entry.quantity if entry else 0

    def stock_levels(self) -> list[dict]:
        return [{"size": e.size, "quantity": e.quantity} for e in self.stock]

    def is_active(self) -> bool:
        return self.status == ProductStatus.ACTIVE.value

    def ensure_available(self, size, quantity):
        """Raise InsufficientStockError unless ``quantity`` units of ``size`` are on hand."""
        available = self.available(size)
        if not self.carries(size) or available < quantity:
            raise InsufficientStockError(
                product_id=self.id,
                product_name=self.name,
                size=size,
                available=available,
                requested=quantity,
            )

    # -------------------------------------------------------------------
    # Stock mutations
    # -------------------------------------------------------------------
    def withdraw(self, size, quantity) -> int:
        """Take units off the shelf for an order and return what is left.

        The remaining count is floored at zero.
        """
        entry = self._entry_for(size)
        if entry is None:
            raise InsufficientStockError(
                product_id=self.id, product_name=self.name, size=size, available=0, requested=quantity
            )

        remaining = max(0, entry.quantity - quantity)
        entry.quantity = remaining
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockWithdrawn(
                product_id=str(self.id),
                size=size,
                withdrawn_quantity=quantity,
                new_quantity=remaining,
            )
        )
        return remaining

    def restock(self, size, quantity) -> int:
        if quantity < 1:
            raise ValidationError({"quantity": ["Restock quantity must be at least 1"]})

        entry = self._entry_for(size)
        if entry is None:
            entry = StockEntry(size=size, quantity=quantity)
            self.add_stock(entry)
        else:
            entry.quantity += quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductRestocked(
                product_id=str(self.id),
                size=size,
                added_quantity=quantity,
                new_quantity=entry.quantity,
            )
        )
        return entry.quantity

    def replace_stock(self, levels):
        with atomic_change(self):
            for entry in list(self.stock):
                self.remove_stock(entry)
            for level in levels:
                self.add_stock(StockEntry(size=level["size"], quantity=level["quantity"]))

    # -------------------------------------------------------------------
    # Details, images, lifecycle
    # -------------------------------------------------------------------
    def update_details(self, **changes):
        """Apply a partial edit. ``stock`` (a list of size/quantity dicts) replaces all levels."""
        if not changes:
            raise ValidationError({"product": ["No changes supplied"]})

        levels = changes.pop("stock", None)
        with atomic_change(self):
            for field_name, value in changes.items():
                setattr(self, field_name, value)
            if levels is not None:
                self.replace_stock(levels)

        now = datetime.now(UTC)
        self.updated_at = now
        changed = sorted(changes) + (["stock"] if levels is not None else [])
        self.raise_(
            ProductDetailsUpdated(
                product_id=str(self.id),
                changed_fields=json.dumps(changed),
                updated_at=now,
            )
        )

    def add_image(self, url):
        if any(image.url == url for image in self.images):
            raise ValidationError({"images": ["Image is already attached to this product"]})

        position = max((image.position for image in self.images), default=-1) + 1
        self.add_images(ProductImage(url=url, position=position))
        self.updated_at = datetime.now(UTC)
        self.raise_(ProductImageAdded(product_id=str(self.id), url=url, position=position))

    def remove_image(self, url):
        image = next((i for i in self.images if i.url == url), None)
        if image is None:
            raise ValidationError({"images": ["Image is not attached to this product"]})

        self.remove_images(image)
        self.updated_at = datetime.now(UTC)
        self.raise_(ProductImageRemoved(product_id=str(self.id), url=url))

    def image_urls(self) -> list[str]:
        return [image.url for image in sorted(self.images, key=lambda i: i.position)]

    def archive(self):
        if not self.is_active():
            raise ValidationError({"status": ["Product is already archived"]})

        now = datetime.now(UTC)
        self.status = ProductStatus.ARCHIVED.value
        self.updated_at = now
        self.raise_(ProductArchived(product_id=str(self.id), archived_at=now))
