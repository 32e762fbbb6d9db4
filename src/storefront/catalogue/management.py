"""Catalogue management: listing, editing and archiving products."""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront

logger = structlog.get_logger(__name__)

_EDITABLE_FIELDS = (
    "name",
    "description",
    "price",
    "category",
    "subcategory",
    "gender",
    "age",
    "season",
    "is_newest",
    "is_trending",
)


@storefront.command(part_of="Product")
class AddProduct:
    name = String(required=True, max_length=200)
    description = Text()
    price = Float(required=True, min_value=0.0)
    category = String(required=True, max_length=50)
    subcategory = String(required=True, max_length=50)
    gender = String(required=True, max_length=20)
    age = String(required=True, max_length=20)
    season = String(required=True, max_length=20)
    stock = Text()  # JSON: [{"size": "M", "quantity": 3}]
    images = Text()  # JSON: list of image URIs
    is_newest = Boolean(default=False)
    is_trending = Boolean(default=False)


@storefront.command(part_of="Product")
class UpdateProductDetails:
    product_id = Identifier(required=True)
    name = String(max_length=200)
    description = Text()
    price = Float(min_value=0.0)
    category = String(max_length=50)
    subcategory = String(max_length=50)
    gender = String(max_length=20)
    age = String(max_length=20)
    season = String(max_length=20)
    is_newest = Boolean()
    is_trending = Boolean()
    stock = Text()  # JSON; replaces every stock level when present


@storefront.command(part_of="Product")
class ArchiveProduct:
    product_id = Identifier(required=True)


def _load_json(raw, field_name):
    if raw is None:
        return None
    if not isinstance(raw, str):
        return raw
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationError({field_name: [f"{field_name.capitalize()} must be valid JSON"]}) from None


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(AddProduct)
    def add_product(self, command):
        product = Product.create(
            name=command.name,
            description=command.description,
            price=command.price,
            category=command.category,
            subcategory=command.subcategory,
            gender=command.gender,
            age=command.age,
            season=command.season,
            stock=_load_json(command.stock, "stock") or [],
            images=_load_json(command.images, "images") or [],
            is_newest=bool(command.is_newest),
            is_trending=bool(command.is_trending),
        )
        current_domain.repository_for(Product).add(product)
        logger.info("Product listed", product_id=str(product.id), name=product.name)
        return str(product.id)

    @handle(UpdateProductDetails)
    def update_product_details(self, command):
        changes = {
            field_name: getattr(command, field_name)
            for field_name in _EDITABLE_FIELDS
            if getattr(command, field_name) is not None
        }
        if command.stock is not None:
            changes["stock"] = _load_json(command.stock, "stock")

        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.update_details(**changes)
        repo.add(product)

    @handle(ArchiveProduct)
    def archive_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.archive()
        repo.add(product)
