"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductAdded:
    """A new product was listed in the catalogue."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    category = String(required=True)
    subcategory = String(required=True)
    price = Float(required=True)
    stock = Text()  # JSON: [{"size", "quantity"}]
    added_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductDetailsUpdated:
    __version__ = 1

    product_id = Identifier(required=True)
    changed_fields = Text(required=True)  # JSON list of field names
    updated_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductRestocked:
    __version__ = 1

    product_id = Identifier(required=True)
    size = String(required=True)
    added_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="Product")
class StockWithdrawn:
    """Units of one size left the shelf because an order was placed."""

    __version__ = 1

    product_id = Identifier(required=True)
    size = String(required=True)
    withdrawn_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="Product")
class ProductImageAdded:
    __version__ = 1

    product_id = Identifier(required=True)
    url = String(required=True)
    position = Integer(required=True)


@storefront.event(part_of="Product")
class ProductImageRemoved:
    __version__ = 1

    product_id = Identifier(required=True)
    url = String(required=True)


@storefront.event(part_of="Product")
class ProductArchived:
    __version__ = 1

    product_id = Identifier(required=True)
    archived_at = DateTime(required=True)
