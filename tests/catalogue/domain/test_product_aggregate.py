"""Domain tests for the Product aggregate: classification, sizes, images."""

import pytest
from protean.exceptions import ValidationError

from storefront.catalogue.events import ProductAdded, ProductArchived, ProductImageAdded
from storefront.catalogue.product import MAX_IMAGES, Product, ProductStatus


def _parka(**overrides):
    fields = dict(
        name="Wool Parka",
        price=8900.0,
        category="Outerwear",
        subcategory="Parka",
        gender="Men",
        age="Adult",
        season="Winter",
        stock=[{"size": "M", "quantity": 3}, {"size": "L", "quantity": 0}],
    )
    fields.update(overrides)
    return Product.create(**fields)


class TestProductCreation:
    def test_create_sets_fields_and_stock(self):
        product = _parka()
        assert product.status == ProductStatus.ACTIVE.value
        assert product.stock_levels() == [{"size": "M", "quantity": 3}, {"size": "L", "quantity": 0}]
        assert product.created_at is not None

    def test_create_raises_product_added(self):
        product = _parka()
        assert len(product._events) == 1
        event = product._events[0]
        assert isinstance(event, ProductAdded)
        assert event.product_id == str(product.id)

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _parka(price=-1.0)
        assert "price" in exc.value.messages

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _parka(category="Jewellery")
        assert "category" in exc.value.messages

    def test_subcategory_must_belong_to_category(self):
        with pytest.raises(ValidationError) as exc:
            _parka(subcategory="Sneakers")
        assert "subcategory" in exc.value.messages

    def test_unknown_gender_rejected(self):
        with pytest.raises(ValidationError):
            _parka(gender="Unisex")


class TestStockSizes:
    def test_clothing_sizes_are_restricted(self):
        with pytest.raises(ValidationError) as exc:
            _parka(stock=[{"size": "42", "quantity": 1}])
        assert "stock" in exc.value.messages

    def test_footwear_accepts_free_form_sizes(self):
        product = _parka(
            name="Trail Boot",
            category="Footwear",
            subcategory="Boots",
            stock=[{"size": "42", "quantity": 2}, {"size": "43.5", "quantity": 1}],
        )
        assert product.carries("43.5")

    def test_duplicate_sizes_rejected(self):
        with pytest.raises(ValidationError):
            _parka(stock=[{"size": "M", "quantity": 1}, {"size": "M", "quantity": 2}])

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError):
            _parka(stock=[{"size": "M", "quantity": -1}])


class TestProductDetails:
    def test_update_details_applies_partial_changes(self):
        product = _parka()
        product.update_details(name="Down Parka", price=9900.0)
        assert product.name == "Down Parka"
        assert product.price == 9900.0
        assert product.subcategory == "Parka"

    def test_changing_category_and_subcategory_together(self):
        product = _parka()
        product.update_details(category="Clothing", subcategory="Sweater")
        assert product.category == "Clothing"

    def test_update_details_can_replace_stock(self):
        product = _parka()
        product.update_details(stock=[{"size": "XL", "quantity": 4}])
        assert product.stock_levels() == [{"size": "XL", "quantity": 4}]

    def test_empty_update_rejected(self):
        with pytest.raises(ValidationError):
            _parka().update_details()


class TestProductImages:
    def test_add_image_appends_in_order(self):
        product = _parka()
        product.add_image("memory://images/a.jpg")
        product.add_image("memory://images/b.jpg")
        assert product.image_urls() == ["memory://images/a.jpg", "memory://images/b.jpg"]
        assert isinstance(product._events[-1], ProductImageAdded)

    def test_same_image_cannot_be_added_twice(self):
        product = _parka()
        product.add_image("memory://images/a.jpg")
        with pytest.raises(ValidationError):
            product.add_image("memory://images/a.jpg")

    def test_image_limit(self):
        product = _parka(images=[f"memory://images/{i}.jpg" for i in range(MAX_IMAGES)])
        with pytest.raises(ValidationError):
            product.add_image("memory://images/one-too-many.jpg")

    def test_remove_unknown_image_rejected(self):
        with pytest.raises(ValidationError):
            _parka().remove_image("memory://images/missing.jpg")


class TestArchive:
    def test_archive(self):
        product = _parka()
        product.archive()
        assert product.status == ProductStatus.ARCHIVED.value
        assert not product.is_active()
        assert isinstance(product._events[-1], ProductArchived)

    def test_archive_twice_rejected(self):
        product = _parka()
        product.archive()
        with pytest.raises(ValidationError):
            product.archive()
