import pytest
from protean.exceptions import ValidationError

from storefront.ordering.delivery import DEFAULT_PRICES, DeliveryPricing
from storefront.ordering.wilaya import WILAYAS, canonical_wilaya


class TestWilayas:
    def test_there_are_58(self):
        assert len(WILAYAS) == 58

    def test_canonical_spelling(self):
        assert canonical_wilaya("  tizi ouzou ") == "Tizi Ouzou"

    def test_unknown(self):
        with pytest.raises(ValidationError):
            canonical_wilaya("Narnia")


class TestDeliveryPricing:
    def test_defaults(self):
        pricing = DeliveryPricing.create_default()
        assert pricing.table() == DEFAULT_PRICES
        assert pricing.fee_for("desk", "Oran") == 700.0
        assert pricing.fee_for("address", "Oran") == 1000.0

    def test_wilaya_override(self):
        pricing = DeliveryPricing.create_default()
        pricing.update({"desk": {"default": 700, "oran": 400}, "address": {"default": 1000}})
        assert pricing.fee_for("desk", "Oran") == 400.0
        assert pricing.fee_for("desk", "Algiers") == 700.0

    def test_every_method_needs_a_default(self):
        pricing = DeliveryPricing.create_default()
        with pytest.raises(ValidationError):
            pricing.update({"desk": {"Oran": 400}, "address": {"default": 1000}})

    def test_negative_fee_rejected(self):
        pricing = DeliveryPricing.create_default()
        with pytest.raises(ValidationError):
            pricing.update({"desk": {"default": -5}, "address": {"default": 1000}})

    def test_unknown_method_rejected(self):
        pricing = DeliveryPricing.create_default()
        with pytest.raises(ValidationError):
            pricing.update({"desk": {"default": 1}, "address": {"default": 1}, "drone": {"default": 1}})

    def test_unknown_wilaya_rejected(self):
        pricing = DeliveryPricing.create_default()
        with pytest.raises(ValidationError):
            pricing.update({"desk": {"default": 700, "Narnia": 1}, "address": {"default": 1000}})
