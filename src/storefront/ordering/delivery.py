"""Delivery pricing: a default fee per delivery method plus per-wilaya overrides.

There is a single pricing record. Until an admin saves one, the built-in
defaults apply (700 for desk pickup, 1000 for home delivery).
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import handle, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.ordering.events import DeliveryPricesUpdated
from storefront.ordering.wilaya import WILAYAS, canonical_wilaya

DEFAULT_KEY = "default"


class DeliveryMethod(Enum):
    DESK = "desk"
    ADDRESS = "address"


DEFAULT_PRICES = {
    DeliveryMethod.DESK.value: {DEFAULT_KEY: 700.0},
    DeliveryMethod.ADDRESS.value: {DEFAULT_KEY: 1000.0},
}


def normalise_delivery_method(value) -> str:
    try:
        return DeliveryMethod(value).value
    except ValueError:
        allowed = ", ".join(m.value for m in DeliveryMethod)
        raise ValidationError({"delivery_method": [f"Delivery method must be one of: {allowed}"]}) from None


@storefront.aggregate
class DeliveryPricing:
    prices = Text(required=True)  # JSON: {"desk": {"default": 700, "Oran": 500}, "address": {...}}
    updated_at = DateTime()

    @invariant.post
    def prices_must_be_complete_and_non_negative(self):
        table = json.loads(self.prices)
        errors = []
        for method in DeliveryMethod:
            fees = table.get(method.value)
            if not isinstance(fees, dict) or DEFAULT_KEY not in fees:
                errors.append(f"'{method.value}' needs a '{DEFAULT_KEY}' price")
                continue
            for key, fee in fees.items():
                if key != DEFAULT_KEY and key not in WILAYAS:
                    errors.append(f"Unknown wilaya '{key}' in '{method.value}' prices")
                if not isinstance(fee, (int, float)) or fee < 0:
                    errors.append(f"Price for '{key}' in '{method.value}' must be a non-negative number")
        unknown = set(table) - {m.value for m in DeliveryMethod}
        if unknown:
            errors.append(f"Unknown delivery methods: {', '.join(sorted(unknown))}")
        if errors:
            raise ValidationError({"prices": errors})

    @classmethod
    def create_default(cls):
        return cls(prices=json.dumps(DEFAULT_PRICES), updated_at=datetime.now(UTC))

    def table(self) -> dict:
        return json.loads(self.prices)

    def fee_for(self, method, wilaya) -> float:
        fees = self.table()[normalise_delivery_method(method)]
        return float(fees.get(canonical_wilaya(wilaya), fees[DEFAULT_KEY]))

    def update(self, prices: dict):
        """Replace the table; wilaya keys are normalised to their canonical spelling."""
        normalised = {}
        for method, fees in prices.items():
            if not isinstance(fees, dict):
                raise ValidationError({"prices": [f"Prices for '{method}' must be an object"]})
            normalised[method] = {
                key if key == DEFAULT_KEY else canonical_wilaya(key): fee for key, fee in fees.items()
            }

        now = datetime.now(UTC)
        self.prices = json.dumps(normalised)
        self.updated_at = now
        self.raise_(DeliveryPricesUpdated(pricing_id=str(self.id), prices=self.prices, updated_at=now))


@storefront.repository(part_of=DeliveryPricing)
class DeliveryPricingRepository:
    def current(self) -> DeliveryPricing:
        """The saved pricing record, or an unsaved one holding the defaults."""
        found = self._dao.query.all().items
        if found:
            return self.get(found[0].id)
        return DeliveryPricing.create_default()


def delivery_fee_for(method, wilaya) -> float:
    return current_domain.repository_for(DeliveryPricing).current().fee_for(method, wilaya)


@storefront.command(part_of="DeliveryPricing")
class SetDeliveryPrices:
    prices = Text(required=True)  # JSON


@storefront.command_handler(part_of=DeliveryPricing)
class DeliveryPricingHandler:
    @handle(SetDeliveryPrices)
    def set_delivery_prices(self, command):
        prices = json.loads(command.prices) if isinstance(command.prices, str) else command.prices
        if not isinstance(prices, dict):
            raise ValidationError({"prices": ["Prices must be an object keyed by delivery method"]})

        repo = current_domain.repository_for(DeliveryPricing)
        pricing = repo.current()
        pricing.update(prices)
        repo.add(pricing)
        return pricing.table()
