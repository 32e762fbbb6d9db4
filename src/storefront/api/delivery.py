"""Delivery price routes."""

import json

from fastapi import APIRouter
from protean.utils.globals import current_domain

from storefront.api.identity import AdminCaller
from storefront.api.schemas import DeliveryPricesRequest, DeliveryPricesResponse, DeliveryQuoteResponse
from storefront.ordering.delivery import DeliveryPricing, SetDeliveryPrices, normalise_delivery_method
from storefront.ordering.wilaya import canonical_wilaya

delivery_router = APIRouter(prefix="/delivery-prices", tags=["delivery"])


@delivery_router.get("", response_model=DeliveryPricesResponse)
async def get_delivery_prices() -> DeliveryPricesResponse:
    pricing = current_domain.repository_for(DeliveryPricing).current()
    return DeliveryPricesResponse(prices=pricing.table())


@delivery_router.get("/quote", response_model=DeliveryQuoteResponse)
async def quote_delivery(method: str, wilaya: str) -> DeliveryQuoteResponse:
    pricing = current_domain.repository_for(DeliveryPricing).current()
    return DeliveryQuoteResponse(
        delivery_method=normalise_delivery_method(method),
        wilaya=canonical_wilaya(wilaya),
        fee=pricing.fee_for(method, wilaya),
    )


@delivery_router.put("", response_model=DeliveryPricesResponse)
async def set_delivery_prices(body: DeliveryPricesRequest, caller: AdminCaller) -> DeliveryPricesResponse:
    table = current_domain.process(SetDeliveryPrices(prices=json.dumps(body.prices)), asynchronous=False)
    return DeliveryPricesResponse(prices=table)
