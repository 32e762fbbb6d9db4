"""Offer routes: the main-page list for everyone, management for admins.

Offer images are uploaded first (``POST /offers/images``) and the returned
URL is then given when creating or editing the offer.
"""

from fastapi import APIRouter, Query, Request
from protean.utils.globals import current_domain

from storefront.api.identity import AdminCaller
from storefront.api.schemas import (
    CreateOfferRequest,
    ImageUploadResponse,
    OfferIdResponse,
    OfferResponse,
    StatusResponse,
    UpdateOfferRequest,
)
from storefront.api.uploads import discard_image, store_uploaded_image
from storefront.promotion.offer import CreateOffer, DeleteOffer, UpdateOffer, all_offers, featured_offers

offer_router = APIRouter(prefix="/offers", tags=["offers"])


@offer_router.get("", response_model=list[OfferResponse])
async def list_featured_offers() -> list[OfferResponse]:
    return [OfferResponse.from_offer(offer) for offer in featured_offers()]


@offer_router.get("/admin", response_model=list[OfferResponse])
async def list_all_offers(caller: AdminCaller) -> list[OfferResponse]:
    return [OfferResponse.from_offer(offer) for offer in all_offers()]


@offer_router.post("/images", status_code=201, response_model=ImageUploadResponse)
async def upload_offer_image(
    request: Request,
    caller: AdminCaller,
    filename: str = Query(min_length=1),
) -> ImageUploadResponse:
    return ImageUploadResponse(url=await store_uploaded_image(request, filename))


@offer_router.post("", status_code=201, response_model=OfferIdResponse)
async def create_offer(body: CreateOfferRequest, caller: AdminCaller) -> OfferIdResponse:
    command = CreateOffer(
        title=body.title,
        description=body.description,
        image=body.image,
        show_on_main_page=body.show_on_main_page,
    )
    offer_id = current_domain.process(command, asynchronous=False)
    return OfferIdResponse(offer_id=offer_id)


@offer_router.put("/{offer_id}", response_model=StatusResponse)
async def update_offer(offer_id: str, body: UpdateOfferRequest, caller: AdminCaller) -> StatusResponse:
    command = UpdateOffer(offer_id=offer_id, **body.model_dump(exclude_none=True))
    replaced = current_domain.process(command, asynchronous=False)
    if replaced:
        discard_image(replaced)
    return StatusResponse()


@offer_router.delete("/{offer_id}", response_model=StatusResponse)
async def delete_offer(offer_id: str, caller: AdminCaller) -> StatusResponse:
    image = current_domain.process(DeleteOffer(offer_id=offer_id), asynchronous=False)
    discard_image(image)
    return StatusResponse()
