"""Catalogue routes: browsing for everyone, management for admins."""

import json

from fastapi import APIRouter, Query, Request
from protean.utils.globals import current_domain

from storefront.api.identity import AdminCaller
from storefront.api.schemas import (
    AddProductRequest,
    ImageRefRequest,
    ImageUploadResponse,
    ProductIdResponse,
    ProductPageResponse,
    ProductResponse,
    RestockRequest,
    StatusResponse,
    StockLevelSchema,
    UpdateProductRequest,
)
from storefront.api.uploads import discard_image, store_uploaded_image
from storefront.catalogue import taxonomy
from storefront.catalogue.browse import browse_products, related_products
from storefront.catalogue.images import AttachProductImage, DetachProductImage
from storefront.catalogue.management import AddProduct, ArchiveProduct, UpdateProductDetails
from storefront.catalogue.product import Product
from storefront.catalogue.stock import RestockProduct, process_stock_change

product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("", response_model=ProductPageResponse)
async def list_products(
    search: str | None = None,
    category: str | None = None,
    subcategory: str | None = None,
    gender: str | None = None,
    age: str | None = None,
    season: str | None = None,
    newest: bool = False,
    trending: bool = False,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> ProductPageResponse:
    result = browse_products(
        search=search,
        category=category,
        subcategory=subcategory,
        gender=gender,
        age=age,
        season=season,
        newest=newest,
        trending=trending,
        page=page,
        limit=limit,
    )
    return ProductPageResponse(
        products=[ProductResponse.from_product(p) for p in result["products"]],
        page=result["page"],
        pages=result["pages"],
        total=result["total"],
    )


@product_router.get("/taxonomy")
async def get_taxonomy() -> dict:
    return taxonomy.as_dict()


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    product = current_domain.repository_for(Product).get(product_id)
    return ProductResponse.from_product(product)


@product_router.get("/{product_id}/related", response_model=list[ProductResponse])
async def get_related_products(product_id: str) -> list[ProductResponse]:
    return [ProductResponse.from_product(p) for p in related_products(product_id)]


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def add_product(body: AddProductRequest, caller: AdminCaller) -> ProductIdResponse:
    command = AddProduct(
        name=body.name,
        description=body.description,
        price=body.price,
        category=body.category,
        subcategory=body.subcategory,
        gender=body.gender,
        age=body.age,
        season=body.season,
        stock=json.dumps([level.model_dump() for level in body.stock]),
        images=json.dumps(body.images),
        is_newest=body.is_newest,
        is_trending=body.is_trending,
    )
    product_id = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=product_id)


@product_router.put("/{product_id}", response_model=StatusResponse)
async def update_product(product_id: str, body: UpdateProductRequest, caller: AdminCaller) -> StatusResponse:
    changes = body.model_dump(exclude_none=True, exclude={"stock"})
    if body.stock is not None:
        changes["stock"] = json.dumps([level.model_dump() for level in body.stock])
    process_stock_change(UpdateProductDetails(product_id=product_id, **changes))
    return StatusResponse()


@product_router.post("/{product_id}/restock", response_model=StockLevelSchema)
async def restock_product(product_id: str, body: RestockRequest, caller: AdminCaller) -> StockLevelSchema:
    command = RestockProduct(product_id=product_id, size=body.size, quantity=body.quantity)
    new_quantity = process_stock_change(command)
    return StockLevelSchema(size=body.size, quantity=new_quantity)


@product_router.delete("/{product_id}", response_model=StatusResponse)
async def archive_product(product_id: str, caller: AdminCaller) -> StatusResponse:
    process_stock_change(ArchiveProduct(product_id=product_id))
    return StatusResponse()


@product_router.post("/{product_id}/images", status_code=201, response_model=ImageUploadResponse)
async def upload_product_image(
    product_id: str,
    request: Request,
    caller: AdminCaller,
    filename: str = Query(min_length=1),
) -> ImageUploadResponse:
    """Upload raw image bytes (request body) and attach the stored image to the product."""
    current_domain.repository_for(Product).get(product_id)

    url = await store_uploaded_image(request, filename)
    try:
        process_stock_change(AttachProductImage(product_id=product_id, url=url))
    except Exception:
        discard_image(url)
        raise
    return ImageUploadResponse(url=url)


@product_router.delete("/{product_id}/images", response_model=StatusResponse)
async def remove_product_image(product_id: str, body: ImageRefRequest, caller: AdminCaller) -> StatusResponse:
    process_stock_change(DetachProductImage(product_id=product_id, url=body.url))
    discard_image(body.url)
    return StatusResponse()
