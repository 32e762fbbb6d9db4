"""Storefront FastAPI application.

Commands are processed synchronously inside each request; the domain
context is pushed per request by middleware.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

import os
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# PROTEAN_ENV selects the config overlay from domain.toml:
#   - unset / "test" → in-memory stores, event_processing = "sync"
#   - "production"   → PostgreSQL + Redis, event_processing = "async" (handlers run in server.py)
from storefront.domain import storefront

storefront.init()

from storefront.api.cart import cart_router  # noqa: E402
from storefront.api.catalogue import product_router  # noqa: E402
from storefront.api.contact import contact_router  # noqa: E402
from storefront.api.delivery import delivery_router  # noqa: E402
from storefront.api.errors import register_exception_handlers  # noqa: E402
from storefront.api.newsletter import newsletter_router  # noqa: E402
from storefront.api.notifications import notification_router  # noqa: E402
from storefront.api.offers import offer_router  # noqa: E402
from storefront.api.orders import order_router  # noqa: E402
from storefront.api.users import user_router  # noqa: E402
from storefront.utils.logging import bind_request_context, clear_request_context  # noqa: E402

logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Storefront API",
    description="Apparel storefront: catalogue, carts, orders and notifications",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the storefront domain context and tag log lines with a request id."""
    clear_request_context()
    bind_request_context(request_id=request.headers.get("x-request-id", uuid4().hex), path=request.url.path)
    with storefront.domain_context():
        response = await call_next(request)
    return response


register_exception_handlers(app)

app.include_router(product_router)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(delivery_router)
app.include_router(notification_router)
app.include_router(user_router)
app.include_router(newsletter_router)
app.include_router(offer_router)
app.include_router(contact_router)


@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": storefront.name})
