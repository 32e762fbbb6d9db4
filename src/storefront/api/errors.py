"""Maps domain exceptions to structured JSON error responses.

Every error body has the shape ``{"error": {field: [message, ...]}}``.
Insufficient-stock errors also name the product and size that failed.
"""

from collections import defaultdict

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError

from storefront.errors import ConflictError, ForbiddenError, InsufficientStockError

logger = structlog.get_logger(__name__)

_LOCATION_PREFIXES = ("body", "query", "path", "header")


def _messages(exc) -> dict:
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        return messages
    return {"detail": [str(messages or exc)]}


def _error(status_code, messages, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": messages, **extra})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError):
        messages = defaultdict(list)
        for error in exc.errors():
            location = [str(part) for part in error["loc"] if part not in _LOCATION_PREFIXES]
            messages[".".join(location) or "request"].append(error["msg"])
        return _error(400, dict(messages))

    @app.exception_handler(InsufficientStockError)
    async def insufficient_stock(request: Request, exc: InsufficientStockError):
        return _error(
            400,
            _messages(exc),
            product_id=exc.product_id,
            size=exc.size,
            available=exc.available,
            requested=exc.requested,
        )

    @app.exception_handler(ValidationError)
    async def invalid_input(request: Request, exc: ValidationError):
        return _error(400, _messages(exc))

    @app.exception_handler(ObjectNotFoundError)
    async def not_found(request: Request, exc: ObjectNotFoundError):
        return _error(404, _messages(exc))

    @app.exception_handler(ForbiddenError)
    async def forbidden(request: Request, exc: ForbiddenError):
        return _error(403, {"detail": [exc.message]})

    @app.exception_handler(ConflictError)
    async def conflict(request: Request, exc: ConflictError):
        return _error(409, _messages(exc))

    @app.exception_handler(ExpectedVersionError)
    async def concurrent_update(request: Request, exc: ExpectedVersionError):
        logger.warning("Concurrent update rejected", path=request.url.path)
        return _error(409, {"detail": ["The resource was changed by another request, please retry"]})
