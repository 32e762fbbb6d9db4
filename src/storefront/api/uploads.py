"""Raw image uploads into the configured image store."""

import structlog
from fastapi import HTTPException, Request
from protean.exceptions import ValidationError

from storefront.media import get_image_store

logger = structlog.get_logger(__name__)


async def store_uploaded_image(request: Request, filename: str) -> str:
    """Store the request body as an image and return its URL.

    A rejected file is a validation error; an unreachable store is a 502.
    """
    content = await request.body()
    content_type = request.headers.get("content-type", "application/octet-stream")
    try:
        return get_image_store().upload(content, filename, content_type)
    except ValueError as e:
        raise ValidationError({"image": [str(e)]}) from e
    except ConnectionError as e:
        logger.error("Image store unavailable", filename=filename, error=str(e))
        raise HTTPException(status_code=502, detail="Image store unavailable") from e


def discard_image(url: str) -> None:
    """Remove a stored image, logging rather than failing if the store refuses."""
    try:
        get_image_store().delete(url)
    except Exception as e:
        logger.warning("Could not delete image from store", url=url, error=str(e))
