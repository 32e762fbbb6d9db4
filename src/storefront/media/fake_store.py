"""In-memory image store for development and tests."""

from uuid import uuid4

from storefront.media.port import ImageStore

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}


class FakeImageStore(ImageStore):
    """Keeps uploads in a dict keyed by the URI it hands out."""

    def __init__(self, base_uri: str = "memory://images"):
        self.base_uri = base_uri
        self.uploads: dict[str, dict] = {}
        self.should_succeed = True

    def configure(self, should_succeed: bool = True):
        self.should_succeed = should_succeed

    def upload(self, content: bytes, filename: str, content_type: str) -> str:
        if not self.should_succeed:
            raise ConnectionError("Image store unavailable")
        if content_type not in ALLOWED_CONTENT_TYPES:
            raise ValueError(f"Unsupported image type: {content_type}")
        if not content:
            raise ValueError("Image upload is empty")

        uri = f"{self.base_uri}/{uuid4().hex[:12]}-{filename}"
        self.uploads[uri] = {"filename": filename, "content_type": content_type, "size": len(content)}
        return uri

    def delete(self, uri: str) -> None:
        self.uploads.pop(uri, None)

    def reset(self):
        self.uploads.clear()
        self.should_succeed = True
