"""Image store port: accepts binary uploads and hands back a stable URI."""

from abc import ABC, abstractmethod


class ImageStore(ABC):
    @abstractmethod
    def upload(self, content: bytes, filename: str, content_type: str) -> str:
        """Persist the image and return the URI it will be served from."""
        ...

    @abstractmethod
    def delete(self, uri: str) -> None:
        ...
