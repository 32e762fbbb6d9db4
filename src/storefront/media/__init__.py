"""Image store registry.

Uploads go through a single configured ``ImageStore``. The in-memory fake is
used until something else is installed with ``set_image_store``.
"""

from storefront.media.port import ImageStore

_store: ImageStore | None = None


def get_image_store() -> ImageStore:
    global _store
    if _store is None:
        from storefront.media.fake_store import FakeImageStore

        _store = FakeImageStore()
    return _store


def set_image_store(store: ImageStore) -> None:
    global _store
    _store = store


def reset_image_store() -> None:
    global _store
    _store = None
