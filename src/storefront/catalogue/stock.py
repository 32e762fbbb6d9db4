"""Admin restocking of a product size, and the lock every stock write goes through.

A Unit of Work loads a product, changes it and commits it later. Two such
units running side by side would each commit from their own stale copy, so
every command that reads and rewrites a product runs under
``exclusive_stock``: the lock is taken before the Unit of Work starts and
released after it commits, which means the next writer always loads the
committed stock.
"""

import threading
from contextlib import contextmanager

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import ConflictError

logger = structlog.get_logger(__name__)

STOCK_LOCK_TIMEOUT = 5.0

_stock_lock = threading.Lock()


@contextmanager
def exclusive_stock(timeout=None):
    """Hold the stock lock for the duration of the block.

    Raises ``ConflictError`` when the lock cannot be had within ``timeout``
    seconds (``STOCK_LOCK_TIMEOUT`` by default).
    """
    wait = STOCK_LOCK_TIMEOUT if timeout is None else timeout
    if not _stock_lock.acquire(timeout=wait):
        logger.warning("Timed out waiting for the stock lock", timeout=wait)
        raise ConflictError({"stock": ["Stock is being updated by another request, please retry"]})
    try:
        yield
    finally:
        _stock_lock.release()


def process_stock_change(command):
    """Process a command that rewrites a product, one writer at a time."""
    with exclusive_stock():
        return current_domain.process(command, asynchronous=False)


@storefront.command(part_of="Product")
class RestockProduct:
    product_id = Identifier(required=True)
    size = String(required=True, max_length=20)
    quantity = Integer(required=True, min_value=1)


@storefront.command_handler(part_of=Product)
class RestockProductHandler:
    @handle(RestockProduct)
    def restock_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        new_quantity = product.restock(command.size, command.quantity)
        repo.add(product)

        logger.info(
            "Product restocked",
            product_id=str(product.id),
            size=command.size,
            added=command.quantity,
            new_quantity=new_quantity,
        )
        return new_quantity
