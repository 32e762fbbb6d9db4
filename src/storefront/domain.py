"""Storefront domain: catalogue, carts, orders, notifications and users.

All aggregates live in a single domain so that placing an order can commit
the order, the product stock and the emptied cart in one Unit of Work.
"""

import structlog
from protean.domain import Domain

from storefront.utils.logging import configure_logging

configure_logging()

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
