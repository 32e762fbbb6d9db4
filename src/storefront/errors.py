"""Storefront-specific exceptions layered on Protean's exception hierarchy.

InvalidInput and NotFound are Protean's own ``ValidationError`` and
``ObjectNotFoundError``; the classes here cover the remaining failure kinds.
"""

from protean.exceptions import ValidationError


class InsufficientStockError(ValidationError):
    """Requested quantity exceeds the stock available for one product size."""

    def __init__(self, product_id, product_name, size, available, requested):
        self.product_id = str(product_id)
        self.product_name = product_name
        self.size = size
        self.available = available
        self.requested = requested
        super().__init__(
            {
                "stock": [
                    f"Insufficient stock for {product_name} (size: {size}): "
                    f"{available} available, {requested} requested"
                ]
            }
        )


class ForbiddenError(Exception):
    """The caller is identified but may not act on this resource."""

    def __init__(self, message):
        self.message = message
        super().__init__(message)


class ConflictError(Exception):
    """The request clashes with existing state (duplicate email, active subscription)."""

    def __init__(self, messages):
        self.messages = messages
        super().__init__(messages)
