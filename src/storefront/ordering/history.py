"""Order queries for customers and admins."""

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.errors import ForbiddenError
from storefront.ordering.order import Order, OrderStatus


def _newest_first(orders) -> list[Order]:
    return sorted(orders, key=lambda o: o.placed_at, reverse=True)


def orders_for_user(user_id) -> list[Order]:
    repo = current_domain.repository_for(Order)
    return _newest_first(repo._dao.query.filter(user_id=str(user_id)).all().items)


def all_orders(status=None) -> list[Order]:
    repo = current_domain.repository_for(Order)
    if status:
        try:
            OrderStatus(status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status: {status}"]}) from None
        found = repo._dao.query.filter(status=status).all().items
    else:
        found = repo._dao.query.all().items
    return _newest_first(found)


def order_for(order_id, user_id, is_admin=False) -> Order:
    """Load one order; customers may only see their own."""
    order = current_domain.repository_for(Order).get(order_id)
    if not is_admin and not order.belongs_to(user_id):
        raise ForbiddenError("You can only view your own orders")
    return order
