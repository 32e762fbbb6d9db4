"""Cart aggregate: one per user, a set of (product, size, quantity) lines.

A (product, size) pair appears at most once; adding it again grows the
existing line. Checking out empties the cart but keeps the record.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from storefront.cart.events import CartCleared, CartItemAdded, CartItemQuantityChanged, CartItemRemoved
from storefront.domain import storefront


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    size = String(required=True, max_length=20)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@storefront.aggregate
class Cart:
    user_id = Identifier(required=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def one_line_per_product_size(self):
        keys = [(str(i.product_id), i.size) for i in self.items]
        if len(keys) != len(set(keys)):
            raise ValidationError({"items": ["A product size may only appear once in a cart"]})

    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(user_id=user_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------
    def line_for(self, product_id, size):
        return next(
            (i for i in self.items if str(i.product_id) == str(product_id) and i.size == size),
            None,
        )

    def item(self, item_id):
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ObjectNotFoundError(f"Item {item_id} not found in cart")
        return item

    def quantity_of(self, product_id, size) -> int:
        line = self.line_for(product_id, size)
        return line.quantity if line else 0

    def is_empty(self) -> bool:
        return not self.items

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def add_item(self, product_id, size, quantity):
        """Insert a line, or grow the matching one. Returns the line's id."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        now = datetime.now(UTC)
        line = self.line_for(product_id, size)
        if line:
            line.quantity += quantity
        else:
            line = CartItem(product_id=product_id, size=size, quantity=quantity, added_at=now)
            self.add_items(line)
        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                item_id=str(line.id),
                product_id=str(product_id),
                size=size,
                quantity=quantity,
                line_quantity=line.quantity,
            )
        )
        return str(line.id)

    def update_item_quantity(self, item_id, quantity):
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        line = self.item(item_id)
        previous = line.quantity
        line.quantity = quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemQuantityChanged(
                cart_id=str(self.id),
                item_id=str(line.id),
                previous_quantity=previous,
                new_quantity=quantity,
            )
        )

    def remove_item(self, item_id=None, product_id=None, size=None):
        """Drop a line, identified either by its id or by (product, size)."""
        if item_id:
            line = self.item(item_id)
        else:
            line = self.line_for(product_id, size)
            if line is None:
                raise ObjectNotFoundError(f"Product {product_id} (size: {size}) is not in the cart")

        self.remove_items(line)
        self.updated_at = datetime.now(UTC)
        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                item_id=str(line.id),
                product_id=str(line.product_id),
                size=line.size,
            )
        )

    def clear(self):
        removed = len(self.items)
        for line in list(self.items):
            self.remove_items(line)
        self.updated_at = datetime.now(UTC)
        self.raise_(CartCleared(cart_id=str(self.id), user_id=str(self.user_id), removed_items=removed))


@storefront.repository(part_of=Cart)
class CartRepository:
    def find_by_user(self, user_id) -> Cart | None:
        found = self._dao.query.filter(user_id=str(user_id)).all().items
        if not found:
            return None
        return self.get(found[0].id)

    def get_by_user(self, user_id) -> Cart:
        cart = self.find_by_user(user_id)
        if cart is None:
            raise ObjectNotFoundError("Cart not found")
        return cart
