import pytest
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.cart.cart import Cart
from storefront.cart.events import CartCleared, CartItemAdded, CartItemRemoved


@pytest.fixture()
def cart():
    return Cart.create(user_id="cust-1")


class TestCartLines:
    def test_new_cart_is_empty(self, cart):
        assert cart.is_empty()

    def test_add_item_creates_line(self, cart):
        item_id = cart.add_item("prod-1", "M", 2)
        assert cart.item(item_id).quantity == 2
        event = cart._events[-1]
        assert isinstance(event, CartItemAdded)
        assert event.line_quantity == 2

    def test_adding_same_product_size_grows_line(self, cart):
        first = cart.add_item("prod-1", "M", 1)
        second = cart.add_item("prod-1", "M", 2)
        assert first == second
        assert len(cart.items) == 1
        assert cart.quantity_of("prod-1", "M") == 3

    def test_different_size_gets_its_own_line(self, cart):
        cart.add_item("prod-1", "M", 1)
        cart.add_item("prod-1", "L", 1)
        assert len(cart.items) == 2

    def test_quantity_must_be_positive(self, cart):
        with pytest.raises(ValidationError):
            cart.add_item("prod-1", "M", 0)

    def test_update_item_quantity(self, cart):
        item_id = cart.add_item("prod-1", "M", 1)
        cart.update_item_quantity(item_id, 4)
        assert cart.item(item_id).quantity == 4

    def test_update_unknown_item(self, cart):
        with pytest.raises(ObjectNotFoundError):
            cart.update_item_quantity("missing", 2)


class TestCartRemoval:
    def test_remove_by_item_id(self, cart):
        item_id = cart.add_item("prod-1", "M", 1)
        cart.remove_item(item_id=item_id)
        assert cart.is_empty()
        assert isinstance(cart._events[-1], CartItemRemoved)

    def test_remove_by_product_and_size(self, cart):
        cart.add_item("prod-1", "M", 1)
        cart.add_item("prod-1", "L", 1)
        cart.remove_item(product_id="prod-1", size="M")
        assert [i.size for i in cart.items] == ["L"]

    def test_remove_missing_line(self, cart):
        with pytest.raises(ObjectNotFoundError):
            cart.remove_item(product_id="prod-1", size="M")

    def test_clear(self, cart):
        cart.add_item("prod-1", "M", 1)
        cart.add_item("prod-2", "S", 1)
        cart.clear()
        assert cart.is_empty()
        event = cart._events[-1]
        assert isinstance(event, CartCleared)
        assert event.removed_items == 2
