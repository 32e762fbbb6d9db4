"""Cart line management: commands and handler.

Stock checks here are advisory. They stop a shopper from asking for more
than is on the shelf right now, but checkout re-validates everything.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalogue.product import Product
from storefront.domain import storefront


@storefront.command(part_of="Cart")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(required=True, max_length=20)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="Cart")
class UpdateCartItem:
    user_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="Cart")
class RemoveFromCart:
    user_id = Identifier(required=True)
    item_id = Identifier()
    product_id = Identifier()
    size = String(max_length=20)


def _sellable_product(product_id) -> Product:
    product = current_domain.repository_for(Product).get(product_id)
    if not product.is_active():
        raise ValidationError({"product_id": [f"{product.name} is no longer available"]})
    return product


@storefront.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = _sellable_product(command.product_id)
        if not product.carries(command.size):
            raise ValidationError({"size": [f"{product.name} is not available in size {command.size}"]})

        repo = current_domain.repository_for(Cart)
        cart = repo.find_by_user(command.user_id) or Cart.create(user_id=command.user_id)

        requested = cart.quantity_of(command.product_id, command.size) + command.quantity
        product.ensure_available(command.size, requested)

        cart.add_item(command.product_id, command.size, command.quantity)
        repo.add(cart)
        return str(cart.id)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_by_user(command.user_id)
        line = cart.item(command.item_id)

        product = _sellable_product(line.product_id)
        product.ensure_available(line.size, command.quantity)

        cart.update_item_quantity(command.item_id, command.quantity)
        repo.add(cart)
        return str(cart.id)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        if not command.item_id and not (command.product_id and command.size):
            raise ValidationError({"item_id": ["Provide an item id, or a product id and size"]})

        repo = current_domain.repository_for(Cart)
        cart = repo.get_by_user(command.user_id)
        cart.remove_item(item_id=command.item_id, product_id=command.product_id, size=command.size)
        repo.add(cart)
        return str(cart.id)
