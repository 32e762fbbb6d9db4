"""Attaching and detaching product images.

The bytes live in the image store; the catalogue only keeps the URI it returns.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront


@storefront.command(part_of="Product")
class AttachProductImage:
    product_id = Identifier(required=True)
    url = String(required=True, max_length=1000)


@storefront.command(part_of="Product")
class DetachProductImage:
    product_id = Identifier(required=True)
    url = String(required=True, max_length=1000)


@storefront.command_handler(part_of=Product)
class ProductImagesHandler:
    @handle(AttachProductImage)
    def attach_image(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.add_image(command.url)
        repo.add(product)

    @handle(DetachProductImage)
    def detach_image(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.remove_image(command.url)
        repo.add(product)
