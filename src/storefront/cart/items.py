"""Cart item management: commands and handler.

Adding an item looks the product up in the catalogue so the line carries the
current price and stock ceiling.
"""

from protean import handle
from protean.fields import Identifier, Integer

from storefront.cart.cart import ShoppingCart
from storefront.cart.persistence import load_cart, save_cart
from storefront.catalogue import get_catalogue
from storefront.domain import storefront


@storefront.command(part_of="ShoppingCart")
class AddToCart:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(min_value=1, default=1)


@storefront.command(part_of="ShoppingCart")
class UpdateCartQuantity:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    new_quantity = Integer(required=True)


@storefront.command(part_of="ShoppingCart")
class RemoveFromCart:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.command(part_of="ShoppingCart")
class ClearCart:
    cart_id = Identifier(required=True)


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        cart = load_cart(command.cart_id)
        product = get_catalogue().get_product(str(command.product_id))
        cart.add_item(product, quantity=command.quantity or 1)
        save_cart(cart)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        cart = load_cart(command.cart_id)
        cart.update_quantity(command.product_id, command.new_quantity)
        save_cart(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = load_cart(command.cart_id)
        cart.remove_item(command.product_id)
        save_cart(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = load_cart(command.cart_id)
        cart.clear()
        save_cart(cart)
