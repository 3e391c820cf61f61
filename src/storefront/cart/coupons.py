"""Cart coupon management: commands and handler."""

from protean import handle
from protean.fields import Identifier, String

from storefront.cart.cart import ShoppingCart
from storefront.cart.persistence import load_cart, save_cart
from storefront.domain import storefront


@storefront.command(part_of="ShoppingCart")
class ApplyCouponToCart:
    """Apply a coupon code to a shopping cart."""

    cart_id = Identifier(required=True)
    coupon_code = String(required=True, max_length=50)


@storefront.command(part_of="ShoppingCart")
class RemoveCouponFromCart:
    cart_id = Identifier(required=True)


@storefront.command_handler(part_of=ShoppingCart)
class CartCouponHandler:
    @handle(ApplyCouponToCart)
    def apply_coupon(self, command):
        cart = load_cart(command.cart_id)
        cart.apply_coupon(command.coupon_code)
        save_cart(cart)

    @handle(RemoveCouponFromCart)
    def remove_coupon(self, command):
        cart = load_cart(command.cart_id)
        cart.remove_coupon()
        save_cart(cart)
