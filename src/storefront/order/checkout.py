"""Checkout: place an order from a cart, then empty the cart."""

import json

from protean.utils.globals import current_domain

from storefront.cart.items import ClearCart
from storefront.order.placement import PlaceOrder


def place_order_from_cart(cart_id, customer_id, shipping_address, payment_method):
    """Place an order for the cart's contents and clear the cart.

    The cart is only cleared once the order exists; a rejected placement
    leaves the cart as it was. Returns the new order's id.
    """
    order_id = current_domain.process(
        PlaceOrder(
            cart_id=cart_id,
            customer_id=customer_id,
            shipping_address=json.dumps(shipping_address)
            if not isinstance(shipping_address, str)
            else shipping_address,
            payment_method=payment_method,
        ),
        asynchronous=False,
    )
    current_domain.process(ClearCart(cart_id=cart_id), asynchronous=False)
    return order_id
