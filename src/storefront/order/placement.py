"""Order placement: command and handler.

Checkout snapshots the cart's lines and totals onto a new Order. The cart
itself is cleared as a separate step (see ``storefront.order.checkout``).
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.persistence import load_cart
from storefront.domain import storefront
from storefront.errors import EmptyCartError, OrderAccessDeniedError
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    cart_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    shipping_address = Text(required=True)  # JSON: address dict
    payment_method = String(required=True, max_length=50)


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart = load_cart(command.cart_id)
        if not cart.items:
            raise EmptyCartError({"cart": ["Your cart is empty"]})
        if cart.customer_id and str(cart.customer_id) != str(command.customer_id):
            raise OrderAccessDeniedError("This cart belongs to another customer")

        shipping_address = (
            json.loads(command.shipping_address)
            if isinstance(command.shipping_address, str)
            else command.shipping_address
        )

        items_data = [
            {
                "product_id": str(item.product_id),
                "name": item.name,
                "unit_price": item.unit_price,
                "quantity": item.quantity,
                "image": item.image,
                "farmer_name": item.farmer_name,
            }
            for item in cart.items
        ]
        pricing = {
            "items_price": cart.subtotal,
            "shipping_price": cart.shipping_fee,
            "tax_price": cart.tax,
            "discount_price": cart.discount,
            "total_price": cart.total,
        }

        order = Order.place(
            customer_id=command.customer_id,
            items_data=items_data,
            shipping_address=shipping_address,
            payment_method=command.payment_method,
            pricing=pricing,
            cart_id=cart.id,
            coupon_code=cart.coupon_code,
        )
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            customer_id=str(command.customer_id),
            total_price=cart.total,
        )
        return str(order.id)
