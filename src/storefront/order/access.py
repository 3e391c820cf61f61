"""Loading orders on behalf of an actor."""

from protean.utils.globals import current_domain

from storefront.errors import OrderAccessDeniedError
from storefront.order.order import ActorRole, Order, parse_role


def load_order(order_id):
    return current_domain.repository_for(Order).get(order_id)


def load_order_for(order_id, actor, role):
    """Fetch an order, refusing customers who do not own it."""
    order = load_order(order_id)
    if parse_role(role) == ActorRole.CUSTOMER and str(order.customer_id) != str(actor):
        raise OrderAccessDeniedError(f"Not authorized to access order {order_id}")
    return order


def save_order(order):
    current_domain.repository_for(Order).add(order)
