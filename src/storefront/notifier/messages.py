"""Notification wording for order events."""

from storefront.notifier.port import OrderNotification
from storefront.order.order import OrderStatus

# Statuses that also alert staff
STAFF_ALERT_STATUSES = frozenset({OrderStatus.CANCELLED, OrderStatus.RETURNED})


def _customer_link(order_id) -> str:
    return f"/orders/{order_id}"


def _admin_link(order_id) -> str:
    return f"/admin/orders/{order_id}"


def order_placed_customer(order_id, order_number) -> OrderNotification:
    return OrderNotification(
        title="Order Placed Successfully",
        message=f"Your order #{order_number} has been placed successfully. We'll notify you when it ships.",
        link=_customer_link(order_id),
    )


def order_placed_staff(order_id, order_number, customer_id) -> OrderNotification:
    return OrderNotification(
        title="New Order",
        message=f"A new order #{order_number} has been placed by customer {customer_id}.",
        link=_admin_link(order_id),
    )


def status_update_customer(order_id, order_number, status, tracking_number=None, note=None) -> OrderNotification:
    """Customer-facing message for an order entering ``status``."""
    status = OrderStatus(status)
    match status:
        case OrderStatus.PROCESSING:
            title = "Order Confirmed"
            message = f"Your order #{order_number} has been confirmed and is being processed."
        case OrderStatus.PACKED:
            title = "Order Packed"
            message = f"Your order #{order_number} has been packed and is ready for shipping."
        case OrderStatus.SHIPPED:
            title = "Order Shipped"
            message = f"Your order #{order_number} has been shipped."
            if tracking_number:
                message += f" Tracking number: {tracking_number}"
        case OrderStatus.OUT_FOR_DELIVERY:
            title = "Out for Delivery"
            message = f"Your order #{order_number} is out for delivery and will arrive soon."
        case OrderStatus.DELIVERED:
            title = "Order Delivered"
            message = f"Your order #{order_number} has been delivered. Thank you for shopping with us!"
        case OrderStatus.CANCELLED:
            title = "Order Cancelled"
            message = f"Your order #{order_number} has been cancelled."
            if note:
                message += f" {note}"
        case OrderStatus.RETURNED:
            title = "Order Returned"
            message = f"Your order #{order_number} has been marked as returned."
        case OrderStatus.REFUNDED:
            title = "Order Refunded"
            message = f"Your order #{order_number} has been refunded."
        case _:
            title = "Order Update"
            message = f"Your order #{order_number} has been updated to {status.value}."

    return OrderNotification(
        title=title,
        message=message,
        link=_customer_link(order_id),
        priority="high" if status == OrderStatus.CANCELLED else "normal",
    )


def status_update_staff(order_id, order_number, status, note=None) -> OrderNotification:
    status = OrderStatus(status)
    message = f"Order #{order_number} has been {status.value.lower()}."
    if note:
        message += f" {note}"
    return OrderNotification(
        title=f"Order {status.value}",
        message=message,
        link=_admin_link(order_id),
        priority="high",
    )
