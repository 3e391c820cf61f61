"""Domain events for the Order aggregate.

The Order is event sourced: these events are the source of truth for its
state and are replayed through the aggregate's @apply handlers. Projections
and the notification handler consume them too.
"""

from protean.fields import Boolean, DateTime, Float, Identifier, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A cart was checked out into a new order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    cart_id = Identifier()
    items = Text(required=True)  # JSON: list of line item dicts
    shipping_address = Text(required=True)  # JSON: address dict
    payment_method = String(required=True)
    items_price = Float(required=True)
    shipping_price = Float(required=True)
    tax_price = Float(required=True)
    discount_price = Float(default=0.0)
    total_price = Float(required=True)
    coupon_code = String()
    estimated_delivery_date = String()  # ISO date
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    """An order moved from one lifecycle state to another."""

    __version__ = 1

    order_id = Identifier(required=True)
    from_status = String(required=True)
    to_status = String(required=True)
    note = String()
    updated_by = String()
    actor_role = String(required=True)
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    """An order was cancelled before delivery."""

    __version__ = 1

    order_id = Identifier(required=True)
    from_status = String(required=True)
    reason = String(required=True)
    cancelled_by = String()
    actor_role = String(required=True)
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaid:
    """Payment for an order was recorded."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_id = String()
    payment_status = String()
    email_address = String()
    paid_by = String()
    advanced_to_processing = Boolean(default=False)
    paid_at = DateTime(required=True)


@storefront.event(part_of="Order")
class TrackingRecorded:
    """Courier and tracking number were attached to an order."""

    __version__ = 1

    order_id = Identifier(required=True)
    tracking_number = String(required=True)
    courier_provider = String(required=True)
    estimated_delivery_date = String()  # ISO date
    recorded_by = String()
    recorded_at = DateTime(required=True)
