"""Order aggregate (Event Sourced): the order lifecycle state machine.

All state changes are captured as domain events and the current state is
rebuilt by replaying them via @apply handlers. Every status change appends
an entry to ``status_history``; the current ``status`` is always the status
of the most recent entry.

State Machine:
    PENDING → PROCESSING → PACKED → SHIPPED → OUT_FOR_DELIVERY → DELIVERED
    PENDING/PROCESSING/PACKED → CANCELLED          (terminal)
    DELIVERED → RETURNED → REFUNDED                (REFUNDED is terminal)

Which transitions are allowed also depends on who asks: customers may only
cancel early or return a delivered order; staff and admins drive the rest.
"""

import json
from datetime import UTC, datetime, timedelta
from enum import Enum
from uuid import uuid4

from protean import apply
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from storefront.domain import storefront
from storefront.errors import InvalidTransitionError
from storefront.order.events import (
    OrderCancelled,
    OrderPaid,
    OrderPlaced,
    OrderStatusChanged,
    TrackingRecorded,
)

ESTIMATED_DELIVERY_DAYS = 5


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    PACKED = "Packed"
    SHIPPED = "Shipped"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    RETURNED = "Returned"
    REFUNDED = "Refunded"


class ActorRole(Enum):
    CUSTOMER = "customer"
    STAFF = "staff"
    ADMIN = "admin"


class PaymentMethod(Enum):
    CREDIT_CARD = "Credit Card"
    DEBIT_CARD = "Debit Card"
    UPI = "UPI"
    CASH_ON_DELIVERY = "Cash on Delivery"
    NET_BANKING = "Net Banking"


# Happy path, in order
LIFECYCLE = (
    OrderStatus.PENDING,
    OrderStatus.PROCESSING,
    OrderStatus.PACKED,
    OrderStatus.SHIPPED,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
)

TERMINAL_STATES = frozenset({OrderStatus.CANCELLED, OrderStatus.REFUNDED})

_NON_CANCELLABLE_STATES = frozenset(
    {
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
        OrderStatus.RETURNED,
        OrderStatus.REFUNDED,
    }
)

_CUSTOMER_TRANSITIONS = {
    OrderStatus.PENDING: frozenset({OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.CANCELLED}),
    OrderStatus.PACKED: frozenset({OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset(),
    OrderStatus.OUT_FOR_DELIVERY: frozenset(),
    OrderStatus.DELIVERED: frozenset({OrderStatus.RETURNED}),
    OrderStatus.RETURNED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}

_STAFF_TRANSITIONS = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.PACKED, OrderStatus.CANCELLED}),
    OrderStatus.PACKED: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.OUT_FOR_DELIVERY}),
    OrderStatus.OUT_FOR_DELIVERY: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.RETURNED}),
    OrderStatus.RETURNED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}

_TRANSITIONS = {
    ActorRole.CUSTOMER: _CUSTOMER_TRANSITIONS,
    ActorRole.STAFF: _STAFF_TRANSITIONS,
    ActorRole.ADMIN: _STAFF_TRANSITIONS,
}

# Tracking can be attached while the order is being prepared or is in transit
_TRACKABLE_STATES = frozenset(
    {
        OrderStatus.PROCESSING,
        OrderStatus.PACKED,
        OrderStatus.SHIPPED,
        OrderStatus.OUT_FOR_DELIVERY,
    }
)


def parse_status(value) -> OrderStatus:
    """Coerce a status name or value into an OrderStatus."""
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        try:
            return OrderStatus[str(value).upper().replace(" ", "_")]
        except KeyError:
            raise InvalidTransitionError({"status": [f"Unknown order status: {value}"]}) from None


def parse_role(value) -> ActorRole:
    if isinstance(value, ActorRole):
        return value
    try:
        return ActorRole(str(value).lower())
    except ValueError:
        raise ValidationError({"actor_role": [f"Unknown actor role: {value}"]}) from None


def allowed_transitions(status, role=ActorRole.STAFF) -> frozenset:
    """Statuses reachable from ``status`` for an actor with ``role``."""
    return _TRANSITIONS[parse_role(role)][parse_status(status)]


def generate_order_number(now: datetime) -> str:
    """Server-side order number: ORD-YYYYMMDD-XXXX."""
    return f"ORD-{now:%Y%m%d}-{uuid4().hex[:4].upper()}"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Delivery address captured at checkout time.

    Once recorded on an Order the address never changes, regardless of later
    edits to the customer's address book.
    """

    full_name = String(required=True, max_length=255)
    address_line1 = String(required=True, max_length=255)
    address_line2 = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100, default="India")
    phone_number = String(required=True, max_length=20)


@storefront.value_object(part_of="Order")
class OrderPricing:
    """Financial summary locked at checkout; never recomputed afterwards."""

    items_price = Float(default=0.0)
    shipping_price = Float(default=0.0)
    tax_price = Float(default=0.0)
    discount_price = Float(default=0.0)
    total_price = Float(default=0.0)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A product line copied from the cart at checkout."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    image = String(max_length=500)
    farmer_name = String(max_length=255)


@storefront.entity(part_of="Order")
class StatusHistoryEntry:
    """One append-only record in an order's status audit log."""

    status = String(required=True, choices=OrderStatus)
    timestamp = DateTime(required=True)
    note = String(max_length=500)
    updated_by = String(max_length=255)
    actor_role = String(max_length=20)


# ---------------------------------------------------------------------------
# Aggregate Root (Event Sourced)
# ---------------------------------------------------------------------------
@storefront.aggregate(is_event_sourced=True)
class Order:
    order_number = String(max_length=50)
    customer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress)
    payment_method = String(choices=PaymentMethod)
    pricing = ValueObject(OrderPricing)
    coupon_code = String(max_length=50)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    status_history = HasMany(StatusHistoryEntry)
    is_paid = Boolean(default=False)
    paid_at = DateTime()
    payment_id = String(max_length=255)
    payment_status = String(max_length=50)
    is_delivered = Boolean(default=False)
    delivered_at = DateTime()
    is_refunded = Boolean(default=False)
    refunded_at = DateTime()
    tracking_number = String(max_length=255)
    courier_provider = String(max_length=100)
    estimated_delivery_date = String(max_length=10)  # ISO date
    cancellation_reason = String(max_length=500)
    notes = String(max_length=1000)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer_id,
        items_data,
        shipping_address,
        payment_method,
        pricing,
        cart_id=None,
        coupon_code=None,
    ):
        """Create a new order from checkout data.

        All state is established by the OrderPlaced event's @apply handler.

        Args:
            customer_id: The customer placing the order.
            items_data: List of dicts with product_id, name, unit_price,
                        quantity (and optionally image, farmer_name).
            shipping_address: Dict matching ShippingAddress.
            payment_method: A PaymentMethod or its value.
            pricing: Dict with items_price, shipping_price, tax_price,
                     discount_price, total_price.
        """
        if not items_data:
            raise ValidationError({"items": ["No order items"]})
        try:
            method = payment_method if isinstance(payment_method, PaymentMethod) else PaymentMethod(payment_method)
        except ValueError:
            raise ValidationError({"payment_method": [f"Unsupported payment method: {payment_method}"]}) from None

        # Validate the address up front so a bad one never reaches the event store
        ShippingAddress(**shipping_address)

        now = datetime.now(UTC)
        items_with_ids = [{**item, "id": str(uuid4())} for item in items_data]

        order = cls._create_new()
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=generate_order_number(now),
                customer_id=str(customer_id),
                cart_id=str(cart_id) if cart_id else None,
                items=json.dumps(items_with_ids),
                shipping_address=json.dumps(shipping_address),
                payment_method=method.value,
                items_price=pricing.get("items_price", 0.0),
                shipping_price=pricing.get("shipping_price", 0.0),
                tax_price=pricing.get("tax_price", 0.0),
                discount_price=pricing.get("discount_price", 0.0),
                total_price=pricing.get("total_price", 0.0),
                coupon_code=coupon_code,
                estimated_delivery_date=(now + timedelta(days=ESTIMATED_DELIVERY_DAYS)).date().isoformat(),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    @property
    def is_terminal(self) -> bool:
        return self.current_status in TERMINAL_STATES

    def can_transition(self, target, role=ActorRole.STAFF) -> bool:
        return parse_status(target) in allowed_transitions(self.current_status, role)

    def _assert_can_transition(self, target: OrderStatus, role: ActorRole):
        current = self.current_status
        if target not in allowed_transitions(current, role):
            raise InvalidTransitionError(
                {"status": [f"Invalid status transition from {current.value} to {target.value} for {role.value}"]}
            )

    # -------------------------------------------------------------------
    # Lifecycle transitions
    # -------------------------------------------------------------------
    def transition_status(self, new_status, note=None, actor=None, role=ActorRole.STAFF):
        """Move the order to ``new_status`` if the transition table allows it.

        Rejected transitions raise InvalidTransitionError and leave the order
        untouched.
        """
        target = parse_status(new_status)
        role = parse_role(role)
        self._assert_can_transition(target, role)

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                from_status=self.status,
                to_status=target.value,
                note=note,
                updated_by=str(actor) if actor else None,
                actor_role=role.value,
                changed_at=datetime.now(UTC),
            )
        )

    def cancel(self, reason=None, actor=None, role=ActorRole.CUSTOMER):
        """Cancel the order. Not possible once delivered, returned, cancelled or refunded."""
        current = self.current_status
        role = parse_role(role)
        if current in _NON_CANCELLABLE_STATES:
            raise InvalidTransitionError({"status": [f"Cannot cancel order with status: {current.value}"]})
        self._assert_can_transition(OrderStatus.CANCELLED, role)

        default_reason = "Cancelled by customer" if role == ActorRole.CUSTOMER else "Cancelled by administrator"
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                from_status=current.value,
                reason=reason or default_reason,
                cancelled_by=str(actor) if actor else None,
                actor_role=role.value,
                cancelled_at=datetime.now(UTC),
            )
        )

    def request_return(self, reason=None, actor=None):
        """Customer-initiated return of a delivered order."""
        self.transition_status(
            OrderStatus.RETURNED,
            note=reason or "Return requested by customer",
            actor=actor,
            role=ActorRole.CUSTOMER,
        )

    def mark_paid(self, payment_id=None, payment_status=None, email_address=None, paid_by=None):
        """Record payment. A Pending order moves on to Processing."""
        if self.is_paid:
            raise ValidationError({"is_paid": ["Order is already paid"]})
        if self.current_status in TERMINAL_STATES or self.current_status == OrderStatus.RETURNED:
            raise ValidationError({"status": [f"Cannot record payment for order with status: {self.status}"]})

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                payment_id=payment_id,
                payment_status=payment_status,
                email_address=email_address,
                paid_by=str(paid_by) if paid_by else None,
                advanced_to_processing=self.current_status == OrderStatus.PENDING,
                paid_at=datetime.now(UTC),
            )
        )

    def record_tracking(self, tracking_number, courier_provider, estimated_delivery_date=None, actor=None):
        """Attach courier and tracking number (once). A Packed order ships automatically."""
        if not tracking_number or not courier_provider:
            raise ValidationError({"tracking": ["Tracking number and courier provider are required"]})
        if self.tracking_number:
            raise ValidationError({"tracking": ["Tracking information has already been recorded"]})
        if self.current_status not in _TRACKABLE_STATES:
            raise ValidationError({"status": [f"Cannot record tracking for order with status: {self.status}"]})

        self.raise_(
            TrackingRecorded(
                order_id=str(self.id),
                tracking_number=tracking_number,
                courier_provider=courier_provider,
                estimated_delivery_date=estimated_delivery_date,
                recorded_by=str(actor) if actor else None,
                recorded_at=datetime.now(UTC),
            )
        )

        if self.current_status == OrderStatus.PACKED:
            self.transition_status(
                OrderStatus.SHIPPED,
                note=f"Shipped via {courier_provider}",
                actor=actor,
                role=ActorRole.STAFF,
            )

    # -------------------------------------------------------------------
    # @apply methods: rebuild state during event replay
    # -------------------------------------------------------------------
    def _append_history(self, status, timestamp, note=None, updated_by=None, actor_role=None):
        self.add_status_history(
            StatusHistoryEntry(
                status=status,
                timestamp=timestamp,
                note=note,
                updated_by=updated_by,
                actor_role=actor_role,
            )
        )
        self.status = status
        self.updated_at = timestamp

    @apply
    def _on_order_placed(self, event: OrderPlaced):
        self.id = event.order_id
        self.order_number = event.order_number
        self.customer_id = event.customer_id
        self.payment_method = event.payment_method
        self.coupon_code = event.coupon_code
        self.estimated_delivery_date = event.estimated_delivery_date
        self.created_at = event.placed_at
        self.is_paid = False
        self.is_delivered = False
        self.is_refunded = False

        items_data = json.loads(event.items) if isinstance(event.items, str) else []
        self.items = [OrderItem(**item_data) for item_data in items_data]

        address = json.loads(event.shipping_address) if isinstance(event.shipping_address, str) else {}
        if address:
            self.shipping_address = ShippingAddress(**address)

        self.pricing = OrderPricing(
            items_price=event.items_price,
            shipping_price=event.shipping_price or 0.0,
            tax_price=event.tax_price or 0.0,
            discount_price=event.discount_price or 0.0,
            total_price=event.total_price,
        )

        self._append_history(
            OrderStatus.PENDING.value,
            event.placed_at,
            note="Order created",
            updated_by=event.customer_id,
            actor_role=ActorRole.CUSTOMER.value,
        )

    @apply
    def _on_status_changed(self, event: OrderStatusChanged):
        self._append_history(
            event.to_status,
            event.changed_at,
            note=event.note,
            updated_by=event.updated_by,
            actor_role=event.actor_role,
        )
        if event.note:
            self.notes = event.note

        target = OrderStatus(event.to_status)
        if target == OrderStatus.DELIVERED:
            self.is_delivered = True
            self.delivered_at = event.changed_at
        elif target == OrderStatus.REFUNDED:
            self.is_refunded = True
            self.refunded_at = event.changed_at
        elif target == OrderStatus.CANCELLED and not self.cancellation_reason:
            if event.actor_role == ActorRole.CUSTOMER.value:
                self.cancellation_reason = event.note or "Cancelled by customer"
            else:
                self.cancellation_reason = event.note or "Cancelled by administrator"

    @apply
    def _on_order_cancelled(self, event: OrderCancelled):
        self.cancellation_reason = event.reason
        self._append_history(
            OrderStatus.CANCELLED.value,
            event.cancelled_at,
            note=event.reason,
            updated_by=event.cancelled_by,
            actor_role=event.actor_role,
        )

    @apply
    def _on_order_paid(self, event: OrderPaid):
        self.is_paid = True
        self.paid_at = event.paid_at
        self.payment_id = event.payment_id
        self.payment_status = event.payment_status
        self.updated_at = event.paid_at
        if event.advanced_to_processing:
            self._append_history(
                OrderStatus.PROCESSING.value,
                event.paid_at,
                note="Payment received",
                updated_by=event.paid_by,
                actor_role=ActorRole.CUSTOMER.value,
            )

    @apply
    def _on_tracking_recorded(self, event: TrackingRecorded):
        self.tracking_number = event.tracking_number
        self.courier_provider = event.courier_provider
        if event.estimated_delivery_date:
            self.estimated_delivery_date = event.estimated_delivery_date
        self.updated_at = event.recorded_at
