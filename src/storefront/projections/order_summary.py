"""Order summary: listing view for customers ("my orders") and staff."""

import json

import structlog
from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.events import (
    OrderCancelled,
    OrderPaid,
    OrderPlaced,
    OrderStatusChanged,
    TrackingRecorded,
)
from storefront.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


@storefront.projection
class OrderSummary:
    order_id = Identifier(identifier=True, required=True)
    order_number = String(required=True, max_length=50)
    customer_id = Identifier(required=True)
    status = String(required=True, max_length=50)
    item_count = Integer(default=0)
    items_price = Float(default=0.0)
    shipping_price = Float(default=0.0)
    tax_price = Float(default=0.0)
    discount_price = Float(default=0.0)
    total_price = Float(default=0.0)
    payment_method = String(max_length=50)
    is_paid = Boolean(default=False)
    is_delivered = Boolean(default=False)
    tracking_number = String(max_length=255)
    created_at = DateTime()
    updated_at = DateTime()


@storefront.projector(projector_for=OrderSummary, aggregates=[Order])
class OrderSummaryProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        items = json.loads(event.items) if isinstance(event.items, str) else []
        current_domain.repository_for(OrderSummary).add(
            OrderSummary(
                order_id=event.order_id,
                order_number=event.order_number,
                customer_id=event.customer_id,
                status=OrderStatus.PENDING.value,
                item_count=sum(item.get("quantity", 0) for item in items),
                items_price=event.items_price,
                shipping_price=event.shipping_price or 0.0,
                tax_price=event.tax_price or 0.0,
                discount_price=event.discount_price or 0.0,
                total_price=event.total_price,
                payment_method=event.payment_method,
                created_at=event.placed_at,
                updated_at=event.placed_at,
            )
        )

    def _update(self, order_id, updated_at=None, **changes):
        repo = current_domain.repository_for(OrderSummary)
        try:
            summary = repo.get(order_id)
        except ObjectNotFoundError:
            logger.warning("Order summary missing, update skipped", order_id=str(order_id))
            return
        for name, value in changes.items():
            setattr(summary, name, value)
        if updated_at:
            summary.updated_at = updated_at
        repo.add(summary)

    @on(OrderStatusChanged)
    def on_status_changed(self, event):
        changes = {"status": event.to_status}
        if event.to_status == OrderStatus.DELIVERED.value:
            changes["is_delivered"] = True
        self._update(event.order_id, event.changed_at, **changes)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        self._update(event.order_id, event.cancelled_at, status=OrderStatus.CANCELLED.value)

    @on(OrderPaid)
    def on_order_paid(self, event):
        changes = {"is_paid": True}
        if event.advanced_to_processing:
            changes["status"] = OrderStatus.PROCESSING.value
        self._update(event.order_id, event.paid_at, **changes)

    @on(TrackingRecorded)
    def on_tracking_recorded(self, event):
        self._update(event.order_id, event.recorded_at, tracking_number=event.tracking_number)
