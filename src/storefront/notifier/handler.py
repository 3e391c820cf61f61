"""Order notifications: tells customers (and sometimes staff) about their orders.

Reacts to the Order aggregate's own events. The order is reloaded from the
event store for the order number and tracking details the events do not carry.
"""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.notifier import get_notifier
from storefront.notifier.messages import (
    STAFF_ALERT_STATUSES,
    order_placed_customer,
    order_placed_staff,
    status_update_customer,
    status_update_staff,
)
from storefront.order.events import OrderCancelled, OrderPaid, OrderPlaced, OrderStatusChanged
from storefront.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


@storefront.event_handler(part_of=Order)
class OrderNotificationsHandler:
    def _announce_status(self, order_id, status, note=None):
        order = current_domain.repository_for(Order).get(order_id)
        notifier = get_notifier()
        status = OrderStatus(status)

        notifier.notify_customer(
            str(order.customer_id),
            status_update_customer(
                order.id,
                order.order_number,
                status,
                tracking_number=order.tracking_number,
                note=note,
            ),
        )
        if status in STAFF_ALERT_STATUSES:
            notifier.notify_staff(status_update_staff(order.id, order.order_number, status, note=note))

        logger.debug("Order status notification sent", order_id=str(order.id), status=status.value)

    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        notifier = get_notifier()
        notifier.notify_customer(
            str(event.customer_id),
            order_placed_customer(event.order_id, event.order_number),
        )
        notifier.notify_staff(order_placed_staff(event.order_id, event.order_number, event.customer_id))

    @handle(OrderStatusChanged)
    def on_status_changed(self, event: OrderStatusChanged) -> None:
        self._announce_status(event.order_id, event.to_status, note=event.note)

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        self._announce_status(event.order_id, OrderStatus.CANCELLED, note=event.reason)

    @handle(OrderPaid)
    def on_order_paid(self, event: OrderPaid) -> None:
        if event.advanced_to_processing:
            self._announce_status(event.order_id, OrderStatus.PROCESSING)
