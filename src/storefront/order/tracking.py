"""Shipment tracking: command and handler."""

from protean import handle
from protean.fields import Identifier, String

from storefront.domain import storefront
from storefront.order.access import load_order, save_order
from storefront.order.order import Order


@storefront.command(part_of="Order")
class RecordTracking:
    order_id = Identifier(required=True)
    tracking_number = String(required=True, max_length=255)
    courier_provider = String(required=True, max_length=100)
    estimated_delivery_date = String(max_length=10)  # ISO date string
    actor = String(max_length=255)


@storefront.command_handler(part_of=Order)
class RecordTrackingHandler:
    @handle(RecordTracking)
    def record_tracking(self, command):
        order = load_order(command.order_id)
        order.record_tracking(
            tracking_number=command.tracking_number,
            courier_provider=command.courier_provider,
            estimated_delivery_date=command.estimated_delivery_date,
            actor=command.actor,
        )
        save_order(order)
