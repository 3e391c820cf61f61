"""Tests for Order cancellation, payment, tracking and returns."""

import pytest
from protean.exceptions import ValidationError
from storefront.errors import InvalidTransitionError
from storefront.order.events import OrderCancelled, OrderPaid, OrderStatusChanged, TrackingRecorded
from storefront.order.order import LIFECYCLE, ActorRole, Order, OrderStatus

ADDRESS = {
    "full_name": "Asha Rao",
    "address_line1": "12 Paddy Field Road",
    "city": "Mandya",
    "state": "Karnataka",
    "postal_code": "571401",
    "phone_number": "9876543210",
}


def _order(status=OrderStatus.PENDING):
    order = Order.place(
        customer_id="cust-001",
        items_data=[{"product_id": "rice-basmati", "name": "Basmati Rice 1kg", "unit_price": 120.0, "quantity": 1}],
        shipping_address=ADDRESS,
        payment_method="Credit Card",
        pricing={"items_price": 120.0, "shipping_price": 50.0, "tax_price": 6.0, "total_price": 176.0},
    )
    for step in LIFECYCLE[1 : LIFECYCLE.index(status) + 1]:
        order.transition_status(step)
    order._events.clear()
    return order


class TestCancel:
    @pytest.mark.parametrize(
        "status",
        [OrderStatus.PENDING, OrderStatus.PROCESSING, OrderStatus.PACKED],
        ids=lambda s: s.value,
    )
    def test_customer_can_cancel_before_shipping(self, status):
        order = _order(status)
        order.cancel(actor="cust-001")
        assert order.status == OrderStatus.CANCELLED.value
        assert order.cancellation_reason == "Cancelled by customer"
        assert order.status_history[-1].note == "Cancelled by customer"

    def test_reason_is_recorded(self):
        order = _order()
        order.cancel(reason="Ordered the wrong variety", actor="cust-001")
        assert order.cancellation_reason == "Ordered the wrong variety"

    def test_admin_default_reason(self):
        order = _order()
        order.cancel(actor="admin-1", role=ActorRole.ADMIN)
        assert order.cancellation_reason == "Cancelled by administrator"

    def test_delivered_order_cannot_be_cancelled(self):
        order = _order(OrderStatus.DELIVERED)
        with pytest.raises(InvalidTransitionError) as exc_info:
            order.cancel(actor="cust-001")
        assert "Cannot cancel order with status: Delivered" in str(exc_info.value.messages)
        assert order.status == OrderStatus.DELIVERED.value

    def test_shipped_order_cannot_be_cancelled(self):
        order = _order(OrderStatus.SHIPPED)
        with pytest.raises(InvalidTransitionError):
            order.cancel(actor="cust-001")

    def test_cancelled_order_cannot_be_cancelled_again(self):
        order = _order()
        order.cancel(actor="cust-001")
        with pytest.raises(InvalidTransitionError):
            order.cancel(actor="cust-001")

    def test_raises_order_cancelled_event(self):
        order = _order()
        order.cancel(reason="Changed my mind", actor="cust-001")
        event = order._events[-1]
        assert isinstance(event, OrderCancelled)
        assert event.from_status == "Pending"
        assert event.reason == "Changed my mind"


class TestMarkPaid:
    def test_pending_order_moves_to_processing(self):
        order = _order()
        order.mark_paid(payment_id="pay-001", payment_status="COMPLETED", paid_by="cust-001")
        assert order.is_paid is True
        assert order.paid_at is not None
        assert order.payment_id == "pay-001"
        assert order.status == OrderStatus.PROCESSING.value
        assert order.status_history[-1].status == OrderStatus.PROCESSING.value

    def test_later_order_keeps_its_status(self):
        order = _order(OrderStatus.SHIPPED)
        order.mark_paid(payment_id="pay-001")
        assert order.is_paid is True
        assert order.status == OrderStatus.SHIPPED.value
        assert isinstance(order._events[-1], OrderPaid)
        assert order._events[-1].advanced_to_processing is False

    def test_cannot_pay_twice(self):
        order = _order()
        order.mark_paid(payment_id="pay-001")
        with pytest.raises(ValidationError):
            order.mark_paid(payment_id="pay-002")

    def test_cannot_pay_cancelled_order(self):
        order = _order()
        order.cancel(actor="cust-001")
        with pytest.raises(ValidationError):
            order.mark_paid(payment_id="pay-001")


class TestRecordTracking:
    def test_packed_order_ships_automatically(self):
        order = _order(OrderStatus.PACKED)
        order.record_tracking("TRK-123", "BlueDart", actor="staff-1")
        assert order.tracking_number == "TRK-123"
        assert order.courier_provider == "BlueDart"
        assert order.status == OrderStatus.SHIPPED.value
        assert [type(e) for e in order._events] == [TrackingRecorded, OrderStatusChanged]

    def test_processing_order_keeps_status(self):
        order = _order(OrderStatus.PROCESSING)
        order.record_tracking("TRK-123", "BlueDart", estimated_delivery_date="2026-11-02")
        assert order.status == OrderStatus.PROCESSING.value
        assert order.estimated_delivery_date == "2026-11-02"

    def test_requires_number_and_courier(self):
        order = _order(OrderStatus.PACKED)
        with pytest.raises(ValidationError):
            order.record_tracking("TRK-123", "")
        with pytest.raises(ValidationError):
            order.record_tracking(None, "BlueDart")

    def test_attaches_only_once(self):
        order = _order(OrderStatus.PROCESSING)
        order.record_tracking("TRK-123", "BlueDart")
        with pytest.raises(ValidationError):
            order.record_tracking("TRK-999", "DTDC")
        assert order.tracking_number == "TRK-123"

    @pytest.mark.parametrize("status", [OrderStatus.PENDING, OrderStatus.DELIVERED], ids=lambda s: s.value)
    def test_rejected_outside_fulfilment(self, status):
        order = _order(status)
        with pytest.raises(ValidationError):
            order.record_tracking("TRK-123", "BlueDart")


class TestRequestReturn:
    def test_delivered_order_can_be_returned(self):
        order = _order(OrderStatus.DELIVERED)
        order.request_return(reason="Grain quality", actor="cust-001")
        assert order.status == OrderStatus.RETURNED.value
        assert order.status_history[-1].note == "Grain quality"
        assert order.status_history[-1].actor_role == ActorRole.CUSTOMER.value

    def test_return_before_delivery_is_rejected(self):
        order = _order(OrderStatus.OUT_FOR_DELIVERY)
        with pytest.raises(InvalidTransitionError):
            order.request_return(actor="cust-001")

    def test_staff_can_refund_a_return(self):
        order = _order(OrderStatus.DELIVERED)
        order.request_return(actor="cust-001")
        order.transition_status(OrderStatus.REFUNDED, actor="staff-1")
        assert order.is_refunded is True
