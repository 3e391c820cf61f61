"""Tests for order placement and lifecycle commands."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError
from storefront.cart.cart import ShoppingCart
from storefront.cart.coupons import ApplyCouponToCart
from storefront.cart.items import AddToCart
from storefront.cart.management import CreateCart
from storefront.errors import EmptyCartError, InvalidTransitionError, OrderAccessDeniedError
from storefront.order.cancellation import CancelOrder
from storefront.order.checkout import place_order_from_cart
from storefront.order.order import Order, OrderStatus
from storefront.order.payment import MarkOrderPaid
from storefront.order.returns import RequestReturn
from storefront.order.status import TransitionOrderStatus
from storefront.order.tracking import RecordTracking


@pytest.fixture(autouse=True)
def _collaborators(catalogue, cart_storage, notifier):
    yield


@pytest.fixture()
def cart_id():
    cart_id = current_domain.process(CreateCart(session_id="sess-001", customer_id="cust-001"), asynchronous=False)
    current_domain.process(AddToCart(cart_id=cart_id, product_id="rice-basmati", quantity=2), asynchronous=False)
    current_domain.process(AddToCart(cart_id=cart_id, product_id="rice-sona", quantity=1), asynchronous=False)
    return cart_id


@pytest.fixture()
def order_id(cart_id, shipping_address):
    return place_order_from_cart(cart_id, "cust-001", shipping_address, "Cash on Delivery")


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


def _advance(order_id, *statuses):
    for status in statuses:
        current_domain.process(
            TransitionOrderStatus(order_id=order_id, new_status=status, actor="staff-1"),
            asynchronous=False,
        )


class TestCheckout:
    def test_order_snapshots_cart(self, cart_id, order_id):
        order = _order(order_id)
        assert order.status == "Pending"
        assert str(order.customer_id) == "cust-001"
        assert [item.quantity for item in order.items] == [2, 1]
        assert order.pricing.items_price == pytest.approx(302.0)
        assert order.pricing.shipping_price == 50.0
        assert order.pricing.tax_price == pytest.approx(15.1)
        assert order.pricing.total_price == pytest.approx(367.1)
        assert order.payment_method == "Cash on Delivery"

    def test_checkout_clears_the_cart(self, cart_id, order_id, cart_storage):
        cart = current_domain.repository_for(ShoppingCart).get(cart_id)
        assert len(cart.items) == 0
        assert cart.total == 0.0
        assert '"items": []' in cart_storage.blobs["cartItems:sess-001"]

    def test_coupon_carries_onto_order(self, cart_id, shipping_address):
        current_domain.process(ApplyCouponToCart(cart_id=cart_id, coupon_code="RICE10"), asynchronous=False)
        order_id = place_order_from_cart(cart_id, "cust-001", shipping_address, "UPI")
        order = _order(order_id)
        assert order.coupon_code == "RICE10"
        assert order.pricing.discount_price == pytest.approx(30.2)

    def test_empty_cart_is_rejected_and_left_alone(self, shipping_address):
        cart_id = current_domain.process(CreateCart(session_id="sess-empty"), asynchronous=False)
        with pytest.raises(EmptyCartError):
            place_order_from_cart(cart_id, "cust-001", shipping_address, "UPI")

    def test_unknown_cart_is_not_found(self, shipping_address):
        with pytest.raises(ObjectNotFoundError):
            place_order_from_cart("no-such-cart", "cust-001", shipping_address, "UPI")

    def test_another_customers_cart_is_refused(self, cart_id, shipping_address, cart_storage):
        with pytest.raises(OrderAccessDeniedError):
            place_order_from_cart(cart_id, "cust-002", shipping_address, "UPI")

        cart = current_domain.repository_for(ShoppingCart).get(cart_id)
        assert len(cart.items) == 2

    def test_flags_start_false_after_reload(self, order_id):
        order = _order(order_id)
        assert order.is_paid is False
        assert order.is_delivered is False
        assert order.is_refunded is False


class TestTransitions:
    def test_staff_walks_the_happy_path(self, order_id):
        _advance(order_id, "Processing", "Packed", "Shipped", "Out for Delivery", "Delivered")
        order = _order(order_id)
        assert order.status == "Delivered"
        assert order.is_delivered is True
        assert [entry.status for entry in order.status_history] == [
            "Pending",
            "Processing",
            "Packed",
            "Shipped",
            "Out for Delivery",
            "Delivered",
        ]

    def test_illegal_transition_is_rejected(self, order_id):
        with pytest.raises(InvalidTransitionError):
            _advance(order_id, "Delivered")
        assert _order(order_id).status == "Pending"

    def test_customer_cannot_advance_their_order(self, order_id):
        with pytest.raises(InvalidTransitionError):
            current_domain.process(
                TransitionOrderStatus(
                    order_id=order_id, new_status="Processing", actor="cust-001", actor_role="customer"
                ),
                asynchronous=False,
            )


class TestCancelOrder:
    def test_customer_cancels_own_order(self, order_id):
        current_domain.process(CancelOrder(order_id=order_id, actor="cust-001"), asynchronous=False)
        order = _order(order_id)
        assert order.status == OrderStatus.CANCELLED.value
        assert order.cancellation_reason == "Cancelled by customer"

    def test_customer_cannot_cancel_someone_elses_order(self, order_id):
        with pytest.raises(OrderAccessDeniedError):
            current_domain.process(CancelOrder(order_id=order_id, actor="cust-999"), asynchronous=False)
        assert _order(order_id).status == "Pending"

    def test_staff_cancels_any_order(self, order_id):
        current_domain.process(
            CancelOrder(order_id=order_id, actor="staff-1", actor_role="staff", reason="Out of stock at mill"),
            asynchronous=False,
        )
        assert _order(order_id).cancellation_reason == "Out of stock at mill"


class TestPaymentTrackingReturns:
    def test_payment_advances_pending_order(self, order_id):
        current_domain.process(
            MarkOrderPaid(order_id=order_id, payment_id="pay-001", payment_status="COMPLETED", actor="cust-001"),
            asynchronous=False,
        )
        order = _order(order_id)
        assert order.is_paid is True
        assert order.status == "Processing"

    def test_tracking_ships_packed_order(self, order_id):
        _advance(order_id, "Processing", "Packed")
        current_domain.process(
            RecordTracking(order_id=order_id, tracking_number="TRK-1", courier_provider="India Post"),
            asynchronous=False,
        )
        order = _order(order_id)
        assert order.status == "Shipped"
        assert order.tracking_number == "TRK-1"

    def test_customer_returns_delivered_order(self, order_id):
        _advance(order_id, "Processing", "Packed", "Shipped", "Out for Delivery", "Delivered")
        current_domain.process(
            RequestReturn(order_id=order_id, reason="Wrong grain size", actor="cust-001"),
            asynchronous=False,
        )
        assert _order(order_id).status == "Returned"
