"""Shared BDD fixtures and step definitions for the Storefront."""

import json
from datetime import UTC, datetime

import pytest
from protean.exceptions import ValidationError
from protean.testing import given as given_
from pytest_bdd import given, parsers, then
from storefront.cart.cart import ShoppingCart
from storefront.cart.events import (
    CartCleared,
    CartCouponApplied,
    CartCouponRemoved,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
)
from storefront.catalogue.port import ProductInfo
from storefront.order.events import (
    OrderCancelled,
    OrderPaid,
    OrderPlaced,
    OrderStatusChanged,
    TrackingRecorded,
)
from storefront.order.order import Order

# Map event name strings to classes for dynamic lookup in Then steps
_ORDER_EVENT_CLASSES = {
    "OrderPlaced": OrderPlaced,
    "OrderStatusChanged": OrderStatusChanged,
    "OrderCancelled": OrderCancelled,
    "OrderPaid": OrderPaid,
    "TrackingRecorded": TrackingRecorded,
}

_CART_EVENT_CLASSES = {
    "CartItemAdded": CartItemAdded,
    "CartQuantityUpdated": CartQuantityUpdated,
    "CartItemRemoved": CartItemRemoved,
    "CartCleared": CartCleared,
    "CartCouponApplied": CartCouponApplied,
    "CartCouponRemoved": CartCouponRemoved,
}


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def order_id():
    return "ord-001"


@pytest.fixture()
def customer_id():
    return "cust-001"


@pytest.fixture()
def error():
    """Container for captured validation errors (used by cart tests)."""
    return {"exc": None}


@pytest.fixture(autouse=True)
def _collaborators(catalogue, cart_storage, notifier):
    yield


def product(product_id, price, stock):
    return ProductInfo(
        product_id=product_id,
        name=product_id.replace("-", " ").title(),
        price=price,
        stock_quantity=stock,
    )


@pytest.fixture()
def make_product():
    return product


# ---------------------------------------------------------------------------
# Event fixtures (past tense: what happened)
# ---------------------------------------------------------------------------
@pytest.fixture()
def order_placed(order_id, customer_id):
    now = datetime.now(UTC)
    return OrderPlaced(
        order_id=order_id,
        order_number="ORD-20261019-A1B2",
        customer_id=customer_id,
        items=json.dumps(
            [
                {
                    "product_id": "rice-basmati",
                    "name": "Basmati Rice 1kg",
                    "unit_price": 120.0,
                    "quantity": 2,
                }
            ]
        ),
        shipping_address=json.dumps(
            {
                "full_name": "Asha Rao",
                "address_line1": "12 Paddy Field Road",
                "city": "Mandya",
                "state": "Karnataka",
                "postal_code": "571401",
                "country": "India",
                "phone_number": "9876543210",
            }
        ),
        payment_method="Cash on Delivery",
        items_price=240.0,
        shipping_price=50.0,
        tax_price=12.0,
        discount_price=0.0,
        total_price=302.0,
        estimated_delivery_date="2026-10-24",
        placed_at=now,
    )


def status_changed(order_id, from_status, to_status, role="staff"):
    return OrderStatusChanged(
        order_id=order_id,
        from_status=from_status,
        to_status=to_status,
        updated_by="staff-1" if role == "staff" else "cust-001",
        actor_role=role,
        changed_at=datetime.now(UTC),
    )


_DELIVERY_PATH = ["Pending", "Processing", "Packed", "Shipped", "Out for Delivery", "Delivered"]


# ---------------------------------------------------------------------------
# Given steps - Order (event sourcing via protean.testing)
# ---------------------------------------------------------------------------
@given("an order was placed", target_fixture="order")
def _(order_placed):
    return given_(Order, order_placed)


@given("the order was packed", target_fixture="order")
def _(order, order_id):
    for from_status, to_status in zip(_DELIVERY_PATH[:2], _DELIVERY_PATH[1:3]):
        order = order.after(status_changed(order_id, from_status, to_status))
    return order


@given("the order was delivered", target_fixture="order")
def _(order, order_id):
    for from_status, to_status in zip(_DELIVERY_PATH, _DELIVERY_PATH[1:]):
        order = order.after(status_changed(order_id, from_status, to_status))
    return order


@given("the order was returned", target_fixture="order")
def _(order, order_id):
    return order.after(status_changed(order_id, "Delivered", "Returned", role="customer"))


@given("the order was refunded", target_fixture="order")
def _(order, order_id):
    return order.after(status_changed(order_id, "Returned", "Refunded"))


@given("the order was cancelled", target_fixture="order")
def _(order, order_id):
    return order.after(
        OrderCancelled(
            order_id=order_id,
            from_status="Pending",
            reason="Changed my mind",
            cancelled_by="cust-001",
            actor_role="customer",
            cancelled_at=datetime.now(UTC),
        )
    )


# ---------------------------------------------------------------------------
# Given steps - Shopping Cart (plain aggregate)
# ---------------------------------------------------------------------------
@given("an empty cart", target_fixture="cart")
def empty_cart():
    cart = ShoppingCart.create(session_id="sess-001")
    cart._events.clear()
    return cart


@given(
    parsers.cfparse('the cart holds {quantity:d} of "{product_id}" priced {price:g} with stock {stock:d}'),
    target_fixture="cart",
)
def cart_holding(cart, quantity, product_id, price, stock):
    cart.add_item(product(product_id, price, stock), quantity=quantity)
    cart._events.clear()
    return cart


# ---------------------------------------------------------------------------
# Then steps - Order (shared, plain assertions)
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def _(order, status):
    assert order.status == status


@then("the order action fails with a validation error")
def _(order):
    assert order.rejected
    assert isinstance(order.rejection, ValidationError)


@then(parsers.cfparse("an {event_type} order event is raised"))
def _(order, event_type):
    event_cls = _ORDER_EVENT_CLASSES[event_type]
    assert event_cls in order.events


@then(parsers.cfparse("a {event_type} order event is raised"))
def _(order, event_type):
    event_cls = _ORDER_EVENT_CLASSES[event_type]
    assert event_cls in order.events


# ---------------------------------------------------------------------------
# Then steps - Cart (shared)
# ---------------------------------------------------------------------------
@then("the cart action fails with a validation error")
def cart_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse("a {event_type} cart event is raised"))
def cart_event_raised(cart, event_type):
    event_cls = _CART_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in cart._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in cart._events]}"
