"""Cart pricing rules: shipping tiers, tax and coupon discounts.

Totals are a pure function of the line items and the applied coupon. They
are recomputed in full after every cart mutation; nothing is cached between
calls. Amounts are plain floats; rounding is left to presentation.
"""

from collections.abc import Iterable
from dataclasses import dataclass

FREE_SHIPPING_THRESHOLD = 500.0
FLAT_SHIPPING_FEE = 50.0
TAX_RATE = 0.05  # GST on food products

# Coupon code -> fraction of the subtotal taken off
COUPONS = {
    "RICE10": 0.10,
}


@dataclass(frozen=True)
class CartTotals:
    """Derived financial summary of a cart."""

    item_count: int = 0
    subtotal: float = 0.0
    shipping_fee: float = 0.0
    tax: float = 0.0
    discount: float = 0.0
    total: float = 0.0


def normalize_coupon_code(code: str | None) -> str:
    return (code or "").strip().upper()


def coupon_rate(code: str | None) -> float | None:
    """Return the discount rate for a coupon code, or None if it is unknown."""
    return COUPONS.get(normalize_coupon_code(code))


def shipping_fee_for(subtotal: float) -> float:
    if subtotal == 0:
        return 0.0
    return FLAT_SHIPPING_FEE if subtotal < FREE_SHIPPING_THRESHOLD else 0.0


def calculate_totals(lines: Iterable, coupon_code: str | None = None) -> CartTotals:
    """Compute cart totals from line items exposing ``unit_price`` and ``quantity``."""
    item_count = 0
    subtotal = 0.0
    for line in lines:
        item_count += line.quantity
        subtotal += line.unit_price * line.quantity

    shipping_fee = shipping_fee_for(subtotal)
    tax = subtotal * TAX_RATE
    discount = subtotal * (coupon_rate(coupon_code) or 0.0) if coupon_code else 0.0

    return CartTotals(
        item_count=item_count,
        subtotal=subtotal,
        shipping_fee=shipping_fee,
        tax=tax,
        discount=discount,
        total=subtotal + shipping_fee + tax - discount,
    )
