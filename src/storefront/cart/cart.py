"""Shopping Cart aggregate (CQRS): the customer's basket before checkout.

The cart owns its line items and keeps derived totals (item count, subtotal,
shipping fee, tax, coupon discount, grand total) in step with them: every
mutation re-runs the full pricing calculation. Each line's quantity is capped
by the stock that was available when the product was last added.

The cart serializes itself to a JSON snapshot (``snapshot()``) that the
command handlers write to durable storage after every mutation, and can be
rebuilt from one (``ShoppingCart.restore``) when a session starts.
"""

import json
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.cart.events import (
    CartCleared,
    CartCouponApplied,
    CartCouponRemoved,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
)
from storefront.cart.pricing import calculate_totals, coupon_rate, normalize_coupon_code
from storefront.cart.storage.port import cart_key
from storefront.domain import storefront
from storefront.errors import InvalidCouponError, OutOfStockError


@storefront.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    available_stock = Integer(required=True, min_value=0)
    image = String(max_length=500)
    farmer_name = String(max_length=255)

    def to_dict(self):
        return {
            "product_id": str(self.product_id),
            "name": self.name,
            "unit_price": self.unit_price,
            "quantity": self.quantity,
            "available_stock": self.available_stock,
            "image": self.image,
            "farmer_name": self.farmer_name,
        }


@storefront.aggregate
class ShoppingCart:
    customer_id = Identifier()
    session_id = String(max_length=255)
    items = HasMany(CartItem)
    coupon_code = String(max_length=50)

    # Derived totals, recomputed after every mutation
    item_count = Integer(default=0)
    subtotal = Float(default=0.0)
    shipping_fee = Float(default=0.0)
    tax = Float(default=0.0)
    discount = Float(default=0.0)
    total = Float(default=0.0)

    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def quantities_must_not_exceed_stock(self):
        for item in self.items or []:
            if item.quantity > item.available_stock:
                raise ValidationError(
                    {"quantity": [f"Quantity of {item.name} exceeds available stock ({item.available_stock})"]}
                )

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, session_id=None, customer_id=None):
        now = datetime.now(UTC)
        return cls(
            customer_id=customer_id,
            session_id=session_id,
            created_at=now,
            updated_at=now,
        )

    @property
    def storage_key(self):
        return cart_key(self.session_id or self.customer_id or self.id)

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _find(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    @staticmethod
    def _set_line(item, quantity, available_stock):
        # Assign in the order that keeps quantity <= available_stock at every step
        if available_stock >= item.available_stock:
            item.available_stock = available_stock
            item.quantity = quantity
        else:
            item.quantity = quantity
            item.available_stock = available_stock

    def _recalculate_totals(self):
        totals = calculate_totals(self.items, self.coupon_code)
        self.item_count = totals.item_count
        self.subtotal = totals.subtotal
        self.shipping_fee = totals.shipping_fee
        self.tax = totals.tax
        self.discount = totals.discount
        self.total = totals.total
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product, quantity=1):
        """Add a catalogue product, or increase its quantity if already present.

        ``product`` is a ProductInfo. Its stock becomes the line's new ceiling.
        """
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if product.stock_quantity < 1:
            raise OutOfStockError({"product_id": [f"Product {product.name} is out of stock"]})

        stock = product.stock_quantity
        existing = self._find(product.product_id)
        if existing:
            new_quantity = min(existing.quantity + quantity, stock)
            self._set_line(existing, new_quantity, stock)
        else:
            new_quantity = min(quantity, stock)
            self.add_items(
                CartItem(
                    product_id=product.product_id,
                    name=product.name,
                    unit_price=product.price,
                    quantity=new_quantity,
                    available_stock=stock,
                    image=product.image,
                    farmer_name=product.farmer_name,
                )
            )

        self._recalculate_totals()

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                product_id=str(product.product_id),
                requested_quantity=quantity,
                new_quantity=new_quantity,
                unit_price=product.price,
            )
        )

    def update_quantity(self, product_id, new_quantity):
        """Change a line's quantity, clamped to [1, available_stock].

        A quantity of zero or less removes the line. Unknown products are ignored.
        """
        item = self._find(product_id)
        if item is None:
            return

        if new_quantity <= 0:
            self.remove_item(product_id)
            return

        previous_quantity = item.quantity
        clamped = min(new_quantity, item.available_stock)
        item.quantity = clamped
        self._recalculate_totals()

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=clamped,
            )
        )

    def remove_item(self, product_id):
        """Remove a line. Removing a product that is not in the cart does nothing."""
        item = self._find(product_id)
        if item is None:
            return

        self.remove_items(item)
        self._recalculate_totals()

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                product_id=str(product_id),
            )
        )

    def clear(self):
        """Empty the cart and drop any applied coupon."""
        for item in list(self.items):
            self.remove_items(item)
        self.coupon_code = None
        self._recalculate_totals()

        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                cleared_at=self.updated_at,
            )
        )

    # -------------------------------------------------------------------
    # Coupons
    # -------------------------------------------------------------------
    def apply_coupon(self, code):
        """Apply a coupon code. Unknown codes are rejected and leave totals untouched."""
        normalized = normalize_coupon_code(code)
        if not normalized:
            raise InvalidCouponError({"coupon_code": ["Please enter a coupon code"]})
        if coupon_rate(normalized) is None:
            raise InvalidCouponError({"coupon_code": [f"Invalid coupon code: {code}"]})

        self.coupon_code = normalized
        self._recalculate_totals()

        self.raise_(
            CartCouponApplied(
                cart_id=str(self.id),
                coupon_code=normalized,
                discount=self.discount,
            )
        )

    def remove_coupon(self):
        if not self.coupon_code:
            return

        removed = self.coupon_code
        self.coupon_code = None
        self._recalculate_totals()

        self.raise_(
            CartCouponRemoved(
                cart_id=str(self.id),
                coupon_code=removed,
            )
        )

    # -------------------------------------------------------------------
    # Snapshot (durable per-session copy)
    # -------------------------------------------------------------------
    def snapshot(self):
        """Serialize the cart's line items and coupon to a JSON blob."""
        return json.dumps(
            {
                "cart_id": str(self.id),
                "session_id": self.session_id,
                "customer_id": str(self.customer_id) if self.customer_id else None,
                "coupon_code": self.coupon_code,
                "items": [item.to_dict() for item in self.items],
            }
        )

    @classmethod
    def restore(cls, blob, session_id=None, customer_id=None):
        """Rebuild a cart from a snapshot produced by ``snapshot()``.

        Lines whose stock has dropped to zero are skipped; quantities are
        clamped to the recorded stock. Totals are recomputed.
        """
        data = json.loads(blob) if isinstance(blob, str) else dict(blob)
        now = datetime.now(UTC)

        kwargs = {
            "session_id": session_id or data.get("session_id"),
            "customer_id": customer_id or data.get("customer_id"),
            "created_at": now,
            "updated_at": now,
        }
        if data.get("cart_id"):
            kwargs["id"] = data["cart_id"]
        cart = cls(**kwargs)

        for line in data.get("items", []):
            stock = int(line.get("available_stock") or 0)
            quantity = min(int(line.get("quantity") or 0), stock)
            if quantity < 1:
                continue
            cart.add_items(
                CartItem(
                    product_id=line["product_id"],
                    name=line["name"],
                    unit_price=float(line["unit_price"]),
                    quantity=quantity,
                    available_stock=stock,
                    image=line.get("image"),
                    farmer_name=line.get("farmer_name"),
                )
            )

        if coupon_rate(data.get("coupon_code")) is not None:
            cart.coupon_code = normalize_coupon_code(data["coupon_code"])

        cart._recalculate_totals()
        return cart
