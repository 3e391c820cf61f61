"""Domain events for the ShoppingCart aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product was added to the cart (or its quantity increased by a re-add)."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    requested_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    unit_price = Float(required=True)


@storefront.event(part_of="ShoppingCart")
class CartQuantityUpdated:
    """The quantity of a cart line was changed."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartItemRemoved:
    """A line was removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.event(part_of="ShoppingCart")
class CartCleared:
    """All lines were removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    cleared_at = DateTime(required=True)


@storefront.event(part_of="ShoppingCart")
class CartCouponApplied:
    """A coupon code was applied to the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    coupon_code = String(required=True)
    discount = Float(required=True)


@storefront.event(part_of="ShoppingCart")
class CartCouponRemoved:
    """The applied coupon was dropped from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    coupon_code = String(required=True)
