"""Persist a cart: repository write plus the durable session snapshot."""

import structlog
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.cart.storage import get_cart_storage

logger = structlog.get_logger(__name__)


def load_cart(cart_id):
    return current_domain.repository_for(ShoppingCart).get(cart_id)


def save_cart(cart):
    current_domain.repository_for(ShoppingCart).add(cart)
    get_cart_storage().save(cart.storage_key, cart.snapshot())
    logger.debug(
        "Cart saved",
        cart_id=str(cart.id),
        item_count=cart.item_count,
        total=cart.total,
    )
