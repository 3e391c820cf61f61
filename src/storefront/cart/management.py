"""Cart management: creation and session rehydration."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.cart.persistence import save_cart
from storefront.cart.storage import cart_key, get_cart_storage
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="ShoppingCart")
class CreateCart:
    """Create an empty cart for a browser session or a registered customer."""

    session_id = String(max_length=255)
    customer_id = Identifier()


@storefront.command(part_of="ShoppingCart")
class RestoreCart:
    """Rehydrate a session's cart from its stored snapshot (or start a fresh one)."""

    session_id = String(required=True, max_length=255)
    customer_id = Identifier()


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        cart = ShoppingCart.create(
            session_id=command.session_id,
            customer_id=command.customer_id,
        )
        save_cart(cart)
        return str(cart.id)

    @handle(RestoreCart)
    def restore_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        blob = get_cart_storage().load(cart_key(command.session_id))

        if blob is None:
            cart = ShoppingCart.create(
                session_id=command.session_id,
                customer_id=command.customer_id,
            )
            save_cart(cart)
            logger.info("No stored cart, started a new one", session_id=command.session_id)
            return str(cart.id)

        cart = ShoppingCart.restore(
            blob,
            session_id=command.session_id,
            customer_id=command.customer_id,
        )
        try:
            existing = repo.get(cart.id)
        except ObjectNotFoundError:
            existing = None

        if existing is not None:
            return str(existing.id)

        save_cart(cart)
        logger.info(
            "Cart restored from snapshot",
            cart_id=str(cart.id),
            session_id=command.session_id,
            item_count=cart.item_count,
        )
        return str(cart.id)
