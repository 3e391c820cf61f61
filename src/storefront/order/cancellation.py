"""Order cancellation: command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String

from storefront.domain import storefront
from storefront.order.access import load_order_for, save_order
from storefront.order.order import ActorRole, Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(max_length=500)
    actor = String(max_length=255)
    actor_role = String(max_length=20, default=ActorRole.CUSTOMER.value)


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        role = command.actor_role or ActorRole.CUSTOMER.value
        order = load_order_for(command.order_id, command.actor, role)
        order.cancel(reason=command.reason, actor=command.actor, role=role)
        save_order(order)

        logger.info(
            "Order cancelled",
            order_id=str(order.id),
            reason=order.cancellation_reason,
            actor_role=role,
        )
