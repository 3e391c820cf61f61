"""Order status transitions: single and bulk.

Staff drive orders through the lifecycle one at a time, or in bulk from the
admin order list. A bulk run is not atomic: each order is its own unit of
work and failures are collected rather than raised.
"""

from dataclasses import dataclass, field

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import OrderAccessDeniedError
from storefront.order.access import load_order_for, save_order
from storefront.order.order import ActorRole, Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class TransitionOrderStatus:
    order_id = Identifier(required=True)
    new_status = String(required=True, max_length=50)
    note = String(max_length=500)
    actor = String(max_length=255)
    actor_role = String(max_length=20, default=ActorRole.STAFF.value)


@storefront.command_handler(part_of=Order)
class TransitionOrderStatusHandler:
    @handle(TransitionOrderStatus)
    def transition_order_status(self, command):
        role = command.actor_role or ActorRole.STAFF.value
        order = load_order_for(command.order_id, command.actor, role)
        previous = order.status
        order.transition_status(
            command.new_status,
            note=command.note,
            actor=command.actor,
            role=role,
        )
        save_order(order)

        logger.info(
            "Order status changed",
            order_id=str(order.id),
            from_status=previous,
            to_status=order.status,
            actor_role=role,
        )


@dataclass
class BulkTransitionResult:
    succeeded: list = field(default_factory=list)
    failed: dict = field(default_factory=dict)  # order_id -> error message

    @property
    def success_count(self) -> int:
        return len(self.succeeded)

    @property
    def failure_count(self) -> int:
        return len(self.failed)


def _error_message(exc) -> str:
    if isinstance(exc, ValidationError):
        return "; ".join(msg for messages in exc.messages.values() for msg in messages)
    return str(exc)


def bulk_transition_status(order_ids, new_status, note=None, actor=None, role=ActorRole.STAFF.value):
    """Apply the same transition to many orders, one unit of work per order."""
    result = BulkTransitionResult()

    for order_id in order_ids:
        try:
            current_domain.process(
                TransitionOrderStatus(
                    order_id=order_id,
                    new_status=new_status.value if hasattr(new_status, "value") else new_status,
                    note=note,
                    actor=actor,
                    actor_role=role.value if hasattr(role, "value") else role,
                ),
                asynchronous=False,
            )
            result.succeeded.append(str(order_id))
        except (ValidationError, ObjectNotFoundError, OrderAccessDeniedError) as exc:
            result.failed[str(order_id)] = _error_message(exc)
            logger.warning(
                "Bulk status update failed for order",
                order_id=str(order_id),
                new_status=str(new_status),
                error=_error_message(exc),
            )

    logger.info(
        "Bulk status update finished",
        new_status=str(new_status),
        succeeded=result.success_count,
        failed=result.failure_count,
    )
    return result
