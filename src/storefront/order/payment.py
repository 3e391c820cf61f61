"""Order payment: command and handler.

Records the payment gateway's result on the order. A Pending order moves on
to Processing once paid.
"""

from protean import handle
from protean.fields import Identifier, String

from storefront.domain import storefront
from storefront.order.access import load_order_for, save_order
from storefront.order.order import ActorRole, Order


@storefront.command(part_of="Order")
class MarkOrderPaid:
    order_id = Identifier(required=True)
    payment_id = String(max_length=255)
    payment_status = String(max_length=50)
    email_address = String(max_length=255)
    actor = String(max_length=255)
    actor_role = String(max_length=20, default=ActorRole.CUSTOMER.value)


@storefront.command_handler(part_of=Order)
class MarkOrderPaidHandler:
    @handle(MarkOrderPaid)
    def mark_order_paid(self, command):
        order = load_order_for(command.order_id, command.actor, command.actor_role or ActorRole.CUSTOMER.value)
        order.mark_paid(
            payment_id=command.payment_id,
            payment_status=command.payment_status,
            email_address=command.email_address,
            paid_by=command.actor,
        )
        save_order(order)
