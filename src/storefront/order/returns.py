"""Order returns: command and handler."""

from protean import handle
from protean.fields import Identifier, String

from storefront.domain import storefront
from storefront.order.access import load_order_for, save_order
from storefront.order.order import ActorRole, Order


@storefront.command(part_of="Order")
class RequestReturn:
    order_id = Identifier(required=True)
    reason = String(max_length=500)
    actor = String(max_length=255)


@storefront.command_handler(part_of=Order)
class RequestReturnHandler:
    @handle(RequestReturn)
    def request_return(self, command):
        order = load_order_for(command.order_id, command.actor, ActorRole.CUSTOMER)
        order.request_return(reason=command.reason, actor=command.actor)
        save_order(order)
