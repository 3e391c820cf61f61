"""Order lines: one row per product per order, for product sales analytics."""

import json

from protean.core.projector import on
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.events import OrderPlaced
from storefront.order.order import Order


@storefront.projection
class OrderLine:
    line_id = String(identifier=True, required=True, max_length=255)  # "<order_id>:<product_id>"
    order_id = Identifier(required=True)
    product_id = Identifier(required=True)
    name = String(max_length=255)
    quantity = Integer(default=0)
    revenue = Float(default=0.0)


@storefront.projector(projector_for=OrderLine, aggregates=[Order])
class OrderLineProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        repo = current_domain.repository_for(OrderLine)
        items = json.loads(event.items) if isinstance(event.items, str) else []
        for item in items:
            quantity = int(item.get("quantity", 0))
            repo.add(
                OrderLine(
                    line_id=f"{event.order_id}:{item['product_id']}",
                    order_id=event.order_id,
                    product_id=item["product_id"],
                    name=item.get("name"),
                    quantity=quantity,
                    revenue=float(item.get("unit_price", 0.0)) * quantity,
                )
            )
