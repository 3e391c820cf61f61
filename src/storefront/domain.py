"""Storefront bounded context - Shopping Cart and Order Lifecycle.

Handles the customer cart (CQRS aggregate with a durable per-session
snapshot), checkout, and the event-sourced order lifecycle driven by
customers and by staff/admin actions.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

storefront = Domain(name="storefront")
