"""Error kinds raised by the storefront domain.

Rule violations are Protean ``ValidationError`` subclasses carrying a dict of
field -> messages, so the HTTP layer reports them as 400 responses. Catalogue
failures are plain exceptions raised at the collaborator boundary.
"""

from protean.exceptions import ValidationError


class OutOfStockError(ValidationError):
    """A product with no available stock was added to the cart."""


class InvalidCouponError(ValidationError):
    """A coupon code did not match any known rule."""


class EmptyCartError(ValidationError):
    """Checkout was attempted with no line items in the cart."""


class InvalidTransitionError(ValidationError):
    """An order status change is not allowed from the current state."""


class CatalogueError(Exception):
    """The product catalogue returned an error response."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CatalogueUnavailableError(CatalogueError):
    """The product catalogue could not be reached (transient failure)."""


class OrderAccessDeniedError(Exception):
    """A customer acted on an order that belongs to someone else."""
