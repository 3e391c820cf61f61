"""Product catalogue port (abstract interface).

The storefront depends on the catalogue only for a product's price and its
stock ceiling (plus a few display fields). Adapters: FakeProductCatalogue
(dev/test) and HttpProductCatalogue (the catalogue REST service).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProductInfo:
    """The slice of a catalogue product the cart cares about."""

    product_id: str
    name: str
    price: float
    stock_quantity: int
    image: str | None = None
    farmer_name: str | None = None


@dataclass(frozen=True)
class ProductPage:
    """One page of a product listing."""

    products: list[ProductInfo] = field(default_factory=list)
    current_page: int = 1
    total_pages: int = 1


class ProductCatalogue(ABC):
    """Abstract product catalogue interface."""

    @abstractmethod
    def get_product(self, product_id: str) -> ProductInfo:
        """Fetch a single product.

        Raises ObjectNotFoundError when the product does not exist,
        CatalogueUnavailableError on transient failures.
        """
        ...

    @abstractmethod
    def list_products(self, **filters) -> ProductPage:
        """Fetch a page of products matching the given filters."""
        ...
