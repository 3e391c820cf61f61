"""In-memory product catalogue for development and testing.

Products are registered with ``add_product``. ``fail_next`` makes the next
calls raise CatalogueUnavailableError, to exercise retry behaviour.
"""

from protean.exceptions import ObjectNotFoundError

from storefront.catalogue.port import ProductCatalogue, ProductInfo, ProductPage
from storefront.errors import CatalogueUnavailableError


class FakeProductCatalogue(ProductCatalogue):
    """Configurable in-memory catalogue."""

    def __init__(self) -> None:
        self.products: dict[str, ProductInfo] = {}
        self.calls: list[dict] = []
        self._failures_remaining = 0

    def add_product(
        self,
        product_id: str,
        name: str,
        price: float,
        stock_quantity: int,
        image: str | None = None,
        farmer_name: str | None = None,
    ) -> ProductInfo:
        product = ProductInfo(
            product_id=product_id,
            name=name,
            price=price,
            stock_quantity=stock_quantity,
            image=image,
            farmer_name=farmer_name,
        )
        self.products[product_id] = product
        return product

    def fail_next(self, times: int = 1) -> None:
        """Make the next ``times`` calls fail with a transient error."""
        self._failures_remaining = times

    def _maybe_fail(self) -> None:
        if self._failures_remaining > 0:
            self._failures_remaining -= 1
            raise CatalogueUnavailableError("Network Error")

    def get_product(self, product_id: str) -> ProductInfo:
        self.calls.append({"method": "get_product", "product_id": product_id})
        self._maybe_fail()
        try:
            return self.products[product_id]
        except KeyError:
            raise ObjectNotFoundError(f"Product {product_id} does not exist") from None

    def list_products(self, **filters) -> ProductPage:
        self.calls.append({"method": "list_products", "filters": filters})
        self._maybe_fail()

        products = list(self.products.values())
        search = (filters.get("search") or "").lower()
        if search:
            products = [p for p in products if search in p.name.lower()]
        if filters.get("min_price") is not None:
            products = [p for p in products if p.price >= float(filters["min_price"])]
        if filters.get("max_price") is not None:
            products = [p for p in products if p.price <= float(filters["max_price"])]

        limit = int(filters.get("limit") or 12)
        page = int(filters.get("page") or 1)
        total_pages = max((len(products) + limit - 1) // limit, 1)
        start = (page - 1) * limit
        return ProductPage(
            products=products[start : start + limit],
            current_page=page,
            total_pages=total_pages,
        )
