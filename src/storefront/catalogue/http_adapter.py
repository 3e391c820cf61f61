"""HTTP adapter for the product catalogue REST service.

Endpoints:
    GET {base_url}/products?page=&limit=&...  -> {products, currentPage, totalPages}
    GET {base_url}/products/{id}              -> single product document

Connection errors and timeouts are transient (CatalogueUnavailableError).
Listing products goes through the configured RetryPolicy; single product
lookups are attempted once.
"""

import requests
import structlog
from protean.exceptions import ObjectNotFoundError

from storefront.catalogue.port import ProductCatalogue, ProductInfo, ProductPage
from storefront.catalogue.retry import RetryPolicy
from storefront.errors import CatalogueError, CatalogueUnavailableError

logger = structlog.get_logger(__name__)

# Filter names the catalogue service expects in the query string
_QUERY_PARAM_NAMES = {
    "min_price": "minPrice",
    "max_price": "maxPrice",
}


def _to_product(doc: dict) -> ProductInfo:
    stock = doc.get("availableQuantity")
    if stock is None:
        stock = doc.get("stockQuantity", 0)

    images = doc.get("images") or []
    farmer = doc.get("farmer")
    farmer_name = farmer.get("farmName") if isinstance(farmer, dict) else None

    return ProductInfo(
        product_id=str(doc.get("_id") or doc.get("id")),
        name=doc.get("name", ""),
        price=float(doc.get("price", 0)),
        stock_quantity=int(stock or 0),
        image=images[0] if images else None,
        farmer_name=farmer_name or "Unknown Farm",
    )


class HttpProductCatalogue(ProductCatalogue):
    """Product catalogue backed by the catalogue REST API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        retry_policy: RetryPolicy | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy()
        self.session = session or requests.Session()

    def _get(self, path: str, params: dict | None = None) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise CatalogueUnavailableError(f"Catalogue unreachable: {exc}") from exc

        if response.status_code >= 500:
            raise CatalogueUnavailableError(
                f"Catalogue returned {response.status_code}",
            )
        return response

    def get_product(self, product_id: str) -> ProductInfo:
        response = self._get(f"/products/{product_id}")
        if response.status_code == 404:
            raise ObjectNotFoundError(f"Product {product_id} does not exist")
        if response.status_code >= 400:
            raise CatalogueError(
                f"Failed to fetch product {product_id}: {response.text}",
                status_code=response.status_code,
            )
        return _to_product(response.json())

    def _fetch_page(self, params: dict) -> ProductPage:
        response = self._get("/products", params=params)
        if response.status_code >= 400:
            raise CatalogueError(
                "Products not found. The service might be temporarily unavailable."
                if response.status_code == 404
                else "Failed to load products. Please try again later.",
                status_code=response.status_code,
            )

        body = response.json()
        if not isinstance(body, dict) or not isinstance(body.get("products"), list):
            logger.warning("Unexpected product listing format", body_type=type(body).__name__)
            return ProductPage()

        return ProductPage(
            products=[_to_product(doc) for doc in body["products"]],
            current_page=int(body.get("currentPage") or 1),
            total_pages=int(body.get("totalPages") or 1),
        )

    def list_products(self, **filters) -> ProductPage:
        params = {
            _QUERY_PARAM_NAMES.get(key, key): value for key, value in filters.items() if value not in (None, "")
        }
        return self.retry_policy.call(self._fetch_page, params)
