"""Tests for the HTTP product catalogue adapter (requests session mocked)."""

from unittest.mock import MagicMock

import pytest
import requests
from protean.exceptions import ObjectNotFoundError
from storefront.catalogue.http_adapter import HttpProductCatalogue
from storefront.catalogue.retry import RetryPolicy
from storefront.errors import CatalogueError, CatalogueUnavailableError

PRODUCT_DOC = {
    "_id": "rice-basmati",
    "name": "Basmati Rice 1kg",
    "price": 120,
    "availableQuantity": 7,
    "stockQuantity": 40,
    "images": ["/img/basmati.jpg", "/img/basmati-2.jpg"],
    "farmer": {"farmName": "Green Valley Farm"},
}


def _response(status_code=200, body=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body
    response.text = "error"
    return response


@pytest.fixture()
def session():
    return MagicMock()


@pytest.fixture()
def sleeps():
    return []


@pytest.fixture()
def adapter(session, sleeps):
    return HttpProductCatalogue(
        "http://catalogue.local/api/",
        retry_policy=RetryPolicy(sleep=sleeps.append),
        session=session,
    )


class TestGetProduct:
    def test_maps_product_document(self, adapter, session):
        session.get.return_value = _response(body=PRODUCT_DOC)

        product = adapter.get_product("rice-basmati")

        assert product.product_id == "rice-basmati"
        assert product.price == 120.0
        assert product.stock_quantity == 7
        assert product.image == "/img/basmati.jpg"
        assert product.farmer_name == "Green Valley Farm"
        session.get.assert_called_once_with(
            "http://catalogue.local/api/products/rice-basmati", params=None, timeout=5.0
        )

    def test_falls_back_to_stock_quantity(self, adapter, session):
        doc = {key: value for key, value in PRODUCT_DOC.items() if key != "availableQuantity"}
        session.get.return_value = _response(body=doc)
        assert adapter.get_product("rice-basmati").stock_quantity == 40

    def test_404_is_not_found(self, adapter, session):
        session.get.return_value = _response(status_code=404)
        with pytest.raises(ObjectNotFoundError):
            adapter.get_product("rice-missing")

    def test_other_client_errors_are_catalogue_errors(self, adapter, session):
        session.get.return_value = _response(status_code=400)
        with pytest.raises(CatalogueError) as exc_info:
            adapter.get_product("rice-basmati")
        assert exc_info.value.status_code == 400

    def test_connection_failure_is_not_retried(self, adapter, session, sleeps):
        session.get.side_effect = requests.ConnectionError("refused")
        with pytest.raises(CatalogueUnavailableError):
            adapter.get_product("rice-basmati")
        assert session.get.call_count == 1
        assert sleeps == []


class TestListProducts:
    def test_maps_page(self, adapter, session):
        session.get.return_value = _response(body={"products": [PRODUCT_DOC], "currentPage": 2, "totalPages": 3})

        page = adapter.list_products(search="basmati", min_price=100, max_price=None, page=2)

        assert [p.product_id for p in page.products] == ["rice-basmati"]
        assert page.current_page == 2
        assert page.total_pages == 3
        _, kwargs = session.get.call_args
        assert kwargs["params"] == {"search": "basmati", "minPrice": 100, "page": 2}

    def test_retries_network_errors_then_succeeds(self, adapter, session, sleeps):
        session.get.side_effect = [
            requests.ConnectionError("refused"),
            requests.Timeout("slow"),
            _response(body={"products": [], "currentPage": 1, "totalPages": 1}),
        ]
        page = adapter.list_products()
        assert page.products == []
        assert session.get.call_count == 3
        assert sleeps == [2.0, 2.0]

    def test_server_errors_exhaust_retries(self, adapter, session, sleeps):
        session.get.return_value = _response(status_code=503)
        with pytest.raises(CatalogueUnavailableError):
            adapter.list_products()
        assert session.get.call_count == 4
        assert len(sleeps) == 3

    def test_not_found_listing_is_not_retried(self, adapter, session, sleeps):
        session.get.return_value = _response(status_code=404)
        with pytest.raises(CatalogueError) as exc_info:
            adapter.list_products()
        assert "temporarily unavailable" in str(exc_info.value)
        assert sleeps == []

    def test_unexpected_shape_yields_empty_page(self, adapter, session):
        session.get.return_value = _response(body=[PRODUCT_DOC])
        page = adapter.list_products()
        assert page.products == []
        assert page.total_pages == 1


class TestFakeCatalogue:
    def test_filters_and_paginates(self, catalogue):
        page = catalogue.list_products(max_price=100, limit=1, page=2)
        assert len(page.products) == 1
        assert page.total_pages == 2

    def test_injected_failures(self, catalogue):
        catalogue.fail_next(1)
        with pytest.raises(CatalogueUnavailableError):
            catalogue.get_product("rice-basmati")
        assert catalogue.get_product("rice-basmati").name == "Basmati Rice 1kg"
