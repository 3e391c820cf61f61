"""Product catalogue factory.

Provides get_catalogue() / set_catalogue() to swap implementations:
- HttpProductCatalogue when CATALOGUE_BASE_URL is set
- FakeProductCatalogue otherwise (development and testing)
"""

import os

from storefront.catalogue.fake_adapter import FakeProductCatalogue
from storefront.catalogue.http_adapter import HttpProductCatalogue
from storefront.catalogue.port import ProductCatalogue

_current_catalogue: ProductCatalogue | None = None


def get_catalogue() -> ProductCatalogue:
    """Return the current product catalogue."""
    global _current_catalogue
    if _current_catalogue is None:
        base_url = os.getenv("CATALOGUE_BASE_URL")
        _current_catalogue = HttpProductCatalogue(base_url) if base_url else FakeProductCatalogue()
    return _current_catalogue


def set_catalogue(catalogue: ProductCatalogue) -> None:
    """Override the active product catalogue (useful for tests)."""
    global _current_catalogue
    _current_catalogue = catalogue


def reset_catalogue() -> None:
    """Reset to the default catalogue."""
    global _current_catalogue
    _current_catalogue = None
