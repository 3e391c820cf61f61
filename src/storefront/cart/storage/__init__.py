"""Cart snapshot storage factory.

Provides get_cart_storage() / set_cart_storage() to swap implementations:
- FileCartStorage when CART_STORAGE_DIR is set
- InMemoryCartStorage otherwise (development and testing)
"""

import os

from storefront.cart.storage.file_adapter import FileCartStorage
from storefront.cart.storage.memory_adapter import InMemoryCartStorage
from storefront.cart.storage.port import CartStorage, cart_key

__all__ = ["CartStorage", "cart_key", "get_cart_storage", "set_cart_storage", "reset_cart_storage"]

_current_storage: CartStorage | None = None


def get_cart_storage() -> CartStorage:
    """Return the current cart storage."""
    global _current_storage
    if _current_storage is None:
        directory = os.getenv("CART_STORAGE_DIR")
        _current_storage = FileCartStorage(directory) if directory else InMemoryCartStorage()
    return _current_storage


def set_cart_storage(storage: CartStorage) -> None:
    """Override the active cart storage (useful for tests)."""
    global _current_storage
    _current_storage = storage


def reset_cart_storage() -> None:
    """Reset to the default storage."""
    global _current_storage
    _current_storage = None
