"""Cart snapshot storage port (abstract interface).

A durable key-value slot holding one serialized cart per session. The cart
writes its snapshot after every mutation and is rehydrated from it when a
session starts. There is a single writer per key.
"""

from abc import ABC, abstractmethod

CART_KEY_PREFIX = "cartItems"


def cart_key(owner: str) -> str:
    """Well-known storage key for a session's (or customer's) cart."""
    return f"{CART_KEY_PREFIX}:{owner}"


class CartStorage(ABC):
    """Abstract cart snapshot storage."""

    @abstractmethod
    def load(self, key: str) -> str | None:
        """Return the stored JSON blob, or None when nothing is stored."""
        ...

    @abstractmethod
    def save(self, key: str, blob: str) -> None:
        """Store (overwrite) the JSON blob under ``key``."""
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the blob stored under ``key``, if any."""
        ...
