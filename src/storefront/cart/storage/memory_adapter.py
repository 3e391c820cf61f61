"""In-memory cart snapshot storage for development and testing."""

from storefront.cart.storage.port import CartStorage


class InMemoryCartStorage(CartStorage):
    def __init__(self) -> None:
        self.blobs: dict[str, str] = {}

    def load(self, key: str) -> str | None:
        return self.blobs.get(key)

    def save(self, key: str, blob: str) -> None:
        self.blobs[key] = blob

    def delete(self, key: str) -> None:
        self.blobs.pop(key, None)
