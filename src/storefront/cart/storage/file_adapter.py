"""File-backed cart snapshot storage: one JSON file per key.

Writes go to a temporary file that is then renamed over the target, so a
reader never observes a half-written snapshot.
"""

import os
from pathlib import Path
from urllib.parse import quote

import structlog

from storefront.cart.storage.port import CartStorage

logger = structlog.get_logger(__name__)


class FileCartStorage(CartStorage):
    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        # Distinct keys map to distinct file names
        return self.directory / f"{quote(key, safe='')}.json"

    def load(self, key: str) -> str | None:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def save(self, key: str, blob: str) -> None:
        path = self._path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(blob, encoding="utf-8")
        os.replace(tmp_path, path)
        logger.debug("Cart snapshot written", key=key, path=str(path))

    def delete(self, key: str) -> None:
        self._path_for(key).unlink(missing_ok=True)
