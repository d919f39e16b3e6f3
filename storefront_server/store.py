"""Local key-value persistence for cart and order history."""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

CART_KEY = "cart"
ORDERS_KEY = "userOrders"


class KeyValueStore(Protocol):
    """Asynchronous string-keyed store holding JSON-encoded values."""

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...


class JsonFileStore:
    """Stores every key in a single JSON file.

    Each ``set`` rewrites the whole file; concurrent writers to the same key
    overwrite one another.
    """

    def __init__(self, path: Optional[str] = None) -> None:
        """
        Initialize the store.

        Args:
            path: File to persist to. Defaults to ~/.storefront_store.json
        """
        if path is None:
            path = str(Path.home() / ".storefront_store.json")
        self.path = path

    def _read_all(self) -> dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not read store file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed store file {self.path}")
            return {}
        return data

    async def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    async def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        with open(self.path, "w") as f:
            json.dump(data, f)
        os.chmod(self.path, 0o600)
        logger.debug(f"Stored key {key!r} in {self.path}")


class MemoryStore:
    """In-process store, used when nothing should touch the disk."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value
