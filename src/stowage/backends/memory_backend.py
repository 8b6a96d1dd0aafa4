"""
In-Memory Storage Backend
=========================

Stores objects in a dictionary. Useful for testing or ephemeral stores.
Data is lost when the backend is garbage collected.

This backend applies no locking of its own: concurrent use needs external
synchronization.
"""

import logging
from typing import Dict, List, Optional

from ..config import StorageOptions
from ..error_handling import NotFoundError
from .base import ListableStorageBackend

logger = logging.getLogger(__name__)


class MemoryStorage(ListableStorageBackend):
    """
    Process-local storage backend with no persistence.

    Write options are ignored. Removing a missing key succeeds silently.
    """

    def __init__(self):
        """Initialize in-memory storage backend."""
        self._data: Dict[str, bytes] = {}
        logger.debug("MemoryStorage initialized")

    def read(self, key: str) -> bytes:
        """Read an object from memory."""
        if key not in self._data:
            raise NotFoundError(key)
        return self._data[key]

    def write(
        self, key: str, data: bytes, options: Optional[StorageOptions] = None
    ) -> None:
        """Write an object to memory."""
        self._data[key] = data
        logger.debug(f"Wrote {key} ({len(data)} bytes) to memory")

    def remove(self, key: str) -> None:
        """Remove an object from memory."""
        if self._data.pop(key, None) is not None:
            logger.debug(f"Removed {key} from memory")

    def keys(self, path: str) -> List[str]:
        """List keys starting with ``path``."""
        return [k for k in self._data if k.startswith(path)]

    def clear(self) -> int:
        """Clear all objects from memory. Returns count of objects cleared."""
        count = len(self._data)
        self._data.clear()
        return count

    def __len__(self) -> int:
        return len(self._data)
