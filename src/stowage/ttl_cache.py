"""
TTL Cache Decorator
===================

Wraps any ``ReadWriter`` with an in-memory cache whose entries expire a fixed
number of seconds after they were installed. ``TTLCache`` is itself a
``ReadWriter``, so it can sit in front of any backend, including another
``TTLCache``.

Usage:
    from stowage import FilesystemStorage, TTLCache

    store = TTLCache(FilesystemStorage("/var/lib/app"), ttl_seconds=30)
    store.write("config/app.json", body)   # written to disk, then cached
    store.read("config/app.json")          # served from memory for 30s

Expired entries are never swept; they are detected on the next read and
replaced. The table is unbounded in count.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .backends.base import ReadWriter
from .config import StorageOptions
from .error_handling import StorageConfigurationError
from .locks import ReadWriteLock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A cached object and the absolute time it stops being valid."""

    data: bytes
    expiry: float

    def is_valid(self, now: float) -> bool:
        return self.expiry > now


class TTLCache(ReadWriter):
    """
    Read-through, write-through expiring cache in front of a backing store.

    All access to the table goes through one table-wide reader/writer lock:
    lookups take the shared side, every mutation takes the exclusive side.
    ``write`` holds the exclusive side across both the backing-store write and
    the cache install, so readers see either the old entry or the new one.

    The decorator's TTL is fixed at construction. A per-call
    ``StorageOptions.ttl`` is forwarded to the backing store and does not
    change how long the decorator caches the value.

    Attributes:
        store: The wrapped backing store
        ttl_seconds: How long an installed entry stays valid
    """

    def __init__(
        self,
        store: ReadWriter,
        ttl_seconds: float,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the TTL cache.

        Args:
            store: Backing store to wrap
            ttl_seconds: Lifetime of cache entries in seconds (non-negative)
            clock: Returns the current time in seconds; override for testing
        """
        if ttl_seconds is None or ttl_seconds < 0:
            raise StorageConfigurationError(
                "ttl_seconds must be non-negative", {"ttl_seconds": ttl_seconds}
            )

        self.store = store
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._cache: Dict[str, CacheEntry] = {}
        self._lock = ReadWriteLock()
        # Counters only; the table itself is guarded by _lock
        self._stats_lock = threading.Lock()
        self._hits = 0
        self._misses = 0

        logger.debug(
            f"TTLCache initialized over {type(store).__name__} (ttl={ttl_seconds}s)"
        )

    def read(self, key: str) -> bytes:
        """
        Return the cached object if still valid, otherwise read through.

        Errors from the backing store (``NotFoundError`` included) propagate
        unchanged and leave the cache as it was.
        """
        entry = self._get_entry(key)
        if entry is not None and entry.is_valid(self._clock()):
            with self._stats_lock:
                self._hits += 1
            return entry.data

        with self._stats_lock:
            self._misses += 1

        # Absent or expired: both read through to the backing store
        data = self.store.read(key)

        with self._lock.write_locked():
            self._cache[key] = self._new_entry(data)

        logger.debug(f"Cached {key} from {type(self.store).__name__}")
        return data

    def write(
        self, key: str, data: bytes, options: Optional[StorageOptions] = None
    ) -> None:
        """
        Write through to the backing store, then cache the new value.

        If the backing store raises, the cache is not touched.
        """
        with self._lock.write_locked():
            self.store.write(key, data, options)
            self._cache[key] = self._new_entry(data)

    def remove(self, key: str) -> None:
        """
        Remove from the backing store, then drop any cached entry.

        Raises ``TypeError`` when the backing store has no ``remove``. If the
        backing store raises, the cache is not touched.
        """
        remove = getattr(self.store, "remove", None)
        if remove is None:
            raise TypeError(f"{type(self.store).__name__} does not support remove")

        with self._lock.write_locked():
            remove(key)
            self._cache.pop(key, None)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with entry count (expired entries included until
            replaced), hit and miss counters and the configured TTL.
        """
        with self._lock.read_locked():
            entries = len(self._cache)

        with self._stats_lock:
            return {
                "entries": entries,
                "hits": self._hits,
                "misses": self._misses,
                "ttl_seconds": self.ttl_seconds,
            }

    def _get_entry(self, key: str) -> Optional[CacheEntry]:
        with self._lock.read_locked():
            return self._cache.get(key)

    def _new_entry(self, data: bytes) -> CacheEntry:
        return CacheEntry(data=data, expiry=self._clock() + self.ttl_seconds)
