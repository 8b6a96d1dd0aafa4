"""
Redis Storage Backends
======================

Key-value storage on a Redis instance, either over one dedicated connection
or with a connection borrowed from a pool for each operation. Both forms
expose the same contract.

Requirements:
    pip install stowage[redis]
    # or
    pip install redis

Usage:
    from stowage.backends.redis_backend import RedisPoolStorage

    store = RedisPoolStorage.from_url("redis://localhost:6379/0", root="sessions")
    store.write("abc", b"payload")      # SET sessions/abc payload
    data = store.read("abc")            # GET sessions/abc

A non-empty ``root`` is prepended to every key (``"<root>/<key>"``), which
lets several logical stores share one Redis database without collisions.
"""

import logging
from abc import abstractmethod
from typing import Any, Optional

from ..config import StorageOptions
from ..error_handling import (
    MalformedResponseError,
    NotFoundError,
    handle_missing_dependency,
    log_storage_performance,
)
from .base import StorageBackend

logger = logging.getLogger(__name__)


# Check for redis availability
try:
    import redis
    from redis.connection import Connection, parse_url

    REDIS_AVAILABLE = True
except ImportError:
    REDIS_AVAILABLE = False
    redis = None

REDIS_CMD_SET = "SET"
REDIS_CMD_GET = "GET"
REDIS_CMD_DELETE = "DEL"


class _RedisCommandStorage(StorageBackend):
    """Shared SET/GET/DEL semantics; subclasses decide where the connection comes from.

    Write options are ignored. Removing a missing key succeeds (``DEL``
    returns 0).
    """

    def __init__(self, root: str = ""):
        self.root = root

    @abstractmethod
    def _do(self, *args) -> Any:
        """Issue one command and return its reply."""
        pass

    @log_storage_performance
    def write(
        self, key: str, data: bytes, options: Optional[StorageOptions] = None
    ) -> None:
        """Store ``data`` with SET."""
        self._do(REDIS_CMD_SET, self._build_key(key), data)

    @log_storage_performance
    def read(self, key: str) -> bytes:
        """Fetch an object with GET."""
        k = self._build_key(key)
        resp = self._do(REDIS_CMD_GET, k)

        if resp is None:
            raise NotFoundError(key, {"redis_key": k})

        if not isinstance(resp, bytes):
            raise MalformedResponseError(
                "response not bytes",
                {"redis_key": k, "response_type": type(resp).__name__},
            )

        return resp

    @log_storage_performance
    def remove(self, key: str) -> None:
        """Delete an object with DEL."""
        self._do(REDIS_CMD_DELETE, self._build_key(key))

    def _build_key(self, key: str) -> str:
        if not self.root:
            return key
        return f"{self.root}/{key}"


class RedisStorage(_RedisCommandStorage):
    """
    Redis storage over a single dedicated connection.

    The connection is not synchronized; share one ``RedisStorage`` across
    threads only with external locking, or use ``RedisPoolStorage``.
    """

    def __init__(self, connection: "Connection", root: str = ""):
        """
        Initialize Redis storage with a dedicated connection.

        Args:
            connection: An established (or lazily connecting) redis ``Connection``
            root: Optional namespace prepended to every key
        """
        super().__init__(root)
        self.connection = connection
        logger.debug(f"RedisStorage initialized (root={root!r})")

    @classmethod
    def from_url(cls, url: str, root: str = "") -> "RedisStorage":
        """Create a dedicated connection from a ``redis://`` URL."""
        if not REDIS_AVAILABLE:
            handle_missing_dependency("redis", "Redis storage")

        kwargs = parse_url(url)
        connection_class = kwargs.pop("connection_class", Connection)
        return cls(connection_class(**kwargs), root=root)

    def _do(self, *args) -> Any:
        self.connection.send_command(*args)
        return self.connection.read_response()

    def close(self) -> None:
        """Disconnect the dedicated connection."""
        self.connection.disconnect()


class RedisPoolStorage(_RedisCommandStorage):
    """
    Redis storage that borrows a pooled connection for each operation.

    The connection goes back to the pool before the operation returns,
    whether or not the command succeeded.
    """

    def __init__(self, pool: "redis.ConnectionPool", root: str = ""):
        """
        Initialize Redis storage with a connection pool.

        Args:
            pool: A redis ``ConnectionPool``
            root: Optional namespace prepended to every key
        """
        super().__init__(root)
        self.pool = pool
        logger.debug(f"RedisPoolStorage initialized (root={root!r})")

    @classmethod
    def from_url(cls, url: str, root: str = "", **pool_kwargs) -> "RedisPoolStorage":
        """Create a connection pool from a ``redis://`` URL."""
        if not REDIS_AVAILABLE:
            handle_missing_dependency("redis", "Redis storage")

        return cls(redis.ConnectionPool.from_url(url, **pool_kwargs), root=root)

    def _do(self, *args) -> Any:
        conn = self.pool.get_connection()
        try:
            conn.send_command(*args)
            return conn.read_response()
        finally:
            self.pool.release(conn)

    def close(self) -> None:
        """Disconnect all pooled connections."""
        self.pool.disconnect()
