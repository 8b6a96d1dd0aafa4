"""
stowage - Uniform key-addressed blob storage with a transparent TTL cache.

This library lets callers read, write, remove and enumerate byte blobs
without depending on which backend holds them: a local filesystem, an
in-process dictionary, Redis, or S3.

Key Features:
- One contract for every backend, with a single ``NotFoundError`` for
  missing keys
- Filesystem, memory, Redis (dedicated or pooled) and S3 backends
- ``TTLCache`` decorator adding thread-safe, expiring read caching in front
  of any backend
- Pluggable backend registry

Quick Start:
    >>> from stowage import FilesystemStorage, NotFoundError, TTLCache
    >>>
    >>> store = TTLCache(FilesystemStorage("/tmp/data"), ttl_seconds=30)
    >>> store.write("users/42", b'{"name": "Ada"}')
    >>> store.read("users/42")
    b'{"name": "Ada"}'
    >>>
    >>> try:
    ...     store.read("users/43")
    ... except NotFoundError:
    ...     pass
"""

from .backends import (
    FilesystemStorage,
    ListableStorageBackend,
    MemoryStorage,
    Reader,
    ReadWriter,
    RedisPoolStorage,
    RedisStorage,
    S3Storage,
    StorageBackend,
    Writer,
    get_storage_backend,
    list_storage_backends,
    register_storage_backend,
    unregister_storage_backend,
)
from .config import (
    DEFAULT_DIR_MODE,
    DEFAULT_FILE_MODE,
    StorageConfig,
    StorageOptions,
)
from .core import create_storage
from .error_handling import (
    MalformedResponseError,
    NotFoundError,
    StorageConfigurationError,
    StorageError,
)
from .ttl_cache import CacheEntry, TTLCache

__version__ = "0.1.0"

__all__ = [
    # Contract
    "Reader",
    "Writer",
    "ReadWriter",
    "StorageBackend",
    "ListableStorageBackend",
    # Backends
    "FilesystemStorage",
    "MemoryStorage",
    "RedisStorage",
    "RedisPoolStorage",
    "S3Storage",
    # Cache decorator
    "TTLCache",
    "CacheEntry",
    # Configuration
    "StorageOptions",
    "StorageConfig",
    "DEFAULT_FILE_MODE",
    "DEFAULT_DIR_MODE",
    "create_storage",
    # Registry
    "register_storage_backend",
    "unregister_storage_backend",
    "get_storage_backend",
    "list_storage_backends",
    # Errors
    "StorageError",
    "NotFoundError",
    "MalformedResponseError",
    "StorageConfigurationError",
    # Version info
    "__version__",
]
