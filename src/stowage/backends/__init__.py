"""
Storage Backends
================

Pluggable backends implementing the storage contract.

Built-in backends:
- FilesystemStorage ("filesystem"): files under a root directory
- MemoryStorage ("memory"): process-local dictionary, for testing
- RedisStorage ("redis"): dedicated Redis connection (requires redis)
- RedisPoolStorage ("redis_pool"): pooled Redis connections (requires redis)
- S3Storage ("s3"): Amazon S3 / MinIO (requires boto3)

Registry APIs:
- register_storage_backend(), unregister_storage_backend()
- get_storage_backend(), list_storage_backends()

Usage:
    from stowage.backends import get_storage_backend, register_storage_backend

    store = get_storage_backend("filesystem", root="./data")
    redis_store = get_storage_backend("redis_pool", url="redis://localhost:6379/0")

    # Register a custom backend
    register_storage_backend("gcs", MyGcsStorage)
"""

import logging
from typing import Any, Dict, List, Type

from .base import (
    ListableStorageBackend,
    Reader,
    ReadWriter,
    StorageBackend,
    Writer,
)
from .filesystem_backend import FilesystemStorage
from .memory_backend import MemoryStorage
from .redis_backend import REDIS_AVAILABLE, RedisPoolStorage, RedisStorage
from .s3_backend import BOTO3_AVAILABLE, S3Storage

logger = logging.getLogger(__name__)


# =============================================================================
# Storage Backend Registry
# =============================================================================

_storage_backend_registry: Dict[str, Type[ReadWriter]] = {}
_builtin_storage_backends = {"filesystem", "memory", "redis", "redis_pool", "s3"}


def _initialize_builtin_backends():
    """Initialize registry with built-in backends."""
    global _storage_backend_registry
    _storage_backend_registry["filesystem"] = FilesystemStorage
    _storage_backend_registry["memory"] = MemoryStorage

    # Client libraries are checked when the backend is constructed
    _storage_backend_registry["redis"] = RedisStorage
    _storage_backend_registry["redis_pool"] = RedisPoolStorage
    _storage_backend_registry["s3"] = S3Storage


# Initialize on module load
_initialize_builtin_backends()


def register_storage_backend(
    name: str, backend_class: Type[ReadWriter], force: bool = False
) -> None:
    """
    Register a custom storage backend.

    Args:
        name: Unique name for the backend (e.g., "gcs", "azure")
        backend_class: Class that implements the ReadWriter interface
        force: If True, overwrite existing registration

    Raises:
        ValueError: If name already registered and force=False
        ValueError: If backend_class doesn't inherit from ReadWriter
    """
    if not isinstance(backend_class, type):
        raise ValueError(f"backend_class must be a class, got {type(backend_class)}")

    if not issubclass(backend_class, ReadWriter):
        raise ValueError(
            f"Backend class {backend_class.__name__} must inherit from ReadWriter"
        )

    if name in _storage_backend_registry and not force:
        raise ValueError(
            f"Storage backend '{name}' already registered. "
            f"Use force=True to overwrite or unregister_storage_backend() first."
        )

    _storage_backend_registry[name] = backend_class
    logger.info(f"Registered storage backend '{name}' ({backend_class.__name__})")


def unregister_storage_backend(name: str) -> bool:
    """
    Unregister a storage backend.

    Returns:
        True if backend was unregistered, False if not found
    """
    if name in _storage_backend_registry:
        del _storage_backend_registry[name]
        logger.info(f"Unregistered storage backend '{name}'")
        return True

    logger.warning(f"Storage backend '{name}' not found for unregistration")
    return False


def get_storage_backend(name: str, **options) -> ReadWriter:
    """
    Get a storage backend instance by name.

    When ``url`` is among the options and the backend class offers a
    ``from_url`` constructor (the Redis backends), that constructor is used.

    Args:
        name: Name of the registered backend
        **options: Backend-specific configuration options

    Returns:
        Configured backend instance

    Raises:
        ValueError: If backend name not registered or options are rejected
    """
    if name not in _storage_backend_registry:
        available = list(_storage_backend_registry.keys())
        raise ValueError(
            f"Unknown storage backend: '{name}'. Available backends: {available}"
        )

    backend_class = _storage_backend_registry[name]
    factory = backend_class
    if "url" in options and hasattr(backend_class, "from_url"):
        factory = backend_class.from_url

    try:
        return factory(**options)
    except TypeError as e:
        raise ValueError(
            f"Failed to create storage backend '{name}' with options {options}: {e}"
        )


def list_storage_backends() -> List[Dict[str, Any]]:
    """
    List all registered storage backends.

    Returns:
        List of dictionaries with backend info:
        - name: Backend name
        - class: Backend class name
        - is_builtin: Whether it's a built-in backend
    """
    result = []

    for name in sorted(_builtin_storage_backends):
        if name in _storage_backend_registry:
            result.append(
                {
                    "name": name,
                    "class": _storage_backend_registry[name].__name__,
                    "is_builtin": True,
                }
            )

    for name in sorted(_storage_backend_registry.keys()):
        if name not in _builtin_storage_backends:
            result.append(
                {
                    "name": name,
                    "class": _storage_backend_registry[name].__name__,
                    "is_builtin": False,
                }
            )

    return result


__all__ = [
    # Contract
    "Reader",
    "Writer",
    "ReadWriter",
    "StorageBackend",
    "ListableStorageBackend",
    # Built-in implementations
    "FilesystemStorage",
    "MemoryStorage",
    "RedisStorage",
    "RedisPoolStorage",
    "S3Storage",
    "REDIS_AVAILABLE",
    "BOTO3_AVAILABLE",
    # Registry functions
    "register_storage_backend",
    "unregister_storage_backend",
    "get_storage_backend",
    "list_storage_backends",
]
