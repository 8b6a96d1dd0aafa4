"""
Storage Factory
===============

Builds a ready-to-use store from a ``StorageConfig``: the configured backend,
wrapped in a ``TTLCache`` when a cache TTL is set.
"""

import logging
from typing import Optional

from .backends import get_storage_backend
from .backends.base import ReadWriter
from .config import StorageConfig
from .ttl_cache import TTLCache

logger = logging.getLogger(__name__)


def create_storage(config: Optional[StorageConfig] = None, **overrides) -> ReadWriter:
    """
    Create a store from configuration.

    Args:
        config: Storage configuration (uses defaults if None)
        **overrides: Replace ``StorageConfig`` fields (backend,
            backend_options, cache_ttl_seconds)

    Returns:
        The backend, or a ``TTLCache`` around it if ``cache_ttl_seconds`` is set

    Example:
        >>> store = create_storage(
        ...     backend="filesystem",
        ...     backend_options={"root": "./data"},
        ...     cache_ttl_seconds=60,
        ... )
    """
    if config is None:
        config = StorageConfig()

    if overrides:
        for key, value in overrides.items():
            if not hasattr(config, key):
                logger.warning(f"Unknown configuration parameter ignored: {key}")
                continue
            setattr(config, key, value)
        config.__post_init__()

    store = get_storage_backend(config.backend, **config.backend_options)

    if config.cache_ttl_seconds is not None:
        store = TTLCache(store, ttl_seconds=config.cache_ttl_seconds)

    logger.info(
        f"Storage initialized: {config.backend} "
        f"(cache_ttl={config.cache_ttl_seconds})"
    )
    return store
