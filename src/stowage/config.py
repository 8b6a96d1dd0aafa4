"""
Configuration Management for Stowage
====================================

Write options understood by the storage backends, the default permission
bits for the filesystem backend, and the top-level configuration consumed by
``stowage.core.create_storage``.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Owner read/write only
DEFAULT_FILE_MODE = 0o600
# Owner full access, group read/execute
DEFAULT_DIR_MODE = 0o750


@dataclass
class StorageOptions:
    """Options for a single write. Not every backend supports every option.

    For example, a filesystem write ignores ``ttl`` and a Redis write ignores
    everything.
    """

    ttl: int = 0  # seconds; 0 means never expire
    mode: Optional[int] = None  # file permission bits
    dir_mode: Optional[int] = None  # directory permission bits

    def __post_init__(self):
        """Validate write options."""
        if self.ttl < 0:
            raise ValueError("ttl must be non-negative")

        for name in ("mode", "dir_mode"):
            value = getattr(self, name)
            if value is not None and not (0 <= value <= 0o7777):
                raise ValueError(f"{name} must be permission bits between 0 and 0o7777")


@dataclass
class StorageConfig:
    """Configuration for building a storage backend, optionally cached."""

    backend: str = "memory"
    backend_options: Dict[str, Any] = field(default_factory=dict)
    cache_ttl_seconds: Optional[float] = None  # None disables the TTL cache

    def __post_init__(self):
        """Validate storage configuration."""
        if not self.backend:
            raise ValueError("backend name must not be empty")

        if self.cache_ttl_seconds is not None and self.cache_ttl_seconds < 0:
            raise ValueError("cache_ttl_seconds must be non-negative")

        logger.debug(
            f"Storage configured: backend={self.backend}, "
            f"cache_ttl={self.cache_ttl_seconds}"
        )
