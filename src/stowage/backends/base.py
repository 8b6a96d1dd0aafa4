"""
Abstract Base Classes for Storage Backends
==========================================

Defines the contract that every storage backend must implement.

- ``Reader`` / ``Writer``: read and upsert a single object by key
- ``ReadWriter``: both, the capability consumed and provided by ``TTLCache``
- ``StorageBackend``: adds ``remove``
- ``ListableStorageBackend``: adds prefix enumeration via ``keys``/``all``

A missing key is always reported as ``NotFoundError``, whatever the backend's
native signal for it is. Other failures propagate as the backend raised them.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..config import StorageOptions


class Reader(ABC):
    """Reads an object from the store."""

    @abstractmethod
    def read(self, key: str) -> bytes:
        """
        Read the bytes last written under ``key``.

        Args:
            key: Key of the object

        Returns:
            The stored bytes

        Raises:
            NotFoundError: If nothing is stored under ``key``
        """
        pass


class Writer(ABC):
    """Adds or updates an object in the store."""

    @abstractmethod
    def write(
        self, key: str, data: bytes, options: Optional[StorageOptions] = None
    ) -> None:
        """
        Create or replace the object stored under ``key``.

        Args:
            key: Key of the object
            data: Complete payload, replaces any existing value
            options: Optional write options; unsupported fields are ignored
        """
        pass


class ReadWriter(Reader, Writer):
    """Combines the Reader and Writer interfaces."""

    pass


class StorageBackend(ReadWriter):
    """
    Abstract base class for storage backends.

    Removing a key that does not exist is backend specific: each
    implementation documents whether it succeeds silently or raises.
    """

    @abstractmethod
    def remove(self, key: str) -> None:
        """
        Remove the object stored under ``key``.

        Args:
            key: Key of the object
        """
        pass

    def close(self) -> None:
        """
        Close and clean up any resources.

        Default implementation does nothing. Override in backends that hold
        connections or other resources.
        """
        pass

    def __enter__(self):
        """Support context manager protocol."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Ensure resources are cleaned up."""
        self.close()
        return False


class ListableStorageBackend(StorageBackend):
    """Storage backend that can enumerate keys under a path prefix."""

    @abstractmethod
    def keys(self, path: str) -> List[str]:
        """
        List keys under ``path``.

        Args:
            path: Literal prefix (not a glob) scoping the listing

        Returns:
            Matching keys in no particular order
        """
        pass

    def all(self, path: str) -> List[bytes]:
        """
        Read every object under ``path``.

        Fails as a whole if the listing fails. A key that disappears between
        listing and reading raises ``NotFoundError`` rather than being skipped.

        Args:
            path: Literal prefix passed to ``keys``

        Returns:
            Object payloads, in the order ``keys`` returned them
        """
        return [self.read(key) for key in self.keys(path)]
