"""
Filesystem Storage Backend
==========================

Stores each object as a file under a root directory. A key is a
slash-delimited path relative to the root, so ``"reports/2024/q1"`` is stored
at ``<root>/reports/2024/q1``.

Writes are not transactional: directories created for a write are kept even
if the file write then fails, and a crash mid-write can leave a truncated
file.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Union

from ..config import DEFAULT_DIR_MODE, DEFAULT_FILE_MODE, StorageOptions
from ..error_handling import NotFoundError
from .base import ListableStorageBackend

logger = logging.getLogger(__name__)


class FilesystemStorage(ListableStorageBackend):
    """
    Filesystem-based storage backend.

    Removing a missing key raises the ``FileNotFoundError`` from the
    filesystem unchanged.

    Attributes:
        root: Root directory that keys are resolved against
        file_mode: Permission bits for new files when a write doesn't set them
        dir_mode: Permission bits for new directories when a write doesn't set them
    """

    def __init__(
        self,
        root: Union[str, Path],
        file_mode: int = DEFAULT_FILE_MODE,
        dir_mode: int = DEFAULT_DIR_MODE,
    ):
        """
        Initialize filesystem storage backend.

        Args:
            root: Directory that keys are resolved against
            file_mode: Default permission bits for created files (default: 0o600)
            dir_mode: Default permission bits for created directories (default: 0o750)
        """
        self.root = str(root)
        self.file_mode = file_mode
        self.dir_mode = dir_mode
        logger.debug(
            f"FilesystemStorage initialized at {self.root} "
            f"(file_mode={oct(file_mode)}, dir_mode={oct(dir_mode)})"
        )

    def write(
        self, key: str, data: bytes, options: Optional[StorageOptions] = None
    ) -> None:
        """Write an object to a file, creating parent directories as needed."""
        filename = self._build_filename(key)
        mode, dir_mode = self._resolve_modes(options)

        self._make_parents(Path(os.path.dirname(filename)), dir_mode)

        fd = os.open(filename, os.O_RDWR | os.O_CREAT | os.O_TRUNC, mode)
        with os.fdopen(fd, "wb") as f:
            f.write(data)

        logger.debug(f"Wrote {key} ({len(data)} bytes) to {filename}")

    def read(self, key: str) -> bytes:
        """Read an object from its file."""
        filename = self._build_filename(key)

        try:
            with open(filename, "rb") as f:
                return f.read()
        except FileNotFoundError:
            raise NotFoundError(key, {"filename": filename}) from None

    def remove(self, key: str) -> None:
        """Delete the file for ``key``."""
        filename = self._build_filename(key)
        os.remove(filename)
        logger.debug(f"Removed {filename}")

    def keys(self, path: str) -> List[str]:
        """
        List regular files directly inside ``<root>/<path>``.

        Subdirectories are skipped, not recursed into. Keys are returned
        relative to the root.
        """
        directory = Path(f"{self.root}/{path}")
        keys = []

        with os.scandir(directory) as entries:
            for entry in entries:
                if not entry.is_file():
                    continue
                keys.append(f"{path}/{entry.name}" if path else entry.name)

        return keys

    def _build_filename(self, key: str) -> str:
        # Not normalized: "a/b/" must not alias "a/b"
        return f"{self.root}/{key}"

    def _resolve_modes(self, options: Optional[StorageOptions]):
        """Pick the file and directory modes for a write (unset or 0 means default)."""
        if options is None:
            return self.file_mode, self.dir_mode

        return options.mode or self.file_mode, options.dir_mode or self.dir_mode

    @staticmethod
    def _make_parents(directory: Path, dir_mode: int) -> None:
        """Create every missing directory in the chain with ``dir_mode``."""
        if directory.exists():
            return

        missing = [directory]
        missing.extend(p for p in directory.parents if not p.exists())
        # Walk from the outermost missing ancestor inwards
        for path in sorted(missing, key=lambda p: len(p.parts)):
            if not path.exists():
                path.mkdir(mode=dir_mode, exist_ok=True)
