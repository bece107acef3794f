"""Local filesystem storage backend."""

from __future__ import annotations

import logging
from pathlib import Path

from schema_unload.lib.errors import IoError, SinkOpenFailed
from schema_unload.lib.sinks import FileSink
from schema_unload.lib.storage.base import StorageBackend

logger = logging.getLogger(__name__)

__all__ = ["LocalStorage"]


class LocalStorage(StorageBackend):
    """Local filesystem storage backend.

    Example:
        >>> storage = LocalStorage("./exports/")
        >>> with storage.open_sink("public_users.csv") as sink:
        ...     sink.write(b"id,name\\n")
        >>> storage.exists("public_users.csv")
        True
    """

    @property
    def scheme(self) -> str:
        return "local"

    def _resolve_path(self, path: str) -> Path:
        """Resolve a path to an absolute Path object."""
        full_path = self.get_full_path(path)
        return Path(full_path).resolve()

    def open_sink(self, path: str) -> FileSink:
        resolved = self._resolve_path(path)

        try:
            # Ensure parent directory exists
            resolved.parent.mkdir(parents=True, exist_ok=True)
            handle = open(resolved, "wb")
        except OSError as e:
            logger.debug("Failed to open %s: %s", resolved, e)
            raise SinkOpenFailed(
                "Cannot create output file", path=str(resolved), cause=e
            ) from e

        logger.debug("Opened %s for writing", resolved)
        return FileSink(handle, str(resolved), fsync=True)

    def exists(self, path: str) -> bool:
        resolved = self._resolve_path(path)
        try:
            return resolved.is_file()
        except OSError as e:
            raise IoError("Cannot inspect output", path=str(resolved), cause=e) from e
