"""Universal fsspec-based storage backend.

Any output root with a protocol prefix (``s3://``, ``gs://``, ``az://``,
``memory://``, ...) is served by this backend. Remote protocols need their
fsspec implementation installed, e.g. ``s3fs`` for S3.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import fsspec
from fsspec.spec import AbstractFileSystem

from schema_unload.lib.errors import ExportError, IoError, SinkOpenFailed
from schema_unload.lib.sinks import FileSink
from schema_unload.lib.storage.base import StorageBackend

logger = logging.getLogger(__name__)

__all__ = ["FsspecStorage"]

# Object stores have no real directories
_FLAT_PROTOCOLS = ("s3", "s3a", "gs", "gcs", "az", "abfs", "abfss")


class FsspecStorage(StorageBackend):
    """Storage backend using fsspec.

    Example:
        >>> storage = FsspecStorage("s3://exports-bucket/sgd42/", anon=False)
        >>> sink = storage.open_sink("sgd42_pools.csv.gz")

    Environment Variables:
        S3:
            AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY, AWS_DEFAULT_REGION

        GCS:
            GOOGLE_APPLICATION_CREDENTIALS

        Azure:
            AZURE_STORAGE_CONNECTION_STRING or
            AZURE_STORAGE_ACCOUNT + AZURE_STORAGE_KEY
    """

    def __init__(self, base_path: str, **options: Any) -> None:
        """Initialize the fsspec storage backend.

        Args:
            base_path: Output root with protocol (e.g., s3://bucket/prefix/)
            **options: Filesystem-specific options passed to fsspec
        """
        super().__init__(base_path, **options)
        self._fs: Optional[AbstractFileSystem] = None
        self._protocol = self._detect_protocol()

    def _detect_protocol(self) -> str:
        """Detect the protocol from the base path."""
        if "://" in self.base_path:
            return self.base_path.split("://")[0]
        return "file"

    @property
    def scheme(self) -> str:
        return self._protocol

    @property
    def fs(self) -> AbstractFileSystem:
        """Lazy-load the filesystem.

        Raises:
            IoError: Unknown protocol, missing protocol package, or bad options
        """
        if self._fs is None:
            try:
                self._fs = fsspec.filesystem(self._protocol, **self.options)
            except Exception as e:
                raise IoError(
                    f"Cannot open {self._protocol}:// storage",
                    path=self.base_path,
                    suggestion=(
                        "Check the output URI; remote protocols need their fsspec "
                        "package installed (pip install schema-unload[s3] for s3://)"
                    ),
                    cause=e,
                ) from e
        return self._fs

    def open_sink(self, path: str) -> FileSink:
        full_path = self.get_full_path(path)

        try:
            if self._protocol not in _FLAT_PROTOCOLS:
                self.fs.makedirs(self.fs._parent(full_path), exist_ok=True)
            handle = self.fs.open(full_path, "wb")
        except ExportError as e:
            raise SinkOpenFailed(
                "Cannot create output object",
                path=full_path,
                suggestion=e.suggestion,
                cause=e.__cause__ or e,
            ) from e
        except Exception as e:
            logger.debug("Failed to open %s: %s", full_path, e)
            raise SinkOpenFailed(
                "Cannot create output object", path=full_path, cause=e
            ) from e

        logger.debug("Opened %s for writing", full_path)
        return FileSink(handle, full_path)

    def exists(self, path: str) -> bool:
        full_path = self.get_full_path(path)
        try:
            result: bool = self.fs.exists(full_path)
        except ExportError:
            raise
        except Exception as e:
            raise IoError("Cannot inspect output", path=full_path, cause=e) from e
        return result
