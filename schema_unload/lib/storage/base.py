"""Abstract base class for storage backends.

Defines the interface that all storage backends must implement.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from schema_unload.lib.sinks import ByteSink

logger = logging.getLogger(__name__)

__all__ = ["StorageBackend"]


class StorageBackend(ABC):
    """Abstract base class for storage backends.

    A backend is rooted at ``base_path``; every relative name handed to it
    resolves under that root. The export engine writes through ``open_sink``
    and a dry run asks ``exists`` which outputs would be replaced.
    """

    def __init__(self, base_path: str, **options: Any) -> None:
        """Initialize the storage backend.

        Args:
            base_path: Output root for this backend
            **options: Backend-specific options
        """
        self.base_path = base_path
        self.options = options

    @property
    @abstractmethod
    def scheme(self) -> str:
        """Return the URI scheme for this backend (e.g., 'local', 's3', 'memory')."""
        pass

    @abstractmethod
    def open_sink(self, path: str) -> ByteSink:
        """Open a new writable byte stream at ``path``.

        Parent directories are created as needed and an existing file at
        ``path`` is truncated.

        Args:
            path: Name relative to base_path

        Returns:
            An open ByteSink; the caller must close it

        Raises:
            SinkOpenFailed: If the destination cannot be created
        """
        pass

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check whether an output already exists at ``path``.

        Raises:
            IoError: If the backend cannot be queried
        """
        pass

    def get_full_path(self, path: str) -> str:
        """Get the full path including base_path.

        Args:
            path: Relative path

        Returns:
            Full path with base_path prefix
        """
        if not path:
            return self.base_path

        base = self.base_path.rstrip("/")
        return f"{base}/{path.lstrip('/')}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_path={self.base_path!r})"
