"""Storage backend abstraction for exports.

Provides a unified interface for writing export files to different storage
backends: the local filesystem, or anything fsspec can open.

Usage:
    from schema_unload.lib.storage import get_storage

    # Local filesystem
    storage = get_storage("./exports/")

    # AWS S3 (requires s3fs)
    storage = get_storage("s3://my-bucket/exports/")
"""

from schema_unload.lib.storage.base import StorageBackend
from schema_unload.lib.storage.fsspec_backend import FsspecStorage
from schema_unload.lib.storage.local import LocalStorage

__all__ = [
    "StorageBackend",
    "LocalStorage",
    "FsspecStorage",
    "get_storage",
    "parse_uri",
]


def parse_uri(path: str) -> tuple[str, str]:
    """Parse a storage root into scheme and path.

    Examples:
        >>> parse_uri("./exports/")
        ('local', './exports/')
        >>> parse_uri("s3://my-bucket/exports/")
        ('s3', 'my-bucket/exports/')
        >>> parse_uri("file:///srv/exports")
        ('local', '/srv/exports')
    """
    if "://" not in path:
        return ("local", path)

    scheme, rest = path.split("://", 1)
    if scheme == "file":
        return ("local", rest)
    return (scheme, rest)


def get_storage(path: str, **options) -> StorageBackend:
    """Get the appropriate storage backend for an output root.

    Plain paths and ``file://`` URIs use LocalStorage; every other protocol
    is handed to fsspec.

    Args:
        path: Output root (local path or URI)
        **options: Backend-specific options (credentials, etc.)
    """
    scheme, rest = parse_uri(path)

    if scheme == "local":
        return LocalStorage(rest, **options)
    return FsspecStorage(path, **options)
