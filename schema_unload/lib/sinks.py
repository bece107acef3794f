"""Byte sinks: destinations that accept writes and must be closed.

Sinks compose by decoration. A storage backend hands out a ``FileSink`` and
``wrap_compression`` optionally puts a ``GzipSink`` in front of it:

    sink = wrap_compression(storage.open_sink("public_users.csv.gz"), True)
    sink.write(b"id,name\\n")
    sink.close()  # gzip trailer first, then the file
"""

from __future__ import annotations

import gzip
import logging
import os
from abc import ABC, abstractmethod
from typing import Any, BinaryIO, Optional, Union

from schema_unload.lib.errors import FinalizeError, IoError

logger = logging.getLogger(__name__)

__all__ = [
    "ByteSink",
    "FileSink",
    "GzipSink",
    "DEFAULT_COMPRESSION_LEVEL",
    "wrap_compression",
]

DEFAULT_COMPRESSION_LEVEL = 6

Chunk = Union[bytes, bytearray, memoryview]


class ByteSink(ABC):
    """Accepts bytes in order and can be finalized exactly once."""

    path: Optional[str] = None

    @abstractmethod
    def write(self, data: Chunk) -> None:
        """Write ``data``; raises IoError on failure."""

    @abstractmethod
    def close(self) -> None:
        """Flush everything to the destination and release it."""

    @property
    @abstractmethod
    def closed(self) -> bool:
        pass

    def __enter__(self) -> "ByteSink":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if not self.closed:
            self.close()


class FileSink(ByteSink):
    """Sink over a binary file object handed out by a storage backend.

    When ``fsync`` is set, ``close()`` forces the bytes to durable storage
    before releasing the handle.
    """

    def __init__(self, handle: BinaryIO, path: str, *, fsync: bool = False) -> None:
        self._handle = handle
        self.path = path
        self._fsync = fsync
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, data: Chunk) -> None:
        try:
            self._handle.write(data)
        except Exception as e:
            raise IoError("Failed to write output", path=self.path, cause=e) from e

    def close(self) -> None:
        if self._closed:
            return
        try:
            try:
                self._handle.flush()
                if self._fsync:
                    os.fsync(self._handle.fileno())
            finally:
                self._closed = True
                self._handle.close()
        except Exception as e:
            raise FinalizeError("Failed to close output", path=self.path, cause=e) from e

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(path={self.path!r})"


class _SinkWriter:
    """Minimal file-like adapter so GzipFile can write through a ByteSink."""

    def __init__(self, sink: ByteSink) -> None:
        self._sink = sink

    def write(self, data: Chunk) -> int:
        self._sink.write(data)
        return len(data)

    def flush(self) -> None:
        pass


class GzipSink(ByteSink):
    """Gzip-compresses everything written before passing it on.

    The header is written with ``mtime=0`` and no embedded filename, so the
    same input always produces the same bytes. ``close()`` must run for the
    output to be a valid gzip stream.
    """

    def __init__(self, inner: ByteSink, level: int = DEFAULT_COMPRESSION_LEVEL) -> None:
        self._inner = inner
        self.path = inner.path
        self._gzip = gzip.GzipFile(
            filename="",
            mode="wb",
            compresslevel=level,
            fileobj=_SinkWriter(inner),
            mtime=0,
        )

    @property
    def closed(self) -> bool:
        return self._gzip.closed and self._inner.closed

    def write(self, data: Chunk) -> None:
        try:
            self._gzip.write(data)
        except (OSError, ValueError) as e:
            raise IoError("Failed to compress output", path=self.path, cause=e) from e

    def close(self) -> None:
        # GzipFile.close() leaves fileobj open; the inner sink is closed separately
        try:
            if not self._gzip.closed:
                self._gzip.close()
        except (IoError, OSError, ValueError) as e:
            raise FinalizeError(
                "Failed to write gzip trailer", path=self.path, cause=e
            ) from e
        finally:
            self._inner.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(inner={self._inner!r})"


def wrap_compression(
    sink: ByteSink, compress: bool, level: int = DEFAULT_COMPRESSION_LEVEL
) -> ByteSink:
    """Return ``sink`` behind a gzip compressor, or ``sink`` itself.

    Args:
        sink: Sink to decorate
        compress: Whether to gzip the stream
        level: Compression level 1-9, ignored when ``compress`` is false
    """
    if not compress:
        return sink
    return GzipSink(sink, level=level)
