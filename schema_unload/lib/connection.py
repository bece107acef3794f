"""Database connection handling.

A run uses exactly one async connection. Exporting tables in parallel would
need one connection per table and is not supported.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from urllib.parse import urlsplit

import psycopg

from schema_unload.lib.errors import ConnectionError

logger = logging.getLogger(__name__)

__all__ = ["connect", "log_notice", "redact_url"]


def redact_url(url: str) -> str:
    """Return ``url`` with any password replaced, for logging.

    Example:
        >>> redact_url("postgresql://graph:s3cret@db:5432/graph")
        'postgresql://graph:***@db:5432/graph'
    """
    parts = urlsplit(url)
    if not parts.password:
        return url
    netloc = parts.netloc.replace(f":{parts.password}@", ":***@", 1)
    return parts._replace(netloc=netloc).geturl()


def log_notice(diag: Any) -> None:
    """Notice handler: log server messages raised on the connection."""
    severity = (getattr(diag, "severity", None) or "NOTICE").upper()
    message = getattr(diag, "message_primary", None) or str(diag)
    if severity in ("WARNING", "ERROR", "FATAL", "PANIC"):
        logger.warning("Server %s: %s", severity, message)
    else:
        logger.debug("Server %s: %s", severity, message)


@asynccontextmanager
async def connect(database_url: str) -> AsyncIterator[psycopg.AsyncConnection]:
    """Open the export connection and close it when the block exits.

    The connection runs in autocommit mode; COPY TO STDOUT needs no
    transaction of its own.

    Raises:
        ConnectionError: If the connection cannot be established.
    """
    logger.info("Connecting to %s", redact_url(database_url))
    try:
        conn = await psycopg.AsyncConnection.connect(database_url, autocommit=True)
    except psycopg.Error as e:
        raise ConnectionError(
            "Cannot connect to database",
            details={"url": redact_url(database_url)},
            cause=e,
        ) from e

    conn.add_notice_handler(log_notice)
    try:
        yield conn
    finally:
        await conn.close()
        logger.debug("Connection closed")
