"""Logging setup for export runs.

Human-readable lines by default, one JSON object per record with
``--json-log``. Everything goes to stderr so that stdout carries only the
``--dry-run`` listing.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

__all__ = [
    "setup_logging",
    "JSONFormatter",
]

HUMAN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
HUMAN_DATEFMT = "%Y-%m-%d %H:%M:%S"

# LogRecord attributes that are not caller-supplied ``extra=`` fields
_RESERVED = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {
    "message",
    "asctime",
}

# Libraries that are chatty at INFO/DEBUG
_QUIET_LOGGERS = ("psycopg", "fsspec", "botocore", "s3fs")


class JSONFormatter(logging.Formatter):
    """Render a record as a single JSON line.

    Fields passed through ``extra=`` (``schema``, ``table``, ``bytes``,
    ``error``, ...) are grouped under ``"extra"``:

        {"timestamp": "2025-01-15T10:30:00.123Z", "level": "INFO",
         "logger": "schema_unload.lib.export", "message": "Exported sgd42.pools",
         "extra": {"schema": "sgd42", "table": "pools", "bytes": 1048576}}
    """

    def __init__(self, exclude_fields: Optional[Iterable[str]] = None):
        super().__init__()
        self.exclude_fields = frozenset(exclude_fields or ())

    def _extra(self, record: logging.LogRecord) -> Dict[str, Any]:
        skip = _RESERVED | self.exclude_fields
        return {k: v for k, v in record.__dict__.items() if k not in skip}

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            "timestamp": stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        extra = self._extra(record)
        if extra:
            payload["extra"] = extra

        return json.dumps(payload, default=str)


def setup_logging(
    verbose: bool = False,
    json_format: bool = False,
    log_file: Optional[str] = None,
) -> None:
    """Install stderr (and optionally file) handlers on the root logger.

    Args:
        verbose: Log at DEBUG instead of INFO
        json_format: Emit JSON lines instead of human-readable text
        log_file: Also append every record to this file
    """
    level = logging.DEBUG if verbose else logging.INFO
    formatter: logging.Formatter = (
        JSONFormatter() if json_format else logging.Formatter(HUMAN_FORMAT, HUMAN_DATEFMT)
    )

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    root = logging.getLogger()
    for old in root.handlers[:]:
        root.removeHandler(old)
    root.setLevel(level)

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
