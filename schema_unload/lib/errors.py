"""Structured exception hierarchy for schema exports.

Every failure during a run maps to one of these types. The export is
fail-fast: whichever error is raised first aborts the whole run.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

__all__ = [
    "ExportError",
    "InvalidIdentifier",
    "ConfigurationError",
    "ConnectionError",
    "CatalogQueryFailed",
    "IoError",
    "SinkOpenFailed",
    "StreamError",
    "FinalizeError",
]


class ExportError(Exception):
    """Base exception for all export errors.

    Provides structured error information for debugging.
    """

    def __init__(
        self,
        message: str,
        *,
        schema: Optional[str] = None,
        table: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        suggestion: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.schema = schema
        self.table = table
        self.details = details or {}
        self.suggestion = suggestion
        self.cause = cause

        if cause is not None:
            self.details.setdefault("cause", str(cause))
            self.details.setdefault("cause_type", type(cause).__name__)

        # Build full message
        parts = [message]

        if schema or table:
            context = f"{schema or '?'}.{table}" if table else schema
            parts.insert(0, f"[{context}]")

        if self.details:
            detail_lines = [f"  {k}: {v}" for k, v in self.details.items()]
            parts.append("\nDetails:")
            parts.extend(detail_lines)

        if suggestion:
            parts.append(f"\nSuggestion: {suggestion}")

        super().__init__("\n".join(parts) if len(parts) > 1 else message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "schema": self.schema,
            "table": self.table,
            "details": self.details,
            "suggestion": self.suggestion,
        }


class InvalidIdentifier(ExportError):
    """Identifier rejected before it could reach any SQL text."""

    def __init__(
        self,
        message: str,
        *,
        value: Optional[str] = None,
        kind: str = "schema",
        **kwargs: Any,
    ) -> None:
        self.value = value
        self.kind = kind

        details = kwargs.pop("details", {})
        details["kind"] = kind
        if value is not None:
            details["value"] = repr(value)

        super().__init__(message, details=details, **kwargs)


class ConfigurationError(ExportError):
    """Error in export configuration.

    Raised when required settings are missing or a config file is invalid.
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        self.field = field

        details = kwargs.pop("details", {})
        if field:
            details["field"] = field

        super().__init__(message, details=details, **kwargs)


class ConnectionError(ExportError):
    """Error opening or keeping the database connection."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        suggestion = kwargs.pop("suggestion", None)
        if not suggestion:
            suggestion = (
                "Check that the database is reachable and the connection "
                "string is correct. Verify SCHEMA_UNLOAD_DATABASE_URL is set."
            )
        super().__init__(message, suggestion=suggestion, **kwargs)


class CatalogQueryFailed(ExportError):
    """Listing the tables of a schema failed."""


class IoError(ExportError):
    """Error writing to or closing an output destination."""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        self.path = path

        details = kwargs.pop("details", {})
        if path:
            details["path"] = path

        super().__init__(message, details=details, **kwargs)


class SinkOpenFailed(IoError):
    """The output destination could not be created."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        suggestion = kwargs.pop("suggestion", None)
        if not suggestion:
            suggestion = "Check that the output root exists and is writable."
        super().__init__(message, suggestion=suggestion, **kwargs)


class StreamError(ExportError):
    """The database row-stream failed mid-transfer.

    Whatever was written before the failure stays on disk.
    """

    def __init__(
        self,
        message: str,
        *,
        chunks_written: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        self.chunks_written = chunks_written

        details = kwargs.pop("details", {})
        if chunks_written is not None:
            details["chunks_written"] = chunks_written

        super().__init__(message, details=details, **kwargs)


class FinalizeError(IoError):
    """Writing the compression trailer or closing the destination failed."""
