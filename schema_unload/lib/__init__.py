"""Export library: validation, discovery, sinks, storage and the export engine.

Usage:
    from schema_unload.lib import resolve_settings, run_export

    settings = resolve_settings(schema_name="sgd42", out_dir="./exports")
    summary = run_export(settings)
"""

from schema_unload.lib.catalog import list_tables
from schema_unload.lib.config import ExportSettings, resolve_settings
from schema_unload.lib.errors import (
    CatalogQueryFailed,
    ConfigurationError,
    ConnectionError,
    ExportError,
    FinalizeError,
    InvalidIdentifier,
    IoError,
    SinkOpenFailed,
    StreamError,
)
from schema_unload.lib.export import (
    ExportJob,
    ExportSummary,
    JobState,
    export_schema,
    export_table,
    run_export,
)
from schema_unload.lib.identifiers import validate_column_name, validate_schema_name
from schema_unload.lib.sinks import ByteSink, GzipSink, wrap_compression
from schema_unload.lib.storage import get_storage

__all__ = [
    "ByteSink",
    "CatalogQueryFailed",
    "ConfigurationError",
    "ConnectionError",
    "ExportError",
    "ExportJob",
    "ExportSettings",
    "ExportSummary",
    "FinalizeError",
    "GzipSink",
    "InvalidIdentifier",
    "IoError",
    "JobState",
    "SinkOpenFailed",
    "StreamError",
    "export_schema",
    "export_table",
    "get_storage",
    "list_tables",
    "resolve_settings",
    "run_export",
    "validate_column_name",
    "validate_schema_name",
]
