"""Schema export engine.

Exports every table of one PostgreSQL schema to its own CSV file:

    settings = resolve_settings(schema_name="sgd42", database_url=url)
    summary = run_export(settings)

Each table is one ``ExportJob``. A job opens its output through the storage
backend, optionally puts a gzip compressor in front of it, streams the
result of ``COPY ... TO STDOUT`` into it chunk by chunk, and finally closes
compressor then file. Jobs run strictly one after another on a single
connection, and the first error of any kind aborts the run. Files written
before the failure, including the partial file of the failing table, are
left in place.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import psycopg

from schema_unload.lib.catalog import list_tables
from schema_unload.lib.config import DEFAULT_ORDER_BY, ExportSettings
from schema_unload.lib.connection import connect as connect_database
from schema_unload.lib.errors import ExportError, StreamError
from schema_unload.lib.identifiers import validate_column_name, validate_schema_name
from schema_unload.lib.sinks import DEFAULT_COMPRESSION_LEVEL, ByteSink, wrap_compression
from schema_unload.lib.storage import StorageBackend, get_storage

logger = logging.getLogger(__name__)

__all__ = [
    "JobState",
    "ExportJob",
    "ExportSummary",
    "build_unload_query",
    "output_name",
    "export_table",
    "export_schema",
    "run_export",
]


class JobState(str, Enum):
    """Lifecycle of a single table export."""

    OPENING = "opening"
    STREAMING = "streaming"
    FINALIZING = "finalizing"
    CLOSED = "closed"
    FAILED = "failed"


def output_name(schema: str, table: str, compress: bool) -> str:
    """File name for one table's export.

    Example:
        >>> output_name("public", "users", compress=False)
        'public_users.csv'
        >>> output_name("public", "users", compress=True)
        'public_users.csv.gz'
    """
    ext = "csv.gz" if compress else "csv"
    return f"{schema}_{table}.{ext}"


def build_unload_query(schema: str, table: str, order_by: str = DEFAULT_ORDER_BY) -> str:
    """Build the COPY statement that streams one table as CSV with a header.

    ``schema`` and ``order_by`` must already be validated. ``table`` is
    interpolated as-is: it comes from pg_tables for the validated schema.
    """
    return (
        f"COPY (SELECT * FROM {schema}.{table} ORDER BY {order_by}) "
        "TO STDOUT WITH (FORMAT CSV, HEADER)"
    )


@dataclass
class ExportJob:
    """One table's export and its progress."""

    schema: str
    table: str
    compress: bool = True
    order_by: str = DEFAULT_ORDER_BY
    compression_level: int = DEFAULT_COMPRESSION_LEVEL
    state: JobState = JobState.OPENING
    path: Optional[str] = None
    chunks: int = 0
    bytes_copied: int = 0
    duration_seconds: float = 0.0

    @property
    def filename(self) -> str:
        return output_name(self.schema, self.table, self.compress)

    @property
    def query(self) -> str:
        return build_unload_query(self.schema, self.table, self.order_by)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema": self.schema,
            "table": self.table,
            "filename": self.filename,
            "path": self.path,
            "state": self.state.value,
            "compress": self.compress,
            "chunks": self.chunks,
            "bytes_copied": self.bytes_copied,
            "duration_seconds": round(self.duration_seconds, 3),
        }


@dataclass
class ExportSummary:
    """Outcome of a successful run (failed runs raise instead)."""

    schema: str
    output_root: str
    dry_run: bool = False
    jobs: List[ExportJob] = field(default_factory=list)
    planned: List[str] = field(default_factory=list)
    existing: List[str] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    duration_seconds: float = 0.0

    @property
    def files(self) -> List[str]:
        return [job.filename for job in self.jobs]

    @property
    def bytes_copied(self) -> int:
        return sum(job.bytes_copied for job in self.jobs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema": self.schema,
            "output_root": self.output_root,
            "dry_run": self.dry_run,
            "started_at": self.started_at.isoformat(),
            "duration_seconds": round(self.duration_seconds, 3),
            "tables": len(self.jobs) if not self.dry_run else len(self.planned),
            "bytes_copied": self.bytes_copied,
            "jobs": [job.to_dict() for job in self.jobs],
            "planned": list(self.planned),
            "existing": list(self.existing),
        }


def _release(sink: Optional[ByteSink], job: ExportJob) -> None:
    """Close a sink left open by a failed job.

    The error that failed the job is already propagating, so a second error
    here is only logged.
    """
    if sink is None or sink.closed:
        return
    try:
        sink.close()
    except ExportError as e:
        logger.warning(
            "Could not close %s after failure: %s",
            job.filename,
            e.message,
            extra={"schema": job.schema, "table": job.table},
        )


async def _copy_into(conn: Any, job: ExportJob, sink: ByteSink) -> None:
    """Stream the table's COPY output into ``sink`` in order, unmodified."""
    query = job.query
    logger.debug("Running %s", query)

    try:
        async with conn.cursor() as cur:
            async with cur.copy(query) as copy:
                async for chunk in copy:
                    sink.write(chunk)
                    job.chunks += 1
                    job.bytes_copied += len(chunk)
    except psycopg.Error as e:
        raise StreamError(
            "COPY stream failed",
            schema=job.schema,
            table=job.table,
            chunks_written=job.chunks,
            cause=e,
        ) from e


async def export_table(conn: Any, storage: StorageBackend, job: ExportJob) -> ExportJob:
    """Run one job: Opening -> Streaming -> Finalizing -> Closed.

    On any failure the job ends in ``JobState.FAILED``, whatever sink is open
    gets closed (compressor trailer first), and the error propagates.

    Raises:
        SinkOpenFailed: The output could not be created.
        StreamError: The database stream failed mid-transfer.
        IoError: A write to the output failed.
        FinalizeError: Closing the compressor or the output failed.
    """
    extra = {"schema": job.schema, "table": job.table}
    logger.info("Exporting %s.%s to %s", job.schema, job.table, job.filename, extra=extra)

    start = time.monotonic()
    raw: Optional[ByteSink] = None
    sink: Optional[ByteSink] = None
    try:
        job.state = JobState.OPENING
        raw = storage.open_sink(job.filename)
        job.path = raw.path
        sink = wrap_compression(raw, job.compress, job.compression_level)

        job.state = JobState.STREAMING
        await _copy_into(conn, job, sink)

        job.state = JobState.FINALIZING
        sink.close()
        job.state = JobState.CLOSED
    finally:
        job.duration_seconds = time.monotonic() - start
        if job.state is not JobState.CLOSED:
            failed_in = job.state
            job.state = JobState.FAILED
            logger.warning(
                "Export of %s.%s stopped while %s after %d chunk(s)",
                job.schema,
                job.table,
                failed_in.value,
                job.chunks,
                extra=extra,
            )
            _release(sink if sink is not None else raw, job)

    logger.info(
        "Exported %s.%s: %d bytes in %.2fs",
        job.schema,
        job.table,
        job.bytes_copied,
        job.duration_seconds,
        extra={**extra, "bytes": job.bytes_copied, "chunks": job.chunks},
    )
    return job


async def export_schema(
    settings: ExportSettings,
    *,
    connect: Callable[[str], Any] = connect_database,
    storage: Optional[StorageBackend] = None,
    dry_run: bool = False,
) -> ExportSummary:
    """Export every table of ``settings.schema_name``.

    Identifiers are validated before anything else happens. With
    ``dry_run`` the tables are listed and the planned file names returned
    without writing anything. Planned names already present under the
    output root are also collected in ``ExportSummary.existing``.

    Args:
        settings: Resolved export settings
        connect: Async context manager factory yielding a connection
        storage: Output backend; defaults to ``get_storage(settings.out_dir)``
        dry_run: List planned outputs only

    Returns:
        ExportSummary describing every file written
    """
    schema = validate_schema_name(settings.schema_name)
    order_by = validate_column_name(settings.order_by)

    if storage is None:
        storage = get_storage(settings.out_dir, **settings.storage_options)

    summary = ExportSummary(schema=schema, output_root=settings.out_dir, dry_run=dry_run)
    start = time.monotonic()

    async with connect(settings.database_url) as conn:
        tables = await list_tables(conn, schema)

        # One connection, one table at a time
        for table in tables:
            job = ExportJob(
                schema=schema,
                table=table,
                compress=settings.compress,
                order_by=order_by,
                compression_level=settings.compression_level,
            )
            if dry_run:
                summary.planned.append(job.filename)
                replaces = storage.exists(job.filename)
                if replaces:
                    summary.existing.append(job.filename)
                logger.info(
                    "Would export %s.%s to %s%s",
                    schema,
                    table,
                    job.filename,
                    " (replacing existing file)" if replaces else "",
                )
                continue

            await export_table(conn, storage, job)
            summary.jobs.append(job)

    summary.duration_seconds = time.monotonic() - start
    logger.info(
        "Export of schema %s complete: %d table(s), %d bytes in %.2fs",
        schema,
        len(summary.jobs),
        summary.bytes_copied,
        summary.duration_seconds,
    )
    return summary


def run_export(settings: ExportSettings, **kwargs: Any) -> ExportSummary:
    """Synchronous wrapper around :func:`export_schema`."""
    return asyncio.run(export_schema(settings, **kwargs))
