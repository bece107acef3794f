"""CLI entry point for exporting a schema.

Usage:
    python -m schema_unload sgd42 --database-url postgresql://graph@localhost/graph
    python -m schema_unload sgd42 --out-dir ./exports --no-compression
    python -m schema_unload sgd42 --config export.yaml --dry-run

The database URL and output directory fall back to the
SCHEMA_UNLOAD_DATABASE_URL and SCHEMA_UNLOAD_OUT_DIR environment variables,
which may also be set in a .env file.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from schema_unload import __version__
from schema_unload.lib.config import resolve_settings
from schema_unload.lib.env import DATABASE_URL_ENV, OUT_DIR_ENV, load_env_file
from schema_unload.lib.errors import ExportError, InvalidIdentifier
from schema_unload.lib.export import run_export
from schema_unload.lib.identifiers import validate_schema_name
from schema_unload.lib.logging import setup_logging

logger = logging.getLogger(__name__)


def _schema_arg(value: str) -> str:
    try:
        return validate_schema_name(value)
    except InvalidIdentifier as e:
        raise argparse.ArgumentTypeError(e.message) from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schema-unload",
        description="Export every table of a PostgreSQL schema to CSV files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Environment:
    {DATABASE_URL_ENV}   fallback for --database-url
    {OUT_DIR_ENV}        fallback for --out-dir (default: ./)

Examples:
    # Gzip-compressed export of schema sgd42 into ./exports
    python -m schema_unload sgd42 --out-dir ./exports

    # Plain CSV, ordered by id instead of vid
    python -m schema_unload public --no-compression --order-by id

    # Show which files would be written
    python -m schema_unload sgd42 --dry-run
        """,
    )

    parser.add_argument(
        "schema",
        type=_schema_arg,
        help="Schema name to export (ASCII letters and digits only)",
    )
    parser.add_argument(
        "--database-url",
        help=f"Database URL (default: ${DATABASE_URL_ENV})",
    )
    parser.add_argument(
        "-o",
        "--out-dir",
        help=f"Output directory or URI (default: ${OUT_DIR_ENV} or ./)",
    )
    parser.add_argument(
        "--no-compression",
        action="store_true",
        help="Write plain .csv files instead of .csv.gz",
    )
    parser.add_argument(
        "--compression-level",
        type=int,
        choices=range(1, 10),
        metavar="{1..9}",
        help="Gzip compression level (default: 6)",
    )
    parser.add_argument(
        "--order-by",
        help="Column giving every table a stable row order (default: vid)",
    )
    parser.add_argument(
        "--config",
        help="YAML config file with export settings",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List the files that would be written without exporting",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--json-log",
        action="store_true",
        help="Output logs in JSON format (for log aggregation systems)",
    )
    parser.add_argument(
        "--log-file",
        help="Also write logs to this file",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"schema-unload {__version__}",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    load_env_file()

    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose, json_format=args.json_log, log_file=args.log_file)

    try:
        settings = resolve_settings(
            config_path=args.config,
            schema_name=args.schema,
            database_url=args.database_url,
            out_dir=args.out_dir,
            compress=False if args.no_compression else None,
            compression_level=args.compression_level,
            order_by=args.order_by,
        )
        summary = run_export(settings, dry_run=args.dry_run)
    except ExportError as e:
        logger.error("Export failed: %s", e, extra={"error": e.to_dict()})
        return 1

    if args.dry_run:
        for name in summary.planned:
            print(name)
    elif args.verbose:
        logger.debug("Summary: %s", json.dumps(summary.to_dict(), default=str))

    return 0


if __name__ == "__main__":
    sys.exit(main())
