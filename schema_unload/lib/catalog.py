"""Table discovery from the PostgreSQL catalog."""

from __future__ import annotations

import logging
from typing import Any, List

import psycopg

from schema_unload.lib.errors import CatalogQueryFailed

logger = logging.getLogger(__name__)

__all__ = ["TABLES_QUERY", "list_tables"]

TABLES_QUERY = (
    "SELECT tablename FROM pg_tables WHERE schemaname = %s ORDER BY tablename"
)


async def list_tables(conn: Any, schema: str) -> List[str]:
    """Return the names of all tables in ``schema``, sorted by name.

    An unknown schema and a schema without tables both yield an empty list.

    Args:
        conn: Open async database connection
        schema: Schema name, already validated

    Raises:
        CatalogQueryFailed: If the catalog query cannot be executed.
    """
    try:
        async with conn.cursor() as cur:
            await cur.execute(TABLES_QUERY, (schema,))
            rows = await cur.fetchall()
    except psycopg.Error as e:
        raise CatalogQueryFailed(
            "Failed to list tables", schema=schema, cause=e
        ) from e

    tables = [row[0] for row in rows]
    logger.info("Found %d table(s) in schema %s", len(tables), schema)
    return tables
