"""In-memory stand-ins for the psycopg async connection used in tests.

FakeConnection mimics the small slice of psycopg.AsyncConnection the export
engine touches: ``cursor()`` as an async context manager, ``execute`` /
``fetchall`` for the catalog query, and ``copy()`` yielding COPY chunks.
"""

from __future__ import annotations

import re
from contextlib import asynccontextmanager
from typing import Dict, List, Optional

import psycopg

_TABLE_RE = re.compile(r"FROM (\w+)\.(\w+) ORDER BY (\w+)")


def csv_chunks(header: str, *rows: str) -> List[bytes]:
    """Chunks as PostgreSQL sends them: header line, then one per row."""
    return [f"{header}\n".encode()] + [f"{row}\n".encode() for row in rows]


class FakeCopy:
    def __init__(self, chunks: List[bytes], fail_after: Optional[int] = None) -> None:
        self._chunks = chunks
        self._fail_after = fail_after

    async def __aenter__(self) -> "FakeCopy":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    async def _iterate(self):
        for i, chunk in enumerate(self._chunks):
            if self._fail_after is not None and i >= self._fail_after:
                raise psycopg.OperationalError("server closed the connection unexpectedly")
            yield memoryview(chunk)
        if self._fail_after is not None and self._fail_after >= len(self._chunks):
            raise psycopg.OperationalError("server closed the connection unexpectedly")

    def __aiter__(self):
        return self._iterate()


class FakeCursor:
    def __init__(self, conn: "FakeConnection") -> None:
        self._conn = conn
        self._rows: List[tuple] = []

    async def __aenter__(self) -> "FakeCursor":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    async def execute(self, query: str, params=None) -> None:
        self._conn.executed.append((query, params))
        if self._conn.catalog_error is not None:
            raise self._conn.catalog_error
        schema = params[0] if params else None
        if schema == self._conn.schema:
            self._rows = [(name,) for name in sorted(self._conn.tables)]
        else:
            self._rows = []

    async def fetchall(self) -> List[tuple]:
        return list(self._rows)

    def copy(self, query: str) -> FakeCopy:
        self._conn.copies.append(query)
        match = _TABLE_RE.search(query)
        assert match is not None, query
        table = match.group(2)
        return FakeCopy(self._conn.tables[table], self._conn.fail_after.get(table))


class FakeConnection:
    """Database holding one schema whose tables map to their COPY output."""

    def __init__(
        self,
        schema: str = "public",
        tables: Optional[Dict[str, List[bytes]]] = None,
        *,
        fail_after: Optional[Dict[str, int]] = None,
        catalog_error: Optional[Exception] = None,
    ) -> None:
        self.schema = schema
        self.tables = tables or {}
        self.fail_after = fail_after or {}
        self.catalog_error = catalog_error
        self.executed: List[tuple] = []
        self.copies: List[str] = []
        self.closed = False

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)


def fake_connect(conn: FakeConnection):
    """Build a ``connect`` replacement that always yields ``conn``."""

    @asynccontextmanager
    async def _connect(database_url: str):
        conn.database_url = database_url
        try:
            yield conn
        finally:
            conn.closed = True

    return _connect
