"""schema-unload test suite.

Unit tests live in tests/unit/. The database is replaced by the in-memory
connection in fakes.py, so no PostgreSQL server is needed.
"""
