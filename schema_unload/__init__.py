"""schema-unload: stream every table of a PostgreSQL schema to CSV files."""

__version__ = "0.1.0"
