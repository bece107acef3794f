"""Allow-list validation for identifiers interpolated into SQL text.

PostgreSQL has no bind parameters for identifiers, so the schema name and the
ordering column end up inside the query string verbatim. Both come from user
input and must pass these checks before any connection is opened.

Table names are not checked here. They are read back from ``pg_tables`` using
the already-validated schema, so they originate from the database's own
catalog rather than from the caller.
"""

from __future__ import annotations

import re

from schema_unload.lib.errors import InvalidIdentifier

__all__ = ["SCHEMA_NAME_PATTERN", "COLUMN_NAME_PATTERN", "validate_schema_name", "validate_column_name"]

# ASCII only; str.isalnum() would also accept letters and digits from other scripts
SCHEMA_NAME_PATTERN = re.compile(r"[A-Za-z0-9]+")
COLUMN_NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def validate_schema_name(name: str) -> str:
    """Return ``name`` unchanged if it is a non-empty ASCII alphanumeric string.

    Raises:
        InvalidIdentifier: If the name is empty or holds any other character.

    Example:
        >>> validate_schema_name("public")
        'public'
        >>> validate_schema_name("sgd42")
        'sgd42'
    """
    if not isinstance(name, str) or not SCHEMA_NAME_PATTERN.fullmatch(name):
        raise InvalidIdentifier(
            "Schema name must be alphanumeric",
            value=name,
            kind="schema",
        )
    return name


def validate_column_name(name: str) -> str:
    """Return ``name`` unchanged if it is a plain unquoted column identifier."""
    if not isinstance(name, str) or not COLUMN_NAME_PATTERN.fullmatch(name):
        raise InvalidIdentifier(
            "Ordering column must start with a letter or underscore and "
            "contain only letters, digits and underscores",
            value=name,
            kind="column",
        )
    return name
