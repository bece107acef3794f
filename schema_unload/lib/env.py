"""Environment lookups for export settings.

Names the variables the CLI falls back to, loads a .env file with
python-dotenv, and substitutes ``${NAME}`` / ``$NAME`` references in values
read from a YAML config file, so a file can say
``database_url: postgresql://graph:${PGPASSWORD}@db/graph``.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Optional, Union

from dotenv import load_dotenv

__all__ = [
    "DATABASE_URL_ENV",
    "OUT_DIR_ENV",
    "expand_env_vars",
    "load_env_file",
]

DATABASE_URL_ENV = "SCHEMA_UNLOAD_DATABASE_URL"
OUT_DIR_ENV = "SCHEMA_UNLOAD_OUT_DIR"

_REFERENCE = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


def load_env_file(path: Optional[Union[str, Path]] = None) -> bool:
    """Load a .env file without overriding variables already set.

    With no ``path``, python-dotenv searches upwards from the working
    directory. Returns whether a file was found.
    """
    return load_dotenv(dotenv_path=path, override=False)


def _substitute(match: re.Match[str]) -> str:
    name = match.group(1) or match.group(2)
    # Unset references are left as written
    return os.environ.get(name, match.group(0))


def expand_env_vars(value: Any) -> Any:
    """Substitute environment references in ``value``.

    Strings are expanded; dicts and lists are walked recursively; anything
    else is returned unchanged.

    Example:
        >>> os.environ["PGHOST"] = "localhost"
        >>> expand_env_vars({"database_url": "postgresql://${PGHOST}/graph", "compress": True})
        {'database_url': 'postgresql://localhost/graph', 'compress': True}
    """
    if isinstance(value, str):
        return _REFERENCE.sub(_substitute, value)
    if isinstance(value, dict):
        return {key: expand_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    return value
