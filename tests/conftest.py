"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from schema_unload.lib.config import ExportSettings  # noqa: E402
from schema_unload.lib.env import DATABASE_URL_ENV, OUT_DIR_ENV  # noqa: E402
from tests.fakes import FakeConnection, csv_chunks  # noqa: E402


@pytest.fixture(autouse=True)
def clean_export_env(monkeypatch):
    """Keep a developer's own export settings out of the tests."""
    monkeypatch.delenv(DATABASE_URL_ENV, raising=False)
    monkeypatch.delenv(OUT_DIR_ENV, raising=False)


@pytest.fixture
def users_connection() -> FakeConnection:
    """Schema ``public`` with a two-row ``users`` table."""
    return FakeConnection(
        "public",
        {"users": csv_chunks("id,name", "1,a", "2,b")},
    )


@pytest.fixture
def make_settings(tmp_path: Path):
    """Factory for ExportSettings writing under tmp_path."""

    def _make(**overrides) -> ExportSettings:
        values = {
            "database_url": "postgresql://graph@localhost:5432/graph",
            "schema_name": "public",
            "out_dir": str(tmp_path / "exports"),
            "order_by": "id",
        }
        values.update(overrides)
        return ExportSettings(**values)

    return _make
