"""Tests for schema_unload environment helpers."""

import os

from schema_unload.lib.env import expand_env_vars, load_env_file


def test_expand_env_vars_both_syntaxes(monkeypatch):
    monkeypatch.setenv("PGPASSWORD", "s3cret")
    assert expand_env_vars("postgresql://graph:${PGPASSWORD}@db/graph") == (
        "postgresql://graph:s3cret@db/graph"
    )
    assert expand_env_vars("$PGPASSWORD/x") == "s3cret/x"


def test_expand_env_vars_leaves_unset_reference(monkeypatch):
    monkeypatch.delenv("MISSING", raising=False)
    assert expand_env_vars("${MISSING}") == "${MISSING}"


def test_expand_env_vars_walks_config_mapping(monkeypatch):
    monkeypatch.setenv("BUCKET", "exports")
    cfg = {
        "out_dir": "s3://${BUCKET}/sgd42",
        "storage_options": {"profile": "$BUCKET"},
        "tags": ["${BUCKET}", 1],
        "compress": False,
        "compression_level": 9,
    }

    assert expand_env_vars(cfg) == {
        "out_dir": "s3://exports/sgd42",
        "storage_options": {"profile": "exports"},
        "tags": ["exports", 1],
        "compress": False,
        "compression_level": 9,
    }


def test_load_env_file_does_not_override(tmp_path, monkeypatch):
    monkeypatch.delenv("SCHEMA_UNLOAD_TEST_VALUE", raising=False)
    monkeypatch.setenv("SCHEMA_UNLOAD_TEST_KEPT", "from-shell")
    env_file = tmp_path / ".env"
    env_file.write_text("SCHEMA_UNLOAD_TEST_VALUE=from-dotenv\nSCHEMA_UNLOAD_TEST_KEPT=from-dotenv\n")

    assert load_env_file(env_file) is True

    assert os.environ["SCHEMA_UNLOAD_TEST_VALUE"] == "from-dotenv"
    assert os.environ["SCHEMA_UNLOAD_TEST_KEPT"] == "from-shell"
    monkeypatch.delenv("SCHEMA_UNLOAD_TEST_VALUE")


def test_load_env_file_missing(tmp_path):
    assert load_env_file(tmp_path / "absent.env") is False
