"""Tests for schema_unload/lib/logging.py."""

import json
import logging

import pytest

from schema_unload.lib.logging import JSONFormatter, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def _record(msg="Exported %s.%s", args=("sgd42", "pools"), **extra):
    record = logging.LogRecord(
        "schema_unload.lib.export", logging.INFO, __file__, 10, msg, args, None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_basic_fields():
    data = json.loads(JSONFormatter().format(_record()))

    assert data["level"] == "INFO"
    assert data["logger"] == "schema_unload.lib.export"
    assert data["message"] == "Exported sgd42.pools"
    assert data["timestamp"].endswith("Z")
    assert "extra" not in data


def test_json_formatter_includes_extra_fields():
    data = json.loads(JSONFormatter().format(_record(schema="sgd42", table="pools", bytes=42)))
    assert data["extra"] == {"schema": "sgd42", "table": "pools", "bytes": 42}


def test_json_formatter_excludes_fields():
    formatter = JSONFormatter(exclude_fields=["bytes"])
    data = json.loads(formatter.format(_record(table="pools", bytes=42)))
    assert data["extra"] == {"table": "pools"}


def test_json_formatter_exception():
    try:
        raise ValueError("boom")
    except ValueError:
        import sys

        record = _record()
        record.exc_info = sys.exc_info()

    data = json.loads(JSONFormatter().format(record))
    assert "ValueError: boom" in data["exception"]


def test_setup_logging_levels_and_file(tmp_path, restore_root_logger):
    log_file = tmp_path / "export.log"

    setup_logging(verbose=True, json_format=True, log_file=str(log_file))

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 2
    assert all(isinstance(h.formatter, JSONFormatter) for h in root.handlers)

    logging.getLogger("schema_unload.test").info("hello")
    for handler in root.handlers:
        handler.flush()
    line = log_file.read_text().strip().splitlines()[-1]
    assert json.loads(line)["message"] == "hello"


def test_setup_logging_default_info(restore_root_logger):
    setup_logging()
    root = logging.getLogger()
    assert root.level == logging.INFO
    assert len(root.handlers) == 1
    assert logging.getLogger("psycopg").level == logging.WARNING
