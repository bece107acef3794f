"""Tests for schema_unload/lib/errors.py - structured exception hierarchy."""

import pytest

from schema_unload.lib.errors import (
    CatalogQueryFailed,
    ConfigurationError,
    ConnectionError,
    ExportError,
    FinalizeError,
    InvalidIdentifier,
    IoError,
    SinkOpenFailed,
    StreamError,
)


class TestExportError:
    """Tests for base ExportError class."""

    def test_basic_message(self):
        error = ExportError("Something went wrong")
        assert str(error) == "Something went wrong"

    def test_with_schema_and_table(self):
        error = ExportError("COPY failed", schema="sgd42", table="pools")
        assert "[sgd42.pools]" in str(error)
        assert "COPY failed" in str(error)

    def test_with_schema_only(self):
        assert "[sgd42]" in str(ExportError("Listing failed", schema="sgd42"))

    def test_with_details_and_suggestion(self):
        error = ExportError(
            "Write failed",
            details={"path": "/tmp/x.csv"},
            suggestion="Free some disk space",
        )
        assert "path: /tmp/x.csv" in str(error)
        assert "Suggestion: Free some disk space" in str(error)

    def test_cause_is_recorded(self):
        error = ExportError("Wrapped", cause=OSError("disk full"))
        assert error.details["cause"] == "disk full"
        assert error.details["cause_type"] == "OSError"

    def test_to_dict(self):
        error = ExportError("Test error", schema="s", table="t", details={"k": "v"})
        d = error.to_dict()
        assert d["error_type"] == "ExportError"
        assert d["message"] == "Test error"
        assert d["schema"] == "s"
        assert d["table"] == "t"
        assert d["details"]["k"] == "v"


@pytest.mark.parametrize(
    "cls",
    [
        InvalidIdentifier,
        ConfigurationError,
        ConnectionError,
        CatalogQueryFailed,
        IoError,
        SinkOpenFailed,
        StreamError,
        FinalizeError,
    ],
)
def test_all_errors_share_the_base(cls):
    assert issubclass(cls, ExportError)


def test_sink_open_failed_is_an_io_error():
    error = SinkOpenFailed("Cannot create output file", path="/ro/x.csv")
    assert isinstance(error, IoError)
    assert error.path == "/ro/x.csv"
    assert error.suggestion


def test_connection_error_has_default_suggestion():
    assert "SCHEMA_UNLOAD_DATABASE_URL" in ConnectionError("nope").suggestion


def test_stream_error_records_progress():
    error = StreamError("COPY stream failed", schema="s", table="t", chunks_written=7)
    assert error.chunks_written == 7
    assert "chunks_written: 7" in str(error)


def test_invalid_identifier_records_value():
    error = InvalidIdentifier("Schema name must be alphanumeric", value="a b")
    assert error.details["value"] == "'a b'"
    assert error.kind == "schema"
