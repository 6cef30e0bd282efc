"""
Unit Tests: Structured Logging

Tests:
    - JSON formatting with keyword fields
    - Context propagation
    - Error serialisation
"""

import json
import logging

from s3artifacts.core.errors import StorageError, TransferError
from s3artifacts.observability.logging import JsonFormatter, StructuredLogger, current_context


def _format(logger_name: str, message: str, **extra) -> dict:
    record = logging.LogRecord(logger_name, logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return json.loads(JsonFormatter().format(record))


class TestJsonFormatter:
    """Tests for JSON output."""

    def test_fields(self):
        data = _format("s3artifacts.profile", "Uploading artifact", key="out/app.jar")

        assert data["message"] == "Uploading artifact"
        assert data["level"] == "INFO"
        assert data["logger"] == "s3artifacts.profile"
        assert data["key"] == "out/app.jar"

    def test_context(self):
        with StructuredLogger.context(build="app #12"):
            assert current_context() == {"build": "app #12"}
            data = _format("x", "msg")

        assert data["build"] == "app #12"
        assert current_context() == {}


class TestStructuredLogger:
    """Tests for the logger wrapper."""

    def test_with_extra(self, caplog):
        logger = StructuredLogger("s3artifacts.test").with_extra(profile="default")

        with caplog.at_level(logging.INFO, logger="s3artifacts.test"):
            logger.info("Deleted artifact", key="k")

        rec = caplog.records[0]
        assert rec.profile == "default"
        assert rec.key == "k"


class TestErrorSerialisation:
    """Tests for error dictionaries."""

    def test_to_dict(self):
        error = StorageError.request_failed("delete", "b/k", ConnectionError("reset"))
        data = error.to_dict()

        assert data["code"] == "STORAGE_REQUEST_FAILED"
        assert data["cause"] == "reset"
        assert data["context"] == {"operation": "delete", "target": "b/k"}
        assert str(error) == "[STORAGE_REQUEST_FAILED] delete b/k: reset"

    def test_cause_chain(self):
        cause = OSError("disk")
        error = TransferError.remote_failure("put", "b/k", cause)

        assert error.__cause__ is cause
