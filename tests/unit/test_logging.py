"""Unit tests for structured logging and correlation ids."""

import json
import logging

from kinde_provisioner.observability.logging import (
    CorrelationIDFilter,
    ProvisionerLogger,
    StructuredFormatter,
    get_correlation_id,
    set_correlation_id,
)


def _record(message: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="kinde_provisioner.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    """Test JSON log lines."""

    def test_includes_structured_fields(self):
        record = _record(
            "role admin partially applied",
            correlation_id="abc12345",
            resource_kind="role",
            identity="admin",
            errors=["link permission read: boom"],
            unrelated="dropped",
        )

        data = json.loads(StructuredFormatter().format(record))

        assert data["level"] == "WARNING"
        assert data["message"] == "role admin partially applied"
        assert data["correlation_id"] == "abc12345"
        assert data["resource_kind"] == "role"
        assert data["identity"] == "admin"
        assert data["errors"] == ["link permission read: boom"]
        assert "unrelated" not in data


class TestCorrelationId:
    """Test correlation id propagation."""

    def test_filter_uses_current_id(self):
        set_correlation_id("run-0001")
        record = _record()

        assert CorrelationIDFilter().filter(record) is True
        assert record.correlation_id == "run-0001"
        assert get_correlation_id() == "run-0001"


class TestProvisionerLogger:
    """Test outcome logging levels."""

    def test_result_levels(self, caplog):
        logger = ProvisionerLogger("kinde_provisioner.test")

        with caplog.at_level(logging.DEBUG, logger="kinde_provisioner.test"):
            logger.log_apply_result("role", "a", "success", [], 0.1)
            logger.log_apply_result("role", "b", "partial_failure", ["x: y"], 0.1)
            logger.log_apply_result("role", "c", "failure", ["x: y"], 0.1)

        assert [r.levelno for r in caplog.records] == [
            logging.INFO,
            logging.WARNING,
            logging.ERROR,
        ]
        assert caplog.records[1].status == "partial_failure"
        assert caplog.records[2].getMessage() == "role c failed: x: y"
