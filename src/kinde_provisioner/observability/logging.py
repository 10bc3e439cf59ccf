"""
Structured logging utilities for the Kinde provisioner.

This module provides correlation ID tracking and structured log formatting
so every line of one provisioning run can be grouped together in a log
aggregator.
"""

import json
import logging
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

# Context variable for tracking correlation IDs across async operations
correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

STRUCTURED_FIELDS = (
    "resource_kind",
    "identity",
    "operation",
    "status",
    "duration",
    "error_type",
    "errors",
    "http_method",
    "http_path",
    "http_status",
    "response_body",
    "environment",
    "succeeded",
    "partial",
    "failed",
)


class CorrelationIDFilter(logging.Filter):
    """Logging filter that adds correlation ID to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Add correlation ID to the log record.

        Args:
            record: The log record to process

        Returns:
            True to allow the record to be processed
        """
        current_correlation_id = correlation_id.get()
        if not current_correlation_id:
            current_correlation_id = generate_correlation_id()
            correlation_id.set(current_correlation_id)

        record.correlation_id = current_correlation_id
        return True


class StructuredFormatter(logging.Formatter):
    """
    Structured JSON formatter for logs with correlation ID support.

    Formats log records as one JSON object per line.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": getattr(record, "correlation_id", ""),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # extra= fields land as attributes on the record
        for field in STRUCTURED_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        return json.dumps(log_data, default=str)


def generate_correlation_id() -> str:
    """Generate a short correlation ID."""
    return str(uuid.uuid4())[:8]


def set_correlation_id(corr_id: str) -> str:
    """
    Set the correlation ID for the current context.

    Args:
        corr_id: Correlation ID to set

    Returns:
        The correlation ID that was set
    """
    correlation_id.set(corr_id)
    return corr_id


def get_correlation_id() -> str:
    """Get the current correlation ID, or an empty string if none is set."""
    return correlation_id.get("")


def setup_structured_logging(
    log_level: str = "INFO",
    enable_json_formatting: bool = False,
    correlation_id_enabled: bool = True,
) -> None:
    """
    Set up logging for a provisioning run.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        enable_json_formatting: Whether to use JSON formatting
        correlation_id_enabled: Whether to enable correlation ID tracking
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()

    if enable_json_formatting:
        formatter: logging.Formatter = StructuredFormatter()
    elif correlation_id_enabled:
        formatter = logging.Formatter(
            "%(asctime)s - %(correlation_id)s - %(name)s - %(levelname)s - %(message)s"
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handler.setFormatter(formatter)

    if correlation_id_enabled:
        handler.addFilter(CorrelationIDFilter())

    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


class ProvisionerLogger:
    """
    Logger for provisioning operations with structured logging support.

    Provides convenient methods for the events every applier reports:
    start of an instance, each failed step, and the final outcome.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def log_apply_start(self, resource_kind: str, identity: str) -> None:
        self.logger.debug(
            f"Applying {resource_kind} {identity}",
            extra={
                "resource_kind": resource_kind,
                "identity": identity,
                "operation": "apply_start",
            },
        )

    def log_step_failure(
        self, resource_kind: str, identity: str, step: str, error: Exception
    ) -> None:
        """
        Log a single failed remote call inside an applier.

        Args:
            resource_kind: Kind of the resource being applied
            identity: Identity of the resource instance
            step: Human-readable step name (e.g. "create permission read")
            error: The error raised by the call
        """
        extra: dict[str, Any] = {
            "resource_kind": resource_kind,
            "identity": identity,
            "operation": step,
            "error_type": type(error).__name__,
        }
        for attr, field in (
            ("method", "http_method"),
            ("path", "http_path"),
            ("status", "http_status"),
        ):
            value = getattr(error, attr, None)
            if value is not None:
                extra[field] = value
        body_preview = getattr(error, "body_preview", None)
        if callable(body_preview) and body_preview() is not None:
            extra["response_body"] = body_preview()

        self.logger.warning(
            f"{resource_kind} {identity}: {step} failed: {error}", extra=extra
        )

    def log_apply_result(
        self,
        resource_kind: str,
        identity: str,
        status: str,
        errors: list[str],
        duration: float,
    ) -> None:
        """
        Log the outcome of one resource instance.

        Success is logged at INFO, partial failure at WARNING and failure
        at ERROR so a plain log scan shows what needs attention.
        """
        if status == "success":
            level = logging.INFO
            message = f"{resource_kind} {identity} applied"
        elif status == "partial_failure":
            level = logging.WARNING
            message = f"{resource_kind} {identity} partially applied: {'; '.join(errors)}"
        else:
            level = logging.ERROR
            message = f"{resource_kind} {identity} failed: {'; '.join(errors)}"

        self.logger.log(
            level,
            message,
            extra={
                "resource_kind": resource_kind,
                "identity": identity,
                "operation": "apply_result",
                "status": status,
                "errors": errors,
                "duration": duration,
            },
        )

    def log_run_summary(
        self,
        environment: str,
        succeeded: int,
        partial: int,
        failed: int,
        duration: float,
    ) -> None:
        level = logging.INFO if partial == 0 and failed == 0 else logging.WARNING
        self.logger.log(
            level,
            f"Provisioning of {environment} complete: {succeeded} succeeded, "
            f"{partial} partially applied, {failed} failed",
            extra={
                "environment": environment,
                "operation": "run_summary",
                "succeeded": succeeded,
                "partial": partial,
                "failed": failed,
                "duration": duration,
            },
        )

    def debug(self, message: str, **kwargs) -> None:
        """Log debug message with extra data."""
        self.logger.debug(message, extra=kwargs)

    def info(self, message: str, **kwargs) -> None:
        """Log info message with extra data."""
        self.logger.info(message, extra=kwargs)

    def warning(self, message: str, **kwargs) -> None:
        """Log warning message with extra data."""
        self.logger.warning(message, extra=kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs) -> None:
        """Log error message with extra data."""
        self.logger.error(message, exc_info=exc_info, extra=kwargs)
