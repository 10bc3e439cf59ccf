"""Observability helpers: structured logging with correlation IDs."""

from .logging import (
    ProvisionerLogger,
    get_correlation_id,
    set_correlation_id,
    setup_structured_logging,
)

__all__ = [
    "ProvisionerLogger",
    "get_correlation_id",
    "set_correlation_id",
    "setup_structured_logging",
]
