"""
Error handling module for the Kinde provisioner.

This module provides the error hierarchy separating fatal run-level failures
(configuration, authentication) from per-call API failures that appliers
record into outcomes.
"""

from .provisioner_errors import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    ProvisionerError,
)

__all__ = [
    "ProvisionerError",
    "ConfigurationError",
    "AuthenticationError",
    "ApiError",
]
