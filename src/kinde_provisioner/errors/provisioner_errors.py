"""
Provisioner error hierarchy with categorization.

This module defines the error types used throughout the Kinde provisioner.
Fatal errors abort the run before any resource call is issued; API errors
are caught at the applier boundary and recorded as outcome data.
"""

from ..constants import EXISTENCE_MARKERS, HTTP_CONFLICT, RESPONSE_BODY_PREVIEW_LIMIT


class ProvisionerError(Exception):
    """
    Base error class for all provisioner-related exceptions.

    Provides categorization, fatality and user guidance for resolution.
    """

    def __init__(
        self,
        message: str,
        category: str,
        fatal: bool = True,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        """
        Initialize provisioner error.

        Args:
            message: Human-readable error description
            category: Error category (configuration, authentication, api)
            fatal: Whether the error aborts the whole run
            user_action: What the operator should do to resolve the issue
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.category = category
        self.fatal = fatal
        self.user_action = user_action
        self.cause = cause

    def __str__(self) -> str:
        """Enhanced string representation with user guidance."""
        base_msg = super().__str__()
        if self.user_action:
            return f"{base_msg}\nAction required: {self.user_action}"
        return base_msg


class ConfigurationError(ProvisionerError):
    """Required environment or configuration document values are missing or invalid."""

    def __init__(
        self, message: str, field: str | None = None, user_action: str | None = None
    ):
        if field:
            message = f"Configuration error in '{field}': {message}"
        super().__init__(
            message=message,
            category="configuration",
            fatal=True,
            user_action=user_action or "Review and correct configuration",
        )
        self.field = field


class AuthenticationError(ProvisionerError):
    """Client-credentials token exchange failed."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
        cause: Exception | None = None,
    ):
        if status_code:
            message = f"HTTP {status_code}: {message}"
        super().__init__(
            message=message,
            category="authentication",
            fatal=True,
            user_action="Check KINDE_DOMAIN, client credentials and audience",
            cause=cause,
        )
        self.status_code = status_code
        self.response_body = response_body


class ApiError(ProvisionerError):
    """A Management API call returned a non-2xx status or never completed."""

    def __init__(
        self,
        method: str,
        path: str,
        status: int | None = None,
        body: str | None = None,
        cause: Exception | None = None,
    ):
        detail = f"HTTP {status}" if status is not None else "no response"
        message = f"{method} {path} -> {detail}"
        if body:
            message = f"{message}: {self._preview(body)}"
        elif cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message=message, category="api", fatal=False, cause=cause)
        self.method = method
        self.path = path
        self.status = status
        self.body = body

    @staticmethod
    def _preview(body: str, limit: int = RESPONSE_BODY_PREVIEW_LIMIT) -> str:
        if len(body) <= limit:
            return body
        return f"{body[:limit]}...<truncated>"

    def body_preview(self) -> str | None:
        """Return a truncated preview of the response body for logging."""
        if self.body is None:
            return None
        return self._preview(self.body)

    @property
    def is_conflict(self) -> bool:
        """True when the API reported that the resource already exists."""
        if self.status == HTTP_CONFLICT:
            return True
        if self.status is None or not 400 <= self.status < 500:
            return False
        text = (self.body or "").lower()
        return any(marker in text for marker in EXISTENCE_MARKERS)
