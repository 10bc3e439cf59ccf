"""Centralized provisioner settings using pydantic-settings.

This module provides a single source of truth for all run configuration
loaded from environment variables (and an optional ``.env`` file). Uses
pydantic for automatic validation, type coercion, and documentation.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_API_GENERATION,
    DEFAULT_CONFIG_PATH,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    MANAGEMENT_API_PREFIX,
    TOKEN_ENDPOINT_PATH,
)
from .errors import ConfigurationError


class Settings(BaseSettings):
    """Provisioner configuration loaded from environment variables.

    Credentials default to empty strings so that every missing value can be
    reported at once by ``require_credentials`` instead of failing on the
    first one.
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Kinde credentials
    domain: str = Field(
        default="",
        validation_alias="KINDE_DOMAIN",
        description="Kinde business domain, e.g. myapp.kinde.com",
    )
    client_id: str = Field(
        default="",
        validation_alias="KINDE_CLIENT_ID",
        description="Client ID of the machine-to-machine application",
    )
    client_secret: str = Field(
        default="",
        validation_alias="KINDE_CLIENT_SECRET",
        description="Client secret of the machine-to-machine application",
    )
    audience: str = Field(
        default="",
        validation_alias="KINDE_AUDIENCE",
        description="Audience of the Management API token",
    )
    scopes: str = Field(
        default="",
        validation_alias="KINDE_SCOPES",
        description="Space-separated Management API scopes to request",
    )

    # Declarative document
    config_path: str = Field(
        default=DEFAULT_CONFIG_PATH,
        validation_alias="CONFIG_PATH",
        description="Path to the JSON document describing the environment",
    )

    # Management API behavior
    api_generation: Literal["key", "id"] = Field(
        default=DEFAULT_API_GENERATION,
        validation_alias="KINDE_API_GENERATION",
        description="Management API generation: 'key' addresses applications by key, "
        "'id' by the server-assigned id",
    )
    http_timeout_seconds: float = Field(
        default=DEFAULT_HTTP_TIMEOUT_SECONDS,
        validation_alias="KINDE_HTTP_TIMEOUT_SECONDS",
        description="Timeout in seconds for every HTTP request",
    )
    verify_ssl: bool = Field(
        default=True,
        validation_alias="KINDE_VERIFY_SSL",
        description="Verify TLS certificates of the Kinde domain",
    )

    # Logging configuration
    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_logs: bool = Field(
        default=False,
        validation_alias="JSON_LOGS",
        description="Enable JSON formatted logging for structured log aggregation",
    )
    correlation_ids: bool = Field(
        default=True,
        validation_alias="CORRELATION_IDS",
        description="Enable correlation IDs in logs for run tracing",
    )

    @property
    def base_url(self) -> str:
        """Origin of the Kinde domain, with a scheme added when missing."""
        domain = self.domain.strip().rstrip("/")
        if domain.startswith(("http://", "https://")):
            return domain
        return f"https://{domain}"

    @property
    def management_api_url(self) -> str:
        return f"{self.base_url}{MANAGEMENT_API_PREFIX}"

    @property
    def token_url(self) -> str:
        return f"{self.base_url}{TOKEN_ENDPOINT_PATH}"

    def missing_credentials(self) -> list[str]:
        """Return the environment variable names of every missing credential."""
        required = {
            "KINDE_DOMAIN": self.domain,
            "KINDE_CLIENT_ID": self.client_id,
            "KINDE_CLIENT_SECRET": self.client_secret,
            "KINDE_AUDIENCE": self.audience,
        }
        return [name for name, value in required.items() if not value.strip()]

    def require_credentials(self) -> None:
        """
        Ensure every credential needed for the token exchange is present.

        Raises:
            ConfigurationError: If any credential is missing
        """
        missing = self.missing_credentials()
        if missing:
            raise ConfigurationError(
                f"Missing Kinde env vars: {', '.join(missing)}",
                user_action="Export the missing variables or add them to .env",
            )


def load_settings(**overrides) -> Settings:
    """Build settings from the environment.

    Overrides are keyed by environment variable name, e.g.
    ``load_settings(KINDE_API_GENERATION="id")``.
    """
    return Settings(**overrides)
