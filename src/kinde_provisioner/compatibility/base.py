"""
Base adapter for Management API generation compatibility.

The Kinde Management API has shipped two incompatible shapes for the
application endpoints. Adapters hide those differences from the appliers:
1. Which field identifies an application (``key`` or ``name``)
2. How the application is addressed once created (key or server id)
3. Which endpoints and body shapes attach redirect and logout URLs
4. How a created API is addressed when adding scopes
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from ..models.config import ApiSpec, ApplicationSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EndpointCall:
    """One Management API request: method, path relative to /api/v1, body."""

    method: str
    path: str
    body: dict[str, Any] | None = None


class ManagementApiAdapter(ABC):
    """
    Abstract base adapter for one Management API generation.

    Each concrete adapter handles endpoint path resolution and payload
    shapes for the resources whose API changed between generations.
    """

    generation: str = ""
    application_identity_field: str = ""

    def application_identity(self, spec: ApplicationSpec) -> str | None:
        """The value identifying the application in this generation."""
        return getattr(spec, self.application_identity_field)

    def validate_application(self, spec: ApplicationSpec) -> str | None:
        """Return an error message when the application cannot be identified."""
        if not self.application_identity(spec):
            return (
                f"application.{self.application_identity_field} is required "
                f"for the '{self.generation}' API generation"
            )
        return None

    def application_lookup(self, spec: ApplicationSpec) -> EndpointCall:
        """Existence check for an application."""
        return EndpointCall("GET", f"/applications/{self.application_identity(spec)}")

    @abstractmethod
    def create_application(self, spec: ApplicationSpec) -> EndpointCall:
        """Request creating the application."""

    @abstractmethod
    def application_ref(
        self, spec: ApplicationSpec, response: Any
    ) -> str | None:
        """Reference used to address the application after create/lookup."""

    @abstractmethod
    def attach_redirect_uris(self, ref: str, uris: list[str]) -> EndpointCall:
        """Request attaching redirect (callback) URLs."""

    @abstractmethod
    def attach_logout_uris(self, ref: str, uris: list[str]) -> EndpointCall:
        """Request attaching logout URLs."""

    def create_api(self, spec: ApiSpec) -> EndpointCall:
        body = {
            "key": spec.key,
            "name": spec.name or spec.key,
            "audience": spec.audience,
        }
        return EndpointCall(
            "POST", "/apis", {k: v for k, v in body.items() if v is not None}
        )

    @abstractmethod
    def api_ref(self, spec: ApiSpec, response: Any) -> str | None:
        """Reference used to address the API when creating scopes."""
