"""
Generation-specific Management API adapters.

``KeyAddressedAdapter`` targets the generation where applications and APIs
are addressed by their declared key. ``IdAddressedAdapter`` targets the
generation where applications are created by name and every follow-up call
embeds the server-assigned id from the create response.
"""

from __future__ import annotations

from typing import Any

from ..models.config import ApiSpec, ApplicationSpec
from ..utils.management_api import response_id
from .base import EndpointCall, ManagementApiAdapter


class KeyAddressedAdapter(ManagementApiAdapter):
    """Applications identified by ``key``; URL sets replaced with PATCH."""

    generation = "key"
    application_identity_field = "key"

    def create_application(self, spec: ApplicationSpec) -> EndpointCall:
        body: dict[str, Any] = {"key": spec.key, "name": spec.name or spec.key}
        if spec.type:
            body["type"] = spec.type
        return EndpointCall("POST", "/applications", body)

    def application_ref(self, spec: ApplicationSpec, response: Any) -> str | None:
        return spec.key

    def attach_redirect_uris(self, ref: str, uris: list[str]) -> EndpointCall:
        return EndpointCall("PATCH", f"/applications/{ref}/redirect_uris", {"uris": uris})

    def attach_logout_uris(self, ref: str, uris: list[str]) -> EndpointCall:
        return EndpointCall("PATCH", f"/applications/{ref}/logout_uris", {"uris": uris})

    def api_ref(self, spec: ApiSpec, response: Any) -> str | None:
        return spec.key or response_id(response, "api")


class IdAddressedAdapter(ManagementApiAdapter):
    """Applications identified by ``name``; URLs attached by server id."""

    generation = "id"
    application_identity_field = "name"

    def create_application(self, spec: ApplicationSpec) -> EndpointCall:
        body: dict[str, Any] = {"name": spec.name}
        if spec.type:
            body["type"] = spec.type
        return EndpointCall("POST", "/applications", body)

    def application_ref(self, spec: ApplicationSpec, response: Any) -> str | None:
        return response_id(response, "application")

    def attach_redirect_uris(self, ref: str, uris: list[str]) -> EndpointCall:
        return EndpointCall(
            "POST", f"/applications/{ref}/auth_redirect_urls", {"urls": uris}
        )

    def attach_logout_uris(self, ref: str, uris: list[str]) -> EndpointCall:
        return EndpointCall(
            "POST", f"/applications/{ref}/auth_logout_urls", {"urls": uris}
        )

    def api_ref(self, spec: ApiSpec, response: Any) -> str | None:
        return response_id(response, "api") or spec.key
