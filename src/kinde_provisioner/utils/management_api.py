"""
Kinde Management API client.

This module provides the single ``call`` primitive every applier uses:
an authenticated JSON request against ``https://{domain}/api/v1`` that
normalizes non-2xx responses and transport failures into ``ApiError``.
"""

import logging
from typing import Any

import httpx

from ..errors import ApiError

logger = logging.getLogger(__name__)


class ManagementApiClient:
    """
    Bearer-token client for the Kinde Management API.

    The token is fixed for the lifetime of the client; a run is expected to
    finish well within the token's validity window, so there is no refresh.
    The client is safe to share between concurrent tasks: it holds no
    per-request state.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the Management API client.

        Args:
            base_url: Management API base, e.g. https://myapp.kinde.com/api/v1
            token: Bearer access token
            http_client: Optional pre-built httpx client (not closed by us);
                ``run()`` shares the client configured from settings
        """
        self.base_url = base_url.rstrip("/")
        self._token = token
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient()

    async def close(self) -> None:
        if self._owns_http_client:
            await self._http.aclose()

    async def __aenter__(self) -> "ManagementApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def call(
        self, method: str, path: str, body: dict[str, Any] | None = None
    ) -> Any | None:
        """
        Make an authenticated request to the Management API.

        Args:
            method: HTTP method (GET, POST, PATCH, ...)
            path: Endpoint path relative to the API base
            body: JSON request body

        Returns:
            Parsed JSON response, or None for 204 / empty responses

        Raises:
            ApiError: On non-2xx status or when no response was received
        """
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/json",
        }
        if body is not None:
            headers["Content-Type"] = "application/json"

        try:
            response = await self._http.request(
                method, self.url_for(path), json=body, headers=headers
            )
        except httpx.HTTPError as e:
            logger.debug(f"Request failed: {method} {path} - {e}")
            raise ApiError(method, path, status=None, cause=e) from e

        if not response.is_success:
            raise ApiError(method, path, status=response.status_code, body=response.text)

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError:
            # Some endpoints answer 2xx with a plain-text body
            return response.text


def response_id(response: Any, wrapper: str) -> str | None:
    """
    Extract the server-assigned id from a create or read response.

    Kinde wraps created objects (``{"role": {"id": ...}}``); a bare
    top-level ``id`` is accepted as well.
    """
    if not isinstance(response, dict):
        return None
    inner = response.get(wrapper)
    if isinstance(inner, dict) and inner.get("id"):
        return str(inner["id"])
    if response.get("id"):
        return str(response["id"])
    return None
