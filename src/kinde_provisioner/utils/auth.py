"""
Client-credentials token exchange against the Kinde token endpoint.

A provisioning run authenticates exactly once; the access token is then
shared read-only by every applier for the rest of the run.
"""

import logging

import httpx

from ..constants import CLIENT_CREDENTIALS_GRANT
from ..errors import AuthenticationError
from ..settings import Settings

logger = logging.getLogger(__name__)


async def fetch_access_token(settings: Settings, http_client: httpx.AsyncClient) -> str:
    """
    Exchange the machine-to-machine credentials for a bearer token.

    Args:
        settings: Provisioner settings carrying domain, credentials and audience
        http_client: HTTP client used for the exchange

    Returns:
        The access token

    Raises:
        AuthenticationError: If the exchange fails or returns no token
    """
    form = {
        "grant_type": CLIENT_CREDENTIALS_GRANT,
        "client_id": settings.client_id,
        "client_secret": settings.client_secret,
        "audience": settings.audience,
    }
    if settings.scopes.strip():
        form["scope"] = " ".join(settings.scopes.split())

    try:
        response = await http_client.post(
            settings.token_url,
            data=form,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
    except httpx.HTTPError as e:
        logger.error(f"Token request to {settings.token_url} failed: {e}")
        raise AuthenticationError(f"Token request failed: {e}", cause=e) from e

    if not response.is_success:
        body = response.text
        logger.error(
            f"Token exchange rejected with HTTP {response.status_code}",
            extra={"http_status": response.status_code, "response_body": body[:1024]},
        )
        raise AuthenticationError(
            f"Token error: {body}",
            status_code=response.status_code,
            response_body=body,
        )

    try:
        token = response.json().get("access_token")
    except ValueError as e:
        raise AuthenticationError(
            "Token response is not JSON",
            status_code=response.status_code,
            response_body=response.text,
            cause=e,
        ) from e

    if not token:
        raise AuthenticationError(
            "Token response has no access_token",
            status_code=response.status_code,
            response_body=response.text,
        )

    logger.debug("Successfully obtained Management API token")
    return token
