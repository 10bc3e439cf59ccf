"""Unit tests for the client-credentials token exchange."""

from urllib.parse import parse_qs

import httpx
import pytest

from kinde_provisioner.errors import AuthenticationError
from kinde_provisioner.utils.auth import fetch_access_token


def _http(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestFetchAccessToken:
    """Test token acquisition."""

    @pytest.mark.asyncio
    async def test_posts_client_credentials_form(self, settings):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"access_token": "abc", "expires_in": 86400})

        token = await fetch_access_token(settings, _http(handler))

        assert token == "abc"
        request = seen[0]
        assert str(request.url) == "https://example.kinde.com/oauth2/token"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        form = parse_qs(request.content.decode())
        assert form == {
            "grant_type": ["client_credentials"],
            "client_id": ["client-id"],
            "client_secret": ["client-secret"],
            "audience": ["https://example.kinde.com/api"],
            "scope": ["create:applications create:roles"],
        }

    @pytest.mark.asyncio
    async def test_empty_scopes_not_sent(self, settings):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"access_token": "abc"})

        await fetch_access_token(settings.model_copy(update={"scopes": ""}), _http(handler))

        assert "scope" not in parse_qs(seen[0].content.decode())

    @pytest.mark.asyncio
    async def test_rejected_exchange_is_fatal(self, settings):
        http = _http(lambda request: httpx.Response(401, text='{"error":"invalid_client"}'))

        with pytest.raises(AuthenticationError) as exc_info:
            await fetch_access_token(settings, http)

        assert exc_info.value.status_code == 401
        assert exc_info.value.response_body == '{"error":"invalid_client"}'
        assert exc_info.value.fatal is True

    @pytest.mark.asyncio
    async def test_missing_access_token_is_fatal(self, settings):
        http = _http(lambda request: httpx.Response(200, json={"token_type": "bearer"}))

        with pytest.raises(AuthenticationError, match="no access_token"):
            await fetch_access_token(settings, http)

    @pytest.mark.asyncio
    async def test_transport_failure_is_fatal(self, settings):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(AuthenticationError) as exc_info:
            await fetch_access_token(settings, _http(handler))

        assert exc_info.value.status_code is None
