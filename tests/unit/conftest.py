"""Shared pytest fixtures for provisioner unit tests."""

import itertools
import json
from collections.abc import Callable
from unittest.mock import AsyncMock

import httpx
import pytest

from kinde_provisioner.compatibility import IdAddressedAdapter, KeyAddressedAdapter
from kinde_provisioner.errors import ApiError
from kinde_provisioner.services.context import ReconciliationContext
from kinde_provisioner.settings import Settings

API_PREFIX = "/api/v1"

# Wrapper key Kinde uses in create responses, per collection path
CREATE_WRAPPERS = {
    "/applications": "application",
    "/apis": "api",
    "/roles": "role",
    "/permissions": "permission",
}


class FakeKindeBackend:
    """
    In-memory stand-in for the Kinde token endpoint and Management API.

    Every request is recorded. Routes can be overridden with ``on``; any
    other call succeeds, create calls answering with a fresh wrapped id.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self._ids = itertools.count(1)

    def on(self, method: str, path: str, status: int = 200, json_body=None) -> None:
        """Answer ``method path`` (path relative to /api/v1) with a fixed response."""

        def respond(request: httpx.Request) -> httpx.Response:
            if json_body is None:
                return httpx.Response(status)
            return httpx.Response(status, json=json_body)

        self.routes[(method, path)] = respond

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        relative = path.removeprefix(API_PREFIX)

        route = self.routes.get((request.method, relative))
        if route is not None:
            return route(request)

        if path == "/oauth2/token":
            return httpx.Response(200, json={"access_token": "test-token", "expires_in": 86400})

        if request.method == "POST" and relative in CREATE_WRAPPERS:
            wrapper = CREATE_WRAPPERS[relative]
            return httpx.Response(
                201, json={"code": "OK", wrapper: {"id": f"{wrapper}_{next(self._ids)}"}}
            )
        return httpx.Response(200, json={"code": "OK"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self) -> list[tuple[str, str]]:
        """(method, path relative to /api/v1) for every Management API request."""
        return [
            (request.method, request.url.path.removeprefix(API_PREFIX))
            for request in self.requests
            if request.url.path.startswith(API_PREFIX)
        ]

    def body_of(self, method: str, path: str) -> dict:
        for request in self.requests:
            if request.method == method and request.url.path == f"{API_PREFIX}{path}":
                return json.loads(request.content)
        raise AssertionError(f"no {method} {path} request recorded")


@pytest.fixture
def backend() -> FakeKindeBackend:
    return FakeKindeBackend()


@pytest.fixture
def http_client(backend: FakeKindeBackend):
    return httpx.AsyncClient(transport=backend.transport)


@pytest.fixture
def settings() -> Settings:
    """Settings with every credential present, ignoring any local .env file."""
    return Settings(
        _env_file=None,
        KINDE_DOMAIN="example.kinde.com",
        KINDE_CLIENT_ID="client-id",
        KINDE_CLIENT_SECRET="client-secret",
        KINDE_AUDIENCE="https://example.kinde.com/api",
        KINDE_SCOPES="create:applications create:roles",
    )


def api_error(method: str, path: str, status: int = 500, body: str = "boom") -> ApiError:
    return ApiError(method, path, status=status, body=body)


class ScriptedClient:
    """
    Management API client double driven by a routing function.

    ``responses`` maps (method, path) to a return value, an exception
    instance, or a callable taking the request body and returning either;
    unknown calls return ``{}``. Calls are recorded in order.
    """

    def __init__(self, responses: dict | None = None) -> None:
        self.responses = responses or {}
        self.calls: list[tuple[str, str, dict | None]] = []
        self.call = AsyncMock(side_effect=self._respond)

    def _respond(self, method: str, path: str, body: dict | None = None):
        self.calls.append((method, path, body))
        result = self.responses.get((method, path), {})
        if callable(result):
            result = result(body)
        if isinstance(result, Exception):
            raise result
        return result

    def paths(self) -> list[tuple[str, str]]:
        return [(method, path) for method, path, _ in self.calls]


@pytest.fixture
def scripted_client() -> ScriptedClient:
    return ScriptedClient()


@pytest.fixture
def key_context(scripted_client: ScriptedClient) -> ReconciliationContext:
    """Context for the key-addressed API generation."""
    return ReconciliationContext(
        token="test-token", client=scripted_client, adapter=KeyAddressedAdapter()
    )


@pytest.fixture
def id_context(scripted_client: ScriptedClient) -> ReconciliationContext:
    """Context for the id-addressed API generation."""
    return ReconciliationContext(
        token="test-token", client=scripted_client, adapter=IdAddressedAdapter()
    )
