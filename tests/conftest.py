"""Shared test fixtures.

The backend is faked with ``httpx.MockTransport``: each test registers a
response per path and inspects the recorded requests afterwards.
"""

import asyncio
import json
from collections.abc import Callable, Iterator
from datetime import datetime

import httpx
import pytest

from chimpvine.config import Settings
from chimpvine.session import SessionClient

FIXED_NOW = datetime(2026, 1, 1, 12, 30, 45)

Route = Callable[[httpx.Request], httpx.Response]


class FakeBackend:
    """Records requests and answers them from a path-keyed route table."""

    def __init__(self) -> None:
        self.routes: dict[str, Route] = {}
        self.requests: list[httpx.Request] = []

    def route(self, path: str, status: int = 200, body: object = None) -> None:
        """Answer ``path`` with a JSON body (a str body is sent verbatim)."""
        text = body if isinstance(body, str) else json.dumps(body)
        self.routes[path] = lambda _request: httpx.Response(status, text=text)

    def respond(self, path: str, route: Route) -> None:
        """Answer ``path`` with whatever ``route`` builds for the request."""
        self.routes[path] = route

    def fail(self, path: str, error: Exception) -> None:
        """Raise ``error`` when ``path`` is requested."""

        def raise_error(_request: httpx.Request) -> httpx.Response:
            raise error

        self.routes[path] = raise_error

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, text="no route")
        return route(request)

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def json_body(self, path: str) -> dict[str, object]:
        """Decoded body of the last request to ``path``."""
        return json.loads(self.requests_to(path)[-1].content)


@pytest.fixture
def backend() -> FakeBackend:
    """Empty fake backend."""
    return FakeBackend()


@pytest.fixture
def http_client(backend: FakeBackend) -> Iterator[httpx.AsyncClient]:
    """HTTP client routed to the fake backend, closed after the test."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(backend.handler))
    yield client
    loop = asyncio.new_event_loop()
    try:
        loop.run_until_complete(client.aclose())
    finally:
        loop.close()


@pytest.fixture
def config() -> Settings:
    """Settings for game 5 served from http://test."""
    return Settings(game_id=5, origin="http://test")


@pytest.fixture
def session(config: Settings, http_client: httpx.AsyncClient) -> SessionClient:
    """Session against the fake backend with a fixed clock."""
    return SessionClient(config, http_client=http_client, clock=lambda: FIXED_NOW)
