from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from entity_mcp.forwarder import RequestForwarder
from entity_mcp.servers.entity_enum import build_server

ENDPOINT = "https://api.example.com"


class FakeBackend:
    """httpx.MockTransport handler that records requests and replays canned responses."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[str, tuple[int, dict[str, Any]]] = {}

    def respond(self, path: str, status: int = 200, **kwargs: Any) -> None:
        """kwargs are passed to httpx.Response (json=..., text=..., content=...)."""
        self._routes[path] = (status, kwargs)

    def respond_data(self, path: str, data: Any) -> None:
        self.respond(path, 200, json={"data": data})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, kwargs = self._routes.get(request.url.path, (200, {"json": {"data": None}}))
        return httpx.Response(status, **kwargs)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


@pytest.fixture(autouse=True)
def backend_env(monkeypatch):
    monkeypatch.setenv("ENDPOINT", ENDPOINT)
    monkeypatch.delenv("API_KEY", raising=False)
    return monkeypatch


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
async def client(backend):
    async with httpx.AsyncClient(transport=httpx.MockTransport(backend)) as client:
        yield client


@pytest.fixture
def forwarder(client) -> RequestForwarder:
    return RequestForwarder(client=client)


@pytest.fixture
def server(forwarder):
    return build_server(forwarder)
