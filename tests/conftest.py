from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from ballot_snapshot.config import Settings

Handler = Callable[[httpx.Request], httpx.Response]


class UpstreamStub:
    """Routes mocked requests by host and path and records every call."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def add(self, host: str, path: str, handler: Handler | httpx.Response | Any) -> None:
        if isinstance(handler, httpx.Response):
            response = handler
            self.routes[(host, path)] = lambda _request: response
        elif callable(handler):
            self.routes[(host, path)] = handler
        else:
            payload = handler
            self.routes[(host, path)] = lambda _request: httpx.Response(200, json=payload)

    def openstates(self, path: str, handler: Handler | httpx.Response | Any) -> None:
        self.add("v3.openstates.org", path, handler)

    def zip(self, code: str, handler: Handler | httpx.Response | Any) -> None:
        self.add("api.zippopotam.us", f"/us/{code}", handler)

    def calls(self, path: str) -> list[httpx.Request]:
        return [request for request in self.requests if request.url.path == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.url.host, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        return handler(request)


@pytest.fixture()
def upstream() -> UpstreamStub:
    return UpstreamStub()


@pytest.fixture()
def http_client(upstream) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream))


@pytest.fixture()
def settings() -> Settings:
    return Settings(_env_file=None, openstates_api_key="test-key", use_server_proxy=False)


@pytest.fixture()
def miami_payload() -> dict[str, Any]:
    return {
        "post code": "33101",
        "country": "United States",
        "country abbreviation": "US",
        "places": [
            {
                "place name": "Miami",
                "longitude": "-80.1937",
                "state": "Florida",
                "state abbreviation": "FL",
                "latitude": "25.7791",
            }
        ],
    }
