"""
Shared fixtures.
A fake API + object storage served through httpx.MockTransport, recording
every request it receives.
"""

import inspect
import json
from typing import Callable, Dict, List, Tuple, Union

import httpx
import pytest
import pytest_asyncio

from wt_sdk.client import Client

BASE_URL = "https://api.test/v2/"
STORAGE_URL = "https://s3.test"
TEST_API_KEY = "abc"
TEST_TOKEN = "jwt-token"

Route = Union[httpx.Response, Callable]


def json_response(data, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=data)


def error_response(message: str, status_code: int) -> httpx.Response:
    return httpx.Response(status_code, json={"success": False, "message": message})


def no_such_key() -> httpx.Response:
    return httpx.Response(
        404,
        text=(
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            "<Error><Code>NoSuchKey</Code>"
            "<Message>The resource you requested does not exist</Message></Error>"
        ),
        headers={"Content-Type": "application/xml"},
    )


class FakeServer:
    """Routes requests by (method, URL without query) and records them."""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Route] = {}
        self.requests: List[httpx.Request] = []

    def on(self, method: str, url: str, route: Route) -> None:
        if not url.startswith("https://"):
            url = BASE_URL + url
        self.routes[(method, url)] = route

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url.copy_with(query=None))
        route = self.routes.get((request.method, url))
        if route is None:
            return error_response(f"no route for {request.method} {url}", 404)
        if isinstance(route, httpx.Response):
            return route
        result = route(request)
        if inspect.isawaitable(result):
            result = await result
        return result

    def calls(self, method: str, url: str) -> List[httpx.Request]:
        if not url.startswith("https://"):
            url = BASE_URL + url
        return [r for r in self.requests if r.method == method and str(r.url) == url]

    def paths(self) -> List[str]:
        return [f"{r.method} {r.url}" for r in self.requests]


def body_of(request: httpx.Request):
    return json.loads(request.content) if request.content else None


def storage_sink(server: FakeServer, received: Dict[str, bytes], key: str) -> str:
    """Register a storage URL that keeps the uploaded bytes under `key`."""
    url = f"{STORAGE_URL}/{key}"

    def handler(request: httpx.Request) -> httpx.Response:
        received[key] = request.content
        return httpx.Response(200)

    server.on("PUT", url, handler)
    return url


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest_asyncio.fixture
async def client(server):
    transport = httpx.MockTransport(server.handle)
    http = httpx.AsyncClient(transport=transport)
    storage = httpx.AsyncClient(transport=transport)

    wt = Client(TEST_API_KEY, base_url=BASE_URL, http_client=http, storage_client=storage)
    wt.api.token = TEST_TOKEN

    yield wt

    await wt.aclose()
    await http.aclose()
    await storage.aclose()
