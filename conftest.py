"""
Shared fixtures for the namewastaken test suite.

No test touches the network: the `web` fixture swaps the HTTP client for one
backed by httpx.MockTransport, answering for every platform host.
"""

import asyncio

import httpx
import pytest

from namewastaken import cache as cache_module
from namewastaken import checkers
from namewastaken.cache import HandleCache

PLATFORM_HOSTS = (
    "x.com",
    "tiktok.com",
    "www.threads.com",
    "www.youtube.com",
    "www.instagram.com",
    "www.facebook.com",
    "t.me",
    "github.com",
)


def _handle_from(request: httpx.Request) -> str:
    """Last path segment without the '@' prefix, e.g. /@bob -> bob."""
    return request.url.path.strip("/").lstrip("@")


def _available_response(request: httpx.Request) -> httpx.Response:
    host = request.url.host
    handle = _handle_from(request)

    if host == "x.com":
        return httpx.Response(200, text="<html>This account doesn't exist</html>")
    if host == "www.threads.com":
        if request.url.path.startswith("/login"):
            return httpx.Response(200, text="<html>Log in</html>")
        return httpx.Response(302, headers={"Location": "https://www.threads.com/login?next=/"})
    if host in ("www.youtube.com", "github.com"):
        return httpx.Response(404)
    if host == "www.facebook.com":
        return httpx.Response(200, text="<html>This page isn't available</html>")
    if host == "t.me":
        return httpx.Response(200, text=f"<html><title>Telegram: Contact @{handle}</title></html>")
    return httpx.Response(200, text="<html></html>")


def _taken_response(request: httpx.Request) -> httpx.Response:
    host = request.url.host
    handle = _handle_from(request)

    if host == "tiktok.com":
        return httpx.Response(200, text=f'{{"user":{{"desc":"@{handle} makes videos"}}}}')
    if host == "www.instagram.com":
        return httpx.Response(200, text=f'<script>{{"username":"{handle}"}}</script>')
    if host == "t.me":
        return httpx.Response(200, text=f"<html><title>Telegram: View @{handle}</title></html>")
    return httpx.Response(200, text="<html>profile</html>")


class FakeWeb:
    """Per-host canned responses, recording every request that reaches it."""

    def __init__(self):
        self.routes = {}
        self.requests: list[httpx.Request] = []

    def route(self, host: str, handler) -> None:
        """handler(request) -> Response (may be async, may raise)."""
        self.routes[host] = handler

    def available_everywhere(self) -> None:
        for host in PLATFORM_HOSTS:
            self.routes[host] = _available_response

    def taken_everywhere(self) -> None:
        for host in PLATFORM_HOSTS:
            self.routes[host] = _taken_response

    def fail(self, host: str) -> None:
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)
        self.routes[host] = handler

    def calls_to(self, host: str) -> int:
        return sum(1 for r in self.requests if r.url.host == host)

    def _dispatch(self, request: httpx.Request):
        self.requests.append(request)
        handler = self.routes.get(request.url.host)
        if handler is None:
            return httpx.Response(404)
        return handler(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.MockTransport(self._dispatch),
            follow_redirects=True,
        )


@pytest.fixture(autouse=True)
def no_retry_delay(monkeypatch):
    monkeypatch.setattr(checkers, "RETRY_BASE_DELAY", 0.0)


@pytest.fixture(autouse=True)
def default_cache(tmp_path, monkeypatch) -> HandleCache:
    """Keep the process-wide cache out of the user's real cache dir."""
    cache = HandleCache(tmp_path / "default-cache.json")
    monkeypatch.setattr(cache_module, "_default_cache", cache)
    return cache


@pytest.fixture
def cache(tmp_path) -> HandleCache:
    return HandleCache(tmp_path / "cache.json")


@pytest.fixture
def web(monkeypatch) -> FakeWeb:
    """Route all provider traffic to a FakeWeb."""
    fake = FakeWeb()
    monkeypatch.setattr(checkers, "build_client", fake.client)
    return fake


@pytest.fixture
def probe(web):
    """Run a single checker against the FakeWeb: probe(checkers.check_x, "bob")."""
    async def _probe(checker, handle):
        async with web.client() as client:
            return await checker(client, handle)

    def run(checker, handle):
        return asyncio.run(_probe(checker, handle))

    return run
