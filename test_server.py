"""
Tests for the MCP server: the tools, the MCP protocol surface and the JSON API.
"""

import asyncio
import json

import anyio
import httpx
import pytest
from mcp.shared.memory import create_connected_server_and_client_session
from starlette.applications import Starlette
from starlette.routing import Route
from starlette.testclient import TestClient

from namewastaken import server


def run_sync(coro):
    return asyncio.run(coro)


# =============================================================================
# Tools
# =============================================================================

def test_version_tool():
    assert server.version() == f"namewastaken MCP Server version {server.VERSION}"


def test_list_platforms_tool():
    data = json.loads(server.list_platforms())
    names = [p["name"] for p in data["platforms"]]
    assert names == ["x", "tiktok", "threads", "youtube", "instagram", "facebook", "telegram", "github"]
    assert data["platforms"][0] == {"name": "x", "displayName": "X/Twitter", "aliases": ["x", "twitter"]}


def test_check_username_tool(web):
    web.taken_everywhere()

    data = json.loads(run_sync(server.check_username("@MrBeast")))

    assert data["username"] == "mrbeast"
    assert len(data["results"]) == 8
    assert data["summary"] == {"available": 0, "taken": 8, "errors": 0}


def test_check_username_with_platforms(web):
    web.available_everywhere()

    data = json.loads(run_sync(server.check_username("nobody", platforms=["yt", "ig"])))

    assert [r["provider"] for r in data["results"]] == ["youtube", "instagram"]
    assert all(r["available"] for r in data["results"])


def test_check_username_invalid(web):
    data = json.loads(run_sync(server.check_username("user@name")))
    assert data == {"error": "Username can only contain letters, numbers, dots and underscores"}
    assert web.requests == []


def test_check_username_unknown_platform(web):
    data = json.loads(run_sync(server.check_username("nobody", platforms=["myspace"])))
    assert data["error"].startswith("Unknown platform: myspace")


def test_bulk_tool(web):
    web.taken_everywhere()

    data = json.loads(run_sync(server.check_usernames_in_bulk(["a", "b"], platforms=["gh"])))

    assert [r["username"] for r in data["results"]] == ["a", "b"]
    assert data["total"] == {"available": 0, "taken": 2, "errors": 0}


def test_bulk_tool_errors(web):
    assert json.loads(run_sync(server.check_usernames_in_bulk([]))) == {"error": "No usernames provided"}

    data = json.loads(run_sync(server.check_usernames_in_bulk(["ok", "not ok"])))
    assert data["error"].startswith('Invalid username "not ok"')
    assert web.requests == []


def test_check_platform_tool(web):
    web.taken_everywhere()

    data = json.loads(run_sync(server.check_platform("tt", "TestUser")))

    assert data == {
        "username": "testuser",
        "provider": "tiktok",
        "displayName": "TikTok",
        "taken": True,
        "available": False,
        "error": None,
        "url": "https://tiktok.com/@testuser",
    }


def test_check_platform_unknown(web):
    data = json.loads(run_sync(server.check_platform("myspace", "testuser")))
    assert data["error"].startswith("Unknown platform: myspace")


def test_check_url_tool(web):
    web.available_everywhere()

    data = json.loads(run_sync(server.check_url("https://www.youtube.com/@Nobody")))

    assert data["provider"] == "youtube"
    assert data["username"] == "nobody"
    assert data["available"] is True


def test_check_url_rejects_bad_input(web):
    data = json.loads(run_sync(server.check_url("youtube.com/@nobody")))
    assert data["error"].startswith("Invalid URL")

    data = json.loads(run_sync(server.check_url("https://example.com/nobody")))
    assert data["error"].startswith("Unsupported URL format")

    assert web.requests == []


def test_tool_respects_use_cache_flag(web, default_cache):
    web.taken_everywhere()

    run_sync(server.check_platform("gh", "octocat", useCache=False))
    assert default_cache.get("github", "octocat") is None

    run_sync(server.check_platform("gh", "octocat"))
    run_sync(server.check_platform("gh", "octocat"))
    assert web.calls_to("github.com") == 2


# =============================================================================
# MCP protocol
# =============================================================================

def test_tools_over_mcp_session(web):
    web.taken_everywhere()

    async def session():
        async with create_connected_server_and_client_session(server.mcp._mcp_server) as client:
            tools = await client.list_tools()
            listed = await client.call_tool("list_platforms", {})
            checked = await client.call_tool("check_platform", {"platform": "gh", "username": "octocat"})
            return tools, listed, checked

    tools, listed, checked = anyio.run(session)

    assert {t.name for t in tools.tools} == {
        "version",
        "list_platforms",
        "check_username",
        "check_usernames_in_bulk",
        "check_platform",
        "check_url",
    }
    assert len(json.loads(listed.content[0].text)["platforms"]) == 8
    assert json.loads(checked.content[0].text)["taken"] is True


# =============================================================================
# JSON API
# =============================================================================

@pytest.fixture
def api(monkeypatch):
    monkeypatch.setattr(server, "api_rate_limiter", server.ClientRateLimiter())
    app = Starlette(routes=[
        Route("/api/check", server.api_check, methods=["POST"]),
        Route("/api/health", server.api_health, methods=["GET"]),
    ])
    with TestClient(app) as client:
        yield client


def test_api_health(api):
    response = api.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_api_single_username(api, web):
    web.taken_everywhere()

    response = api.post("/api/check", json={"username": "MrBeast", "platforms": ["tt", "gh"]})

    assert response.status_code == 200
    data = response.json()
    assert data["username"] == "mrbeast"
    assert [r["provider"] for r in data["results"]] == ["tiktok", "github"]
    assert data["summary"]["taken"] == 2


def test_api_username_list(api, web):
    web.available_everywhere()

    response = api.post("/api/check", json={"usernames": ["a", "b"], "platforms": ["gh"]})

    assert response.status_code == 200
    data = response.json()
    assert [r["username"] for r in data["results"]] == ["a", "b"]


def test_api_username_field_accepts_list(api, web):
    web.available_everywhere()
    response = api.post("/api/check", json={"username": ["a"], "platforms": ["gh"]})
    assert list(response.json()) == ["results"]


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"username": ""},
        {"username": "user@name"},
        {"username": 42},
        {"usernames": []},
        {"usernames": ["ok", 3]},
        {"username": "ok", "platforms": "tt"},
        {"username": "ok", "platforms": ["myspace"]},
        {"username": "ok", "useCache": "yes"},
        ["ok"],
    ],
)
def test_api_bad_requests(api, web, body):
    response = api.post("/api/check", json=body)

    assert response.status_code == 400
    assert "error" in response.json()
    assert web.requests == []


def test_api_invalid_json(api):
    response = api.post("/api/check", content=b"{nope", headers={"content-type": "application/json"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid JSON body"}


def test_api_rate_limit(api, web, monkeypatch):
    web.available_everywhere()
    monkeypatch.setattr(server, "api_rate_limiter", server.ClientRateLimiter(limit=2))

    body = {"username": "nobody", "platforms": ["gh"]}
    assert api.post("/api/check", json=body).status_code == 200
    assert api.post("/api/check", json=body).status_code == 200

    response = api.post("/api/check", json=body)
    assert response.status_code == 429
    assert "Too many requests" in response.json()["error"]

    # Limits are per client address
    other = api.post("/api/check", json=body, headers={"x-forwarded-for": "203.0.113.9"})
    assert other.status_code == 200


def test_rate_limiter_window_resets(monkeypatch):
    now = [1000.0]
    monkeypatch.setattr(server.time, "monotonic", lambda: now[0])

    limiter = server.ClientRateLimiter(limit=1, window=60.0)
    assert limiter.is_limited("a") is False
    assert limiter.is_limited("a") is True
    assert limiter.is_limited("b") is False

    now[0] += 61
    assert limiter.is_limited("a") is False


def test_client_ip_prefers_forwarded_headers():
    class FakeRequest:
        def __init__(self, headers, client=None):
            self.headers = headers
            self.client = client

    assert server._client_ip(FakeRequest({"x-forwarded-for": "1.2.3.4, 10.0.0.1"})) == "1.2.3.4"
    assert server._client_ip(FakeRequest({"x-real-ip": " 5.6.7.8 "})) == "5.6.7.8"
    assert server._client_ip(FakeRequest({})) == "unknown"
