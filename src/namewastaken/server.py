"""
namewastaken MCP Server

An MCP server for checking whether a username is taken on:
- X/Twitter, TikTok, Threads, YouTube, Instagram, Facebook, Telegram, GitHub

The same FastMCP app also serves a small JSON API when run over HTTP:
- POST /api/check
- GET  /api/health
"""

import json
import time
from dataclasses import dataclass, field

from mcp.server.fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from . import __version__
from .check import check_bulk_with_providers, check_providers, check_single
from .handles import HandleValidationError, normalize_handle
from .providers import (
    Provider,
    UnknownProviderError,
    is_url,
    list_providers,
    parse_profile_url,
    resolve_provider,
    resolve_providers,
)

VERSION = __version__

# Initialize the MCP server
mcp = FastMCP("namewastaken")
mcp._mcp_server.version = VERSION

# =============================================================================
# Constants
# =============================================================================

# HTTP API: requests allowed per client IP per window
API_RATE_LIMIT = 10
API_RATE_WINDOW = 60.0


# =============================================================================
# Helpers
# =============================================================================

def _error(message: str) -> str:
    return json.dumps({"error": message})


def _validate_handles(usernames: list[str]) -> list[str]:
    """
    Normalize every handle, failing on the first bad one.

    Raises:
        HandleValidationError: with the offending input named in the message.
    """
    handles = []
    for raw in usernames:
        try:
            handles.append(normalize_handle(raw))
        except HandleValidationError as e:
            raise HandleValidationError(e.kind, f'Invalid username "{raw}": {e.message}') from e
    return handles


def _select_providers(platforms: list[str] | None) -> list[Provider]:
    if not platforms:
        return list_providers()
    return resolve_providers(platforms)


def _single_result(result) -> dict:
    return {"username": result.username, **result.to_dict(), "url": result.url}


# =============================================================================
# MCP Tools
# =============================================================================

@mcp.tool()
def version() -> str:
    """
    Get the version of the namewastaken MCP server.

    Returns:
        Version string including server name and version number.
    """
    return f"namewastaken MCP Server version {VERSION}"


@mcp.tool()
def list_platforms() -> str:
    """
    List all supported social media platforms and their aliases.

    Returns:
        JSON with a "platforms" list of {name, displayName, aliases}.
    """
    return json.dumps({
        "platforms": [
            {"name": p.name, "displayName": p.display_name, "aliases": list(p.aliases)}
            for p in list_providers()
        ]
    })


@mcp.tool()
async def check_username(
    username: str,
    platforms: list[str] | None = None,
    useCache: bool = True,
) -> str:
    """
    Check if a username is available on social media platforms
    (X/Twitter, TikTok, Threads, YouTube, Instagram, Facebook, Telegram, GitHub).

    Args:
        username: The username/handle to check (a leading @ is ignored)
        platforms: Platforms to check (default: all). Aliases like tt, ig, yt are accepted.
        useCache: Whether to use cached results (default: true)

    Returns:
        JSON with username, per-platform results and a summary of
        available/taken/error counts.
    """
    try:
        providers = _select_providers(platforms)
        handle = normalize_handle(username)
    except (UnknownProviderError, HandleValidationError) as e:
        return _error(str(e))

    result = await check_providers(providers, handle, use_cache=useCache)
    return json.dumps(result.to_dict())


@mcp.tool()
async def check_usernames_in_bulk(
    usernames: list[str],
    platforms: list[str] | None = None,
    useCache: bool = True,
) -> str:
    """
    Check multiple usernames for availability on social media platforms.

    Args:
        usernames: List of usernames to check
        platforms: Platforms to check (default: all)
        useCache: Whether to use cached results (default: true)

    Returns:
        JSON with a "results" list (one entry per username, in input order)
        and a "total" summary across all usernames.
    """
    if not usernames:
        return _error("No usernames provided")

    try:
        providers = _select_providers(platforms)
        handles = _validate_handles(usernames)
    except (UnknownProviderError, HandleValidationError) as e:
        return _error(str(e))

    bulk = await check_bulk_with_providers(handles, providers, use_cache=useCache)

    response = bulk.to_dict()
    response["total"] = {
        "available": sum(r.available_count for r in bulk.results),
        "taken": sum(r.taken_count for r in bulk.results),
        "errors": sum(r.error_count for r in bulk.results),
    }
    return json.dumps(response)


@mcp.tool()
async def check_platform(platform: str, username: str, useCache: bool = True) -> str:
    """
    Check if a username is available on one specific platform.

    Args:
        platform: Platform to check (x, twitter, tiktok, tt, threads, youtube, yt,
                  instagram, ig, facebook, fb, telegram, tg, github, gh)
        username: The username to check
        useCache: Whether to use cached results (default: true)

    Returns:
        JSON with username, provider, displayName, taken, available, error and url.
    """
    provider = resolve_provider(platform)
    if provider is None:
        return _error(str(UnknownProviderError(platform)))

    try:
        handle = normalize_handle(username)
    except HandleValidationError as e:
        return _error(str(e))

    result = await check_single(provider, handle, use_cache=useCache)
    return json.dumps(_single_result(result))


@mcp.tool()
async def check_url(url: str, useCache: bool = True) -> str:
    """
    Check username availability by parsing a social media profile URL.

    Args:
        url: Profile URL (e.g. https://tiktok.com/@username, https://x.com/username)
        useCache: Whether to use cached results (default: true)

    Returns:
        JSON with username, provider, displayName, taken, available, error and url.
    """
    url = url.strip()
    if not is_url(url):
        return _error(
            f"Invalid URL: {url}. Please provide a valid URL starting with http:// or https://"
        )

    parsed = parse_profile_url(url)
    if parsed is None:
        supported = ", ".join(p.display_name for p in list_providers())
        return _error(f"Unsupported URL format. Supported platforms: {supported}")

    provider, username = parsed
    try:
        handle = normalize_handle(username)
    except HandleValidationError as e:
        return _error(str(e))

    result = await check_single(provider, handle, use_cache=useCache)
    return json.dumps(_single_result(result))


# =============================================================================
# HTTP API
# =============================================================================

@dataclass
class ClientRateLimiter:
    """Fixed-window request limiter keyed by client address."""

    limit: int = API_RATE_LIMIT
    window: float = API_RATE_WINDOW

    _windows: dict[str, tuple[int, float]] = field(default_factory=dict, init=False, repr=False)

    def is_limited(self, key: str) -> bool:
        """Count a request from key; True if it exceeds the limit."""
        now = time.monotonic()

        # Drop windows that have already ended
        expired = [k for k, (_, reset_at) in self._windows.items() if now > reset_at]
        for k in expired:
            del self._windows[k]

        count, reset_at = self._windows.get(key, (0, now + self.window))
        if count >= self.limit:
            return True

        self._windows[key] = (count + 1, reset_at)
        return False


api_rate_limiter = ClientRateLimiter()


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client:
        return request.client.host
    return "unknown"


@mcp.custom_route("/api/check", methods=["POST"])
async def api_check(request: Request) -> JSONResponse:
    """
    Check one or more usernames.

    Body: {"username": "name" | ["a", "b"], "usernames": [...], "platforms": [...], "useCache": bool}
    A single username returns one result object; a list returns {"results": [...]}.
    """
    if api_rate_limiter.is_limited(_client_ip(request)):
        return JSONResponse({"error": "Too many requests. Please try again later."}, status_code=429)

    try:
        body = await request.json()
    except ValueError:
        return JSONResponse({"error": "Invalid JSON body"}, status_code=400)

    if not isinstance(body, dict):
        return JSONResponse({"error": "Request body must be a JSON object"}, status_code=400)

    usernames = body.get("usernames", body.get("username"))
    platforms = body.get("platforms")
    use_cache = body.get("useCache", True)

    if isinstance(usernames, str):
        single = True
        usernames = [usernames]
    elif isinstance(usernames, list) and usernames and all(isinstance(u, str) for u in usernames):
        single = False
    else:
        return JSONResponse({"error": "Provide a username or a list of usernames"}, status_code=400)

    if platforms is not None and not (
        isinstance(platforms, list) and all(isinstance(p, str) for p in platforms)
    ):
        return JSONResponse({"error": "platforms must be a list of platform names"}, status_code=400)

    if not isinstance(use_cache, bool):
        return JSONResponse({"error": "useCache must be a boolean"}, status_code=400)

    try:
        providers = _select_providers(platforms)
        handles = _validate_handles(usernames)
    except (UnknownProviderError, HandleValidationError) as e:
        return JSONResponse({"error": str(e)}, status_code=400)

    if single:
        result = await check_providers(providers, handles[0], use_cache=use_cache)
        return JSONResponse(result.to_dict())

    bulk = await check_bulk_with_providers(handles, providers, use_cache=use_cache)
    return JSONResponse(bulk.to_dict())


@mcp.custom_route("/api/health", methods=["GET"])
async def api_health(request: Request) -> JSONResponse:
    return JSONResponse({"ok": True})


# =============================================================================
# Entry points
# =============================================================================

def run_stdio() -> None:
    """Serve MCP over stdio."""
    mcp.run()


def run_http(host: str, port: int) -> None:
    """Serve MCP (at /mcp) and the JSON API over HTTP."""
    mcp.settings.host = host
    mcp.settings.port = port
    mcp.run(transport="streamable-http")
