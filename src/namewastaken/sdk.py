"""
Library interface for namewastaken.

    from namewastaken import sdk

    await sdk.available("mrbeast")                 # False if taken anywhere
    await sdk.tiktok.taken("mrbeast")              # True
    result = await sdk.check("mrbeast", platforms=["tt", "ig"])
    result["tiktok"]["taken"]                      # True
    results = await sdk.check_many(["mrbeast", "pewdiepie"])
    results["mrbeast"]["summary"]                  # {"available": 0, ...}

Handles are validated and normalized before any request is made; invalid
input raises handles.HandleValidationError (a ValueError).
"""

from .check import CheckAllResult, CheckResult, check_bulk_with_providers, check_providers, check_single
from .handles import normalize_handle
from .providers import Provider, get_provider, list_providers, parse_profile_url, resolve_provider


def _platform_result(result: CheckResult) -> dict:
    return {
        "taken": result.taken and result.error is None,
        "available": result.available,
        "url": result.url,
        "error": result.error,
    }


def _full_result(check_result: CheckAllResult) -> dict:
    data = {"username": check_result.username}
    for r in check_result.results:
        data[r.provider.name] = _platform_result(r)
    data["summary"] = check_result.summary
    return data


def _resolve_platforms(platforms: list[str] | None) -> list[Provider]:
    """Map platform names/aliases to providers; unknown names are skipped."""
    if not platforms:
        return list_providers()

    resolved = [p for p in (resolve_provider(name) for name in platforms) if p is not None]
    if not resolved:
        available = ", ".join(p.name for p in list_providers())
        raise ValueError(f"No valid platforms found. Available: {available}")

    # Keep registry order, drop duplicates
    names = {p.name for p in resolved}
    return [p for p in list_providers() if p.name in names]


async def check(username: str, platforms: list[str] | None = None, use_cache: bool = True) -> dict:
    """
    Check one username on all (or the selected) platforms.

    Returns:
        {"username": ..., "<platform>": {"taken", "available", "url", "error"}, ...,
         "summary": {"available", "taken", "errors"}}
    """
    providers = _resolve_platforms(platforms)
    handle = normalize_handle(username)
    result = await check_providers(providers, handle, use_cache=use_cache)
    return _full_result(result)


async def check_many(
    usernames: list[str],
    platforms: list[str] | None = None,
    use_cache: bool = True,
) -> dict[str, dict]:
    """Check several usernames; results are keyed by normalized username in input order."""
    providers = _resolve_platforms(platforms)
    handles = [normalize_handle(u) for u in usernames]
    bulk = await check_bulk_with_providers(handles, providers, use_cache=use_cache)
    return {r.username: _full_result(r) for r in bulk.results}


async def available(username: str, platforms: list[str] | None = None, use_cache: bool = True) -> bool:
    """True if the username is confirmed available on every selected platform."""
    providers = _resolve_platforms(platforms)
    result = await check_providers(providers, normalize_handle(username), use_cache=use_cache)
    return result.available_count == len(providers)


async def taken(username: str, platforms: list[str] | None = None, use_cache: bool = True) -> bool:
    """True if the username is taken on at least one selected platform."""
    providers = _resolve_platforms(platforms)
    result = await check_providers(providers, normalize_handle(username), use_cache=use_cache)
    return result.taken_count > 0


class PlatformChecker:
    """Checks scoped to a single platform."""

    def __init__(self, provider: Provider):
        self.provider = provider

    def __repr__(self) -> str:
        return f"PlatformChecker({self.provider.name!r})"

    async def check(self, username: str, use_cache: bool = True) -> dict:
        result = await check_single(self.provider, normalize_handle(username), use_cache=use_cache)
        return _platform_result(result)

    async def available(self, username: str, use_cache: bool = True) -> bool:
        return (await self.check(username, use_cache=use_cache))["available"]

    async def taken(self, username: str, use_cache: bool = True) -> bool:
        return (await self.check(username, use_cache=use_cache))["taken"]

    async def check_many(self, usernames: list[str], use_cache: bool = True) -> dict[str, dict]:
        handles = [normalize_handle(u) for u in usernames]
        bulk = await check_bulk_with_providers(handles, [self.provider], use_cache=use_cache)
        return {r.username: _platform_result(r.results[0]) for r in bulk.results}


def parse_url(url: str) -> dict | None:
    """Parse a profile URL into {"platform", "username"}, or None if unsupported."""
    parsed = parse_profile_url(url)
    if parsed is None:
        return None
    provider, username = parsed
    return {"platform": provider.name, "username": username}


platforms = [
    {"name": p.name, "displayName": p.display_name, "aliases": list(p.aliases)}
    for p in list_providers()
]

x = PlatformChecker(get_provider("x"))
tiktok = PlatformChecker(get_provider("tiktok"))
threads = PlatformChecker(get_provider("threads"))
youtube = PlatformChecker(get_provider("youtube"))
instagram = PlatformChecker(get_provider("instagram"))
facebook = PlatformChecker(get_provider("facebook"))
telegram = PlatformChecker(get_provider("telegram"))
github = PlatformChecker(get_provider("github"))
