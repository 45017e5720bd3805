"""
Check Orchestration

Runs provider checks concurrently for one or many handles and folds the
outcomes into result objects. Nothing here raises for a failed check: a
provider that gives up becomes a CheckResult carrying an error, and its
siblings are unaffected.

Concurrency is unbounded. The provider list is small and fixed and every
check is already time-boxed and retried on its own, so all checks for a
call are launched at once. Results always come back in the order the
providers (and handles) were given, regardless of completion order.
"""

import asyncio
import logging
from dataclasses import dataclass, field

import httpx

from . import checkers
from .cache import HandleCache, get_default_cache
from .checkers import ProviderCheckError
from .providers import Provider, list_providers

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckResult:
    """Outcome of checking one handle on one provider."""

    provider: Provider
    username: str
    taken: bool
    error: str | None = None
    cached: bool = False

    @property
    def available(self) -> bool:
        """True only if the check succeeded and the handle is free."""
        return not self.taken and self.error is None

    @property
    def url(self) -> str:
        return self.provider.profile_url(self.username)

    def to_dict(self) -> dict:
        return {
            "provider": self.provider.name,
            "displayName": self.provider.display_name,
            "taken": self.taken and self.error is None,
            "available": self.available,
            "error": self.error,
        }


@dataclass
class CheckAllResult:
    """Results for one handle across a set of providers, in provider order."""

    username: str
    results: list[CheckResult] = field(default_factory=list)

    @property
    def available_count(self) -> int:
        return sum(1 for r in self.results if r.available)

    @property
    def taken_count(self) -> int:
        return sum(1 for r in self.results if r.taken and r.error is None)

    @property
    def error_count(self) -> int:
        return sum(1 for r in self.results if r.error is not None)

    @property
    def summary(self) -> dict:
        return {
            "available": self.available_count,
            "taken": self.taken_count,
            "errors": self.error_count,
        }

    def to_dict(self) -> dict:
        return {
            "username": self.username,
            "results": [r.to_dict() for r in self.results],
            "summary": self.summary,
        }


@dataclass
class BulkCheckResult:
    """One CheckAllResult per handle, in input order."""

    results: list[CheckAllResult] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"results": [r.to_dict() for r in self.results]}


async def _check_single(
    provider: Provider,
    username: str,
    use_cache: bool,
    cache: HandleCache,
    client: httpx.AsyncClient,
) -> CheckResult:
    if use_cache:
        cached = cache.get(provider.name, username)
        if cached is not None:
            logger.debug("Cache hit for %s on %s", username, provider.name)
            return CheckResult(provider=provider, username=username, taken=cached, cached=True)

    try:
        taken = await provider.check(username, client)
    except ProviderCheckError as e:
        logger.debug("Check failed for %s on %s: %s", username, provider.name, e.reason)
        return CheckResult(provider=provider, username=username, taken=False, error=e.reason)

    if use_cache:
        cache.set(provider.name, username, taken)

    return CheckResult(provider=provider, username=username, taken=taken)


async def _check_providers(
    providers: list[Provider],
    username: str,
    use_cache: bool,
    cache: HandleCache,
    client: httpx.AsyncClient,
) -> CheckAllResult:
    tasks = [_check_single(p, username, use_cache, cache, client) for p in providers]
    results = await asyncio.gather(*tasks)
    return CheckAllResult(username=username, results=list(results))


async def check_single(
    provider: Provider,
    username: str,
    *,
    use_cache: bool = True,
    cache: HandleCache | None = None,
    client: httpx.AsyncClient | None = None,
) -> CheckResult:
    """
    Check one handle on one provider.

    A cache hit short-circuits the network entirely. Only successful checks
    are written back.
    """
    cache = cache or get_default_cache()
    if client is None:
        async with checkers.build_client() as own_client:
            return await _check_single(provider, username, use_cache, cache, own_client)
    return await _check_single(provider, username, use_cache, cache, client)


async def check_providers(
    providers: list[Provider],
    username: str,
    *,
    use_cache: bool = True,
    cache: HandleCache | None = None,
    client: httpx.AsyncClient | None = None,
) -> CheckAllResult:
    """Check one handle on the given providers concurrently."""
    cache = cache or get_default_cache()
    if client is None:
        async with checkers.build_client() as own_client:
            return await _check_providers(providers, username, use_cache, cache, own_client)
    return await _check_providers(providers, username, use_cache, cache, client)


async def check_all(
    username: str,
    *,
    use_cache: bool = True,
    cache: HandleCache | None = None,
    client: httpx.AsyncClient | None = None,
) -> CheckAllResult:
    """Check one handle on every registered provider concurrently."""
    return await check_providers(
        list_providers(), username, use_cache=use_cache, cache=cache, client=client
    )


async def check_bulk_with_providers(
    usernames: list[str],
    providers: list[Provider],
    *,
    use_cache: bool = True,
    cache: HandleCache | None = None,
    client: httpx.AsyncClient | None = None,
) -> BulkCheckResult:
    """
    Check many handles on the given providers.

    Every (handle, provider) pair runs concurrently. Duplicate handles are
    checked independently.
    """
    cache = cache or get_default_cache()

    async def run(http: httpx.AsyncClient) -> BulkCheckResult:
        tasks = [_check_providers(providers, u, use_cache, cache, http) for u in usernames]
        results = await asyncio.gather(*tasks)
        return BulkCheckResult(results=list(results))

    if client is None:
        async with checkers.build_client() as own_client:
            return await run(own_client)
    return await run(client)


async def check_bulk(
    usernames: list[str],
    *,
    use_cache: bool = True,
    cache: HandleCache | None = None,
    client: httpx.AsyncClient | None = None,
) -> BulkCheckResult:
    """Check many handles on every registered provider."""
    return await check_bulk_with_providers(
        usernames, list_providers(), use_cache=use_cache, cache=cache, client=client
    )
