"""
Per-Platform Availability Checkers

None of the supported platforms offers an availability API, so each checker
probes the public profile page and reads one platform-specific signal from
the response: an embedded JSON fragment, a page title, the final redirect
target or the bare status code.

Every checker performs a single request and is run through run_checker(),
which bounds each attempt with a timeout and retries failures with
exponential backoff before giving up with a ProviderCheckError.
"""

import asyncio
import logging
import re
from typing import Awaitable, Callable, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")

Checker = Callable[[httpx.AsyncClient, str], Awaitable[bool]]

# Per-attempt timeouts (seconds)
DEFAULT_TIMEOUT = 5.0
THREADS_TIMEOUT = 10.0

# 1 initial attempt + 3 retries, sleeping 0.1s, 0.2s, 0.4s in between
MAX_RETRIES = 3
RETRY_BASE_DELAY = 0.1

DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
CURL_USER_AGENT = "curl/7.79.1"
# Threads serves its SPA shell (which never redirects) to browser agents
THREADS_USER_AGENT = "namewastaken/1.0"

TITLE_PATTERN = re.compile(r"<title>([^<]*)</title>")

FACEBOOK_NOT_FOUND_MARKERS = (
    "Page Not Found",
    "This page isn't available",
    "This content isn't available",
)


class ProviderCheckError(Exception):
    """A provider check failed after all retries were exhausted."""

    def __init__(self, provider: str, reason: str):
        super().__init__(f"{provider}: {reason}")
        self.provider = provider
        self.reason = reason


def build_client() -> httpx.AsyncClient:
    """
    Create the HTTP client shared by all checks of one request.

    The client has no timeout of its own. run_checker() bounds every attempt
    with the provider's timeout (10s for Threads, 5s elsewhere).
    """
    return httpx.AsyncClient(
        timeout=None,
        follow_redirects=True,
        limits=httpx.Limits(
            max_connections=100,
            max_keepalive_connections=20,
        ),
    )


async def with_retry(
    attempt: Callable[[], Awaitable[T]],
    max_retries: int | None = None,
    base_delay: float | None = None,
    label: str = "request",
) -> T:
    """
    Run attempt(), retrying on any exception with exponential backoff.

    The delay before retry n (starting at 0) is base_delay * 2**n. Once
    max_retries retries have failed, the last exception is re-raised.
    """
    if max_retries is None:
        max_retries = MAX_RETRIES
    if base_delay is None:
        base_delay = RETRY_BASE_DELAY

    retry = 0
    while True:
        try:
            return await attempt()
        except Exception as e:
            if retry >= max_retries:
                raise
            delay = base_delay * (2 ** retry)
            logger.debug(
                "%s failed (attempt %d/%d): %s; retrying in %.2fs",
                label, retry + 1, max_retries + 1, _describe_error(e), delay,
            )
            retry += 1
            await asyncio.sleep(delay)


def _describe_error(error: BaseException) -> str:
    """Short human-readable reason for a failed attempt."""
    if isinstance(error, (asyncio.TimeoutError, httpx.TimeoutException)):
        return "Request timed out"
    message = str(error).strip()
    return message[:100] if message else type(error).__name__


async def run_checker(
    provider: str,
    checker: Checker,
    client: httpx.AsyncClient,
    handle: str,
    timeout: float = DEFAULT_TIMEOUT,
) -> bool:
    """
    Run one platform checker under the shared timeout and retry policy.

    Returns:
        True if the handle is taken, False if it is available.

    Raises:
        ProviderCheckError: if every attempt failed.
    """
    async def attempt() -> bool:
        return await asyncio.wait_for(checker(client, handle), timeout)

    try:
        return await with_retry(attempt, label=f"{provider} check for {handle!r}")
    except Exception as e:
        reason = _describe_error(e)
        logger.debug("%s check for %r gave up: %s", provider, handle, reason)
        raise ProviderCheckError(provider, reason) from e


# =============================================================================
# Heuristics
# =============================================================================

async def check_tiktok(client: httpx.AsyncClient, handle: str) -> bool:
    response = await client.get(f"https://tiktok.com/@{handle}")
    return f'"desc":"@{handle}' in response.text


async def check_instagram(client: httpx.AsyncClient, handle: str) -> bool:
    response = await client.get(f"https://www.instagram.com/{handle}")
    return f'{{"username":"{handle}"}}' in response.text


async def check_x(client: httpx.AsyncClient, handle: str) -> bool:
    response = await client.get(
        f"https://x.com/{handle}",
        headers={"User-Agent": DESKTOP_USER_AGENT},
    )
    return "This account doesn't exist" not in response.text


async def check_threads(client: httpx.AsyncClient, handle: str) -> bool:
    """Free handles end up on the login page once redirects are followed."""
    response = await client.get(
        f"https://www.threads.com/@{handle}",
        headers={"User-Agent": THREADS_USER_AGENT},
        follow_redirects=True,
    )
    return "/login" not in str(response.url).lower()


async def check_youtube(client: httpx.AsyncClient, handle: str) -> bool:
    response = await client.get(f"https://www.youtube.com/@{handle}")
    return response.status_code != 404


async def check_facebook(client: httpx.AsyncClient, handle: str) -> bool:
    response = await client.get(
        f"https://www.facebook.com/{handle}",
        headers={"User-Agent": DESKTOP_USER_AGENT},
    )
    html = response.text
    return not any(marker in html for marker in FACEBOOK_NOT_FOUND_MARKERS)


async def check_telegram(client: httpx.AsyncClient, handle: str) -> bool:
    """
    Check a Telegram username via the t.me preview page.

    Free usernames get the title "Telegram: Contact @name", taken ones
    "Telegram: View @name" or the account's display name.
    """
    response = await client.get(
        f"https://t.me/{handle}",
        headers={"User-Agent": CURL_USER_AGENT},
    )
    match = TITLE_PATTERN.search(response.text)
    title = match.group(1) if match else ""
    return "Contact @" not in title


async def check_github(client: httpx.AsyncClient, handle: str) -> bool:
    response = await client.head(
        f"https://github.com/{handle}",
        headers={"User-Agent": CURL_USER_AGENT},
    )
    return response.status_code == 200
