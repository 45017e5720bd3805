"""
Provider Registry

A Provider bundles everything the rest of the package needs to know about
one platform: identifier, display name, CLI/MCP aliases, how to build a
profile URL, how to recognise one, and which checker probes it.

The registry is a fixed, ordered tuple. Its order is the display order and
the order results come back in, and it is the tie-break when parsing URLs.
"""

import re
from dataclasses import dataclass, field

import httpx

from . import checkers

# Full handle alphabet, so that every valid handle survives a URL round trip
_HANDLE_GROUP = r"([A-Za-z0-9._]+)"


def _url_pattern(host: str, at_prefix: bool = False) -> re.Pattern:
    prefix = "@" if at_prefix else ""
    return re.compile(
        rf"^https?://(?:www\.)?{host}/{prefix}{_HANDLE_GROUP}",
        re.IGNORECASE,
    )


class UnknownProviderError(ValueError):
    """Raised when a platform name or alias is not in the registry."""

    def __init__(self, name: str):
        super().__init__(
            f"Unknown platform: {name}. Available platforms: {', '.join(provider_names())}"
        )
        self.name = name


@dataclass(frozen=True)
class Provider:
    """Immutable descriptor for one supported platform."""

    name: str
    display_name: str
    aliases: tuple[str, ...]
    url_template: str
    url_patterns: tuple[re.Pattern, ...]
    checker: checkers.Checker = field(repr=False, compare=False)
    timeout: float = checkers.DEFAULT_TIMEOUT

    def profile_url(self, handle: str) -> str:
        """Canonical profile URL for a handle."""
        return self.url_template.format(handle=handle)

    def parse_url(self, url: str) -> str | None:
        """Extract the (lowercased) handle if url is one of this provider's profile URLs."""
        url = url.strip()
        for pattern in self.url_patterns:
            match = pattern.match(url)
            if match:
                return match.group(1).lower()
        return None

    async def check(self, handle: str, client: httpx.AsyncClient | None = None) -> bool:
        """
        Probe the platform for a handle.

        Returns True if taken. Raises checkers.ProviderCheckError once all
        retries have failed.
        """
        if client is None:
            async with checkers.build_client() as own_client:
                return await checkers.run_checker(
                    self.name, self.checker, own_client, handle, timeout=self.timeout
                )
        return await checkers.run_checker(
            self.name, self.checker, client, handle, timeout=self.timeout
        )


# =============================================================================
# Registry
# =============================================================================

X = Provider(
    name="x",
    display_name="X/Twitter",
    aliases=("x", "twitter"),
    url_template="https://x.com/{handle}",
    url_patterns=(_url_pattern(r"x\.com"), _url_pattern(r"twitter\.com")),
    checker=checkers.check_x,
)

TIKTOK = Provider(
    name="tiktok",
    display_name="TikTok",
    aliases=("tiktok", "tt"),
    url_template="https://tiktok.com/@{handle}",
    url_patterns=(_url_pattern(r"tiktok\.com", at_prefix=True),),
    checker=checkers.check_tiktok,
)

THREADS = Provider(
    name="threads",
    display_name="Threads",
    aliases=("threads",),
    url_template="https://threads.net/@{handle}",
    url_patterns=(_url_pattern(r"threads\.(?:net|com)", at_prefix=True),),
    checker=checkers.check_threads,
    timeout=checkers.THREADS_TIMEOUT,
)

YOUTUBE = Provider(
    name="youtube",
    display_name="YouTube",
    aliases=("youtube", "yt"),
    url_template="https://youtube.com/@{handle}",
    url_patterns=(_url_pattern(r"youtube\.com", at_prefix=True),),
    checker=checkers.check_youtube,
)

INSTAGRAM = Provider(
    name="instagram",
    display_name="Instagram",
    aliases=("instagram", "ig"),
    url_template="https://instagram.com/{handle}",
    url_patterns=(_url_pattern(r"instagram\.com"),),
    checker=checkers.check_instagram,
)

FACEBOOK = Provider(
    name="facebook",
    display_name="Facebook",
    aliases=("facebook", "fb"),
    url_template="https://facebook.com/{handle}",
    url_patterns=(_url_pattern(r"facebook\.com"),),
    checker=checkers.check_facebook,
)

TELEGRAM = Provider(
    name="telegram",
    display_name="Telegram",
    aliases=("telegram", "tg"),
    url_template="https://t.me/{handle}",
    url_patterns=(_url_pattern(r"t\.me"), _url_pattern(r"telegram\.me")),
    checker=checkers.check_telegram,
)

GITHUB = Provider(
    name="github",
    display_name="GitHub",
    aliases=("github", "gh"),
    url_template="https://github.com/{handle}",
    url_patterns=(_url_pattern(r"github\.com"),),
    checker=checkers.check_github,
)

PROVIDERS: tuple[Provider, ...] = (
    X,
    TIKTOK,
    THREADS,
    YOUTUBE,
    INSTAGRAM,
    FACEBOOK,
    TELEGRAM,
    GITHUB,
)

_PROVIDERS_BY_NAME = {p.name: p for p in PROVIDERS}
_PROVIDERS_BY_ALIAS = {
    alias.lower(): p for p in PROVIDERS for alias in (p.name, *p.aliases)
}


def list_providers() -> list[Provider]:
    """All providers in registry order."""
    return list(PROVIDERS)


def provider_names() -> list[str]:
    return [p.name for p in PROVIDERS]


def get_provider(name: str) -> Provider | None:
    """Look up a provider by its exact identifier."""
    return _PROVIDERS_BY_NAME.get(name)


def resolve_provider(name_or_alias: str) -> Provider | None:
    """Look up a provider by identifier or alias, case-insensitively."""
    return _PROVIDERS_BY_ALIAS.get(name_or_alias.strip().lower())


def resolve_providers(names: list[str]) -> list[Provider]:
    """
    Resolve a list of names/aliases to providers.

    Duplicates collapse and the result follows registry order.

    Raises:
        UnknownProviderError: for the first name that doesn't resolve.
    """
    selected = set()
    for name in names:
        provider = resolve_provider(name)
        if provider is None:
            raise UnknownProviderError(name)
        selected.add(provider.name)
    return [p for p in PROVIDERS if p.name in selected]


def parse_profile_url(url: str) -> tuple[Provider, str] | None:
    """
    Match a profile URL against every provider in registry order.

    Returns:
        (provider, lowercased handle) for the first match, or None.
    """
    for provider in PROVIDERS:
        handle = provider.parse_url(url)
        if handle:
            return provider, handle
    return None


def is_url(value: str) -> bool:
    """Routing hint only: does the input look like an http(s) URL?"""
    return value.startswith("http://") or value.startswith("https://")
