"""
Result Cache Module

Persists successful check verdicts to a JSON file so repeated lookups of the
same handle skip the network for 24 hours.

File format:
    {
        "tiktok": {
            "mrbeast": {"taken": true, "timestamp": 1718000000000}
        },
        ...
    }

Timestamps are epoch milliseconds. Expired entries are never evicted; they
are ignored on read and overwritten by the next successful check. A missing,
unreadable or corrupt file behaves like an empty cache.
"""

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path

from .config import cache_disabled, get_cache_file

logger = logging.getLogger(__name__)

# 24 hours
CACHE_TTL_MS = 24 * 60 * 60 * 1000


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class CacheStats:
    """Summary of what the cache file currently holds."""

    entries: int
    providers: list[str]

    @property
    def entry_count(self) -> int:
        return self.entries

    @property
    def distinct_providers(self) -> int:
        return len(self.providers)


class HandleCache:
    """
    (provider, handle) -> taken cache backed by a JSON file.

    A disabled cache never returns hits and never writes. Every get/set
    re-reads the file, so several processes can share one cache.
    """

    def __init__(
        self,
        path: Path | None = None,
        ttl_ms: int = CACHE_TTL_MS,
        enabled: bool = True,
    ) -> None:
        self.path = Path(path) if path is not None else get_cache_file()
        self.ttl_ms = ttl_ms
        self.enabled = enabled

    def _load(self) -> dict:
        """Load cache from disk, returning {} if not found or invalid."""
        try:
            if self.path.exists():
                with open(self.path, "r") as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    return data
                logger.debug("Ignoring malformed cache file %s", self.path)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            logger.debug("Could not read cache file %s: %s", self.path, e)
        return {}

    def _save(self, data: dict) -> bool:
        """Save cache to disk. Returns True on success."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                json.dump(data, f, indent=2)
            return True
        except OSError as e:
            logger.debug("Could not write cache file %s: %s", self.path, e)
            return False

    def get(self, provider: str, handle: str) -> bool | None:
        """
        Cached verdict for (provider, handle).

        Returns None on a miss, an expired entry, a malformed entry, or when
        the cache is disabled.
        """
        if not self.enabled:
            return None

        entries = self._load().get(provider)
        if not isinstance(entries, dict):
            return None

        entry = entries.get(handle)
        if not isinstance(entry, dict):
            return None

        taken = entry.get("taken")
        timestamp = entry.get("timestamp")
        if not isinstance(taken, bool) or not isinstance(timestamp, (int, float)):
            return None

        if _now_ms() - timestamp > self.ttl_ms:
            return None

        return taken

    def set(self, provider: str, handle: str, taken: bool) -> None:
        """Record a verdict. No-op when the cache is disabled."""
        if not self.enabled:
            return

        data = self._load()
        entries = data.get(provider)
        if not isinstance(entries, dict):
            entries = {}
            data[provider] = entries

        entries[handle] = {"taken": taken, "timestamp": _now_ms()}
        self._save(data)

    def clear(self) -> None:
        """Drop every entry."""
        if self.path.exists():
            self._save({})

    def stats(self) -> CacheStats:
        data = self._load()
        providers = [name for name, entries in data.items() if isinstance(entries, dict)]
        entries = sum(
            1 for name in providers for entry in data[name].values() if isinstance(entry, dict)
        )
        return CacheStats(entries=entries, providers=providers)


_default_cache: HandleCache | None = None


def get_default_cache() -> HandleCache:
    """Process-wide cache at the configured location."""
    global _default_cache
    if _default_cache is None:
        _default_cache = HandleCache(enabled=not cache_disabled())
    return _default_cache
