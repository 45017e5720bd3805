"""
Configuration for namewastaken.

Everything is driven by environment variables, read at call time:

    NAMEWASTAKEN_CACHE_FILE   Cache file location (default: user cache dir)
    NAMEWASTAKEN_NO_CACHE     Any non-empty value disables the result cache
    NAMEWASTAKEN_DEBUG        Verbose logging, including httpx request logs
    NAMEWASTAKEN_HOST         Bind address for `namewastaken mcp --http`
    NAMEWASTAKEN_PORT         Port for `namewastaken mcp --http`
"""

import logging
import os
from pathlib import Path

APP_NAME = "namewastaken"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000


def get_cache_dir() -> Path:
    """Get the cache directory for this app."""
    if os.name == 'nt':  # Windows
        base = Path(os.environ.get('APPDATA', Path.home()))
    else:  # macOS, Linux
        base = Path(os.environ.get('XDG_CACHE_HOME', Path.home() / '.cache'))

    return base / APP_NAME


def get_cache_file() -> Path:
    """Get the path to the result cache file."""
    if override := os.environ.get('NAMEWASTAKEN_CACHE_FILE'):
        return Path(override).expanduser()
    return get_cache_dir() / 'cache.json'


def cache_disabled() -> bool:
    """True if caching has been turned off via the environment."""
    return bool(os.environ.get('NAMEWASTAKEN_NO_CACHE'))


def is_debug() -> bool:
    return bool(os.environ.get('NAMEWASTAKEN_DEBUG'))


def get_http_host() -> str:
    return os.environ.get('NAMEWASTAKEN_HOST') or DEFAULT_HOST


def get_http_port() -> int:
    """Port for the HTTP transport, falling back to the default on bad input."""
    value = os.environ.get('NAMEWASTAKEN_PORT')
    if not value:
        return DEFAULT_PORT
    try:
        return int(value)
    except ValueError:
        return DEFAULT_PORT


def configure_logging() -> None:
    """
    Set up logging for the CLI and server entry points.

    httpx logs every request at INFO; keep that quiet unless debugging.
    """
    debug = is_debug()
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)
