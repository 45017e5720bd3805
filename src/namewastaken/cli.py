"""
Command line interface.

Usage:
    namewastaken mrbeast                      Check all platforms
    namewastaken mrbeast pewdiepie ninja      Check several usernames
    namewastaken mrbeast -p tt,ig,yt          Check specific platforms
    namewastaken https://x.com/MrBeast        Check from a profile URL
    namewastaken platforms                    List supported platforms
    namewastaken mcp [--http]                 Start the MCP server
    namewastaken cache clear|stats            Manage the result cache
"""

import argparse
import asyncio
import sys
import time

from rich.console import Console
from rich.markup import escape

from . import __version__
from .cache import get_default_cache
from .check import check_bulk_with_providers, check_providers, check_single
from .config import configure_logging, get_http_host, get_http_port
from .handles import HandleValidationError, normalize_handle
from .output import (
    build_platforms_table,
    format_bulk_json,
    format_json,
    format_single_provider_json,
    print_bulk_table,
    print_single_provider_result,
    print_table,
)
from .providers import (
    Provider,
    UnknownProviderError,
    is_url,
    list_providers,
    parse_profile_url,
    provider_names,
    resolve_providers,
)

COMMANDS = ("platforms", "mcp", "cache")

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def _platforms_epilog() -> str:
    lines = ["Platforms:"]
    for p in list_providers():
        aliases = ", ".join(a for a in p.aliases if a != p.name)
        lines.append(f"    {p.name:<10} {aliases:<9} {p.display_name}")
    lines.extend([
        "",
        "Commands:",
        "    platforms                 List all supported platforms",
        "    mcp                       Start MCP server (STDIO)",
        "    mcp --http                Start MCP server + JSON API (HTTP)",
        "    cache clear               Clear the cache",
        "    cache stats               Show cache statistics",
        "",
        "Examples:",
        "    %(prog)s mrbeast",
        "    %(prog)s mrbeast pewdiepie ninja",
        "    %(prog)s mrbeast -p tiktok",
        "    %(prog)s mrbeast -p tt,ig,yt",
        "    %(prog)s https://x.com/MrBeast",
    ])
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="namewastaken",
        description="Check if a username is taken on social platforms",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=_platforms_epilog(),
    )
    parser.add_argument(
        "inputs",
        nargs="*",
        metavar="USERNAME_OR_URL",
        help="Username(s) or a profile URL to check",
    )
    parser.add_argument(
        "-p", "--platforms",
        type=str,
        default=None,
        help="Check specific platform(s), comma-separated (aliases allowed)",
    )
    parser.add_argument(
        "-j", "--json",
        action="store_true",
        help="Output results as JSON",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="No output; exit 0 if available, 1 if taken",
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Skip the cache and fetch fresh results",
    )
    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"namewastaken {__version__}",
    )
    return parser


def _fail(message: str, quiet: bool = False, hint: str | None = None) -> int:
    if not quiet:
        err_console.print(f"[red]Error:[/red] {escape(message)}", soft_wrap=True)
        if hint:
            err_console.print(escape(hint), soft_wrap=True)
    return 1


def _elapsed_ms(start: float) -> int:
    return round((time.perf_counter() - start) * 1000)


# =============================================================================
# Check handlers
# =============================================================================

async def handle_single_provider(provider: Provider, username: str, args) -> int:
    try:
        handle = normalize_handle(username)
    except HandleValidationError as e:
        return _fail(e.message, args.quiet)

    start = time.perf_counter()
    result = await check_single(provider, handle, use_cache=not args.no_cache)
    duration_ms = _elapsed_ms(start)

    if args.quiet:
        return 1 if result.taken else 0

    if args.json:
        print(format_single_provider_json(result, duration_ms))
    else:
        print_single_provider_result(console, result, duration_ms)
    return 0


async def handle_providers(providers: list[Provider], username: str, args) -> int:
    try:
        handle = normalize_handle(username)
    except HandleValidationError as e:
        return _fail(e.message, args.quiet)

    start = time.perf_counter()
    result = await check_providers(providers, handle, use_cache=not args.no_cache)
    duration_ms = _elapsed_ms(start)

    if args.quiet:
        return 1 if result.taken_count else 0

    if args.json:
        print(format_json(result, duration_ms))
    else:
        print_table(console, result, duration_ms)
    return 0


async def handle_bulk(usernames: list[str], providers: list[Provider], args) -> int:
    handles = []
    for username in usernames:
        try:
            handles.append(normalize_handle(username))
        except HandleValidationError as e:
            return _fail(f'Invalid username "{username}": {e.message}', args.quiet)

    start = time.perf_counter()
    bulk = await check_bulk_with_providers(handles, providers, use_cache=not args.no_cache)
    duration_ms = _elapsed_ms(start)

    if args.quiet:
        return 1 if any(r.taken_count for r in bulk.results) else 0

    if args.json:
        print(format_bulk_json(bulk, duration_ms))
    else:
        print_bulk_table(console, bulk, duration_ms)
    return 0


async def run_check(args) -> int:
    """Route the positional inputs to the right check handler."""
    inputs = args.inputs

    if args.platforms:
        names = [n.strip() for n in args.platforms.split(",") if n.strip()]
        try:
            providers = resolve_providers(names)
        except UnknownProviderError as e:
            return _fail(
                f'Unknown platform "{e.name}"',
                args.quiet,
                hint=f"Available: {', '.join(provider_names())}",
            )
        if not providers:
            return _fail("No platforms specified", args.quiet)

        if len(inputs) == 1:
            if len(providers) == 1:
                return await handle_single_provider(providers[0], inputs[0], args)
            return await handle_providers(providers, inputs[0], args)
        return await handle_bulk(inputs, providers, args)

    if len(inputs) == 1:
        value = inputs[0]
        if is_url(value):
            parsed = parse_profile_url(value)
            if parsed is None:
                supported = ", ".join(p.display_name for p in list_providers())
                return _fail(
                    "Unsupported URL format",
                    args.quiet,
                    hint=f"Supported platforms: {supported}",
                )
            provider, username = parsed
            return await handle_single_provider(provider, username, args)

        return await handle_providers(list_providers(), value, args)

    return await handle_bulk(inputs, list_providers(), args)


# =============================================================================
# Subcommands
# =============================================================================

def cmd_platforms() -> int:
    console.print(build_platforms_table(list_providers()))
    return 0


def cmd_mcp(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(
        prog="namewastaken mcp",
        description="Start the MCP server for AI assistants",
    )
    parser.add_argument(
        "--http",
        action="store_true",
        help="Use streamable HTTP transport (also serves /api/check) instead of STDIO",
    )
    parser.add_argument("--host", type=str, default=None, help="Bind address for --http")
    parser.add_argument("--port", type=int, default=None, help="Port for --http")
    args = parser.parse_args(argv)

    # Import here so plain CLI checks don't pay for the MCP stack
    from .server import run_http, run_stdio

    if args.http:
        host = args.host or get_http_host()
        port = args.port or get_http_port()
        err_console.print(f"MCP server running at http://{host}:{port}/mcp", soft_wrap=True)
        err_console.print(f"JSON API at http://{host}:{port}/api/check", soft_wrap=True)
        run_http(host, port)
    else:
        run_stdio()
    return 0


def cmd_cache(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(
        prog="namewastaken cache",
        description="Manage the result cache",
    )
    parser.add_argument("action", choices=["clear", "stats"])
    args = parser.parse_args(argv)

    cache = get_default_cache()

    if args.action == "clear":
        cache.clear()
        console.print("Cache cleared")
        return 0

    stats = cache.stats()
    console.print(f"[bold]Cache file:[/bold] {escape(str(cache.path))}", soft_wrap=True)
    console.print(f"  Enabled: {cache.enabled}")
    console.print(f"  Entries: {stats.entry_count}")
    console.print(f"  Providers: {', '.join(stats.providers) if stats.providers else 'none'}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return the process exit code."""
    if argv is None:
        argv = sys.argv[1:]

    configure_logging()

    if argv and argv[0] in COMMANDS:
        command, rest = argv[0], argv[1:]
        if command == "platforms":
            return cmd_platforms()
        if command == "mcp":
            return cmd_mcp(rest)
        return cmd_cache(rest)

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.inputs:
        parser.print_help()
        return 0

    return asyncio.run(run_check(args))
