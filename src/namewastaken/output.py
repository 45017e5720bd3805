"""
Rendering of check results for the CLI.

Tables and status lines are rich renderables; JSON output is plain text so it
stays machine-readable when piped.
"""

import json

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .check import BulkCheckResult, CheckAllResult, CheckResult
from .providers import Provider


def status_markup(result: CheckResult) -> str:
    if result.error:
        return f"[yellow]? {escape(result.error)}[/yellow]"
    if result.taken:
        return "[red]x taken[/red]"
    return "[green]o available[/green]"


def _symbol_markup(result: CheckResult) -> str:
    if result.error:
        return "[yellow]?[/yellow]"
    if result.taken:
        return "[red]x[/red]"
    return "[green]o[/green]"


def summary_markup(check_result: CheckAllResult) -> str:
    """e.g. "3 available, 4 taken, 1 errors" (zero counts are left out)."""
    parts = []
    if check_result.available_count:
        parts.append(f"[green]{check_result.available_count} available[/green]")
    if check_result.taken_count:
        parts.append(f"[red]{check_result.taken_count} taken[/red]")
    if check_result.error_count:
        parts.append(f"[yellow]{check_result.error_count} errors[/yellow]")
    return ", ".join(parts)


def _duration_markup(duration_ms: int | None) -> str:
    return f" [dim]({duration_ms}ms)[/dim]" if duration_ms is not None else ""


def format_single_result(result: CheckResult) -> str:
    """One line of markup, e.g. "x TikTok: taken"."""
    name = result.provider.display_name
    if result.error:
        return f"[yellow]?[/yellow] {name}: [yellow]{escape(result.error)}[/yellow]"
    if result.taken:
        return f"[red]x[/red] {name}: [red]taken[/red]"
    return f"[green]o[/green] {name}: [green]available[/green]"


def build_results_table(check_result: CheckAllResult) -> Table:
    """One row per provider: platform, status, profile URL."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("Platform", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("URL", style="dim", overflow="fold")

    for r in check_result.results:
        table.add_row(r.provider.display_name, status_markup(r), r.url)
    return table


def build_bulk_table(bulk: BulkCheckResult) -> Table:
    """One row per handle, one column per provider."""
    providers: list[Provider] = [r.provider for r in bulk.results[0].results] if bulk.results else []

    table = Table(show_header=True, header_style="bold")
    table.add_column("Username", style="cyan", no_wrap=True)
    for p in providers:
        table.add_column(p.display_name, justify="center")

    for check_result in bulk.results:
        table.add_row(check_result.username, *(_symbol_markup(r) for r in check_result.results))
    return table


def build_platforms_table(providers: list[Provider]) -> Table:
    table = Table(title="Supported Platforms", show_header=True, header_style="bold")
    table.add_column("Platform", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Aliases", style="dim")

    for p in providers:
        table.add_row(p.name, p.display_name, ", ".join(p.aliases))
    return table


def print_single_provider_result(
    console: Console,
    result: CheckResult,
    duration_ms: int | None = None,
) -> None:
    console.print(format_single_result(result) + _duration_markup(duration_ms), soft_wrap=True)


def print_table(console: Console, check_result: CheckAllResult, duration_ms: int | None = None) -> None:
    """Header line, results table, then the summary."""
    console.print(f"\nChecking username: [bold]{check_result.username}[/bold]\n")
    console.print(build_results_table(check_result))
    console.print(f"\n{summary_markup(check_result)}{_duration_markup(duration_ms)}", soft_wrap=True)


def print_bulk_table(console: Console, bulk: BulkCheckResult, duration_ms: int | None = None) -> None:
    if not bulk.results:
        console.print("No usernames checked")
        return

    available = sum(r.available_count for r in bulk.results)
    taken = sum(r.taken_count for r in bulk.results)
    errors = sum(r.error_count for r in bulk.results)

    console.print(f"\nChecking {len(bulk.results)} usernames\n")
    console.print(build_bulk_table(bulk))
    console.print("\n[green]o[/green] = available, [red]x[/red] = taken, [yellow]?[/yellow] = error")
    console.print(
        f"Total: [green]{available} available[/green], [red]{taken} taken[/red], "
        f"[yellow]{errors} errors[/yellow]{_duration_markup(duration_ms)}",
        soft_wrap=True,
    )


def format_json(check_result: CheckAllResult, duration_ms: int | None = None) -> str:
    data = check_result.to_dict()
    if duration_ms is not None:
        data["durationMs"] = duration_ms
    return json.dumps(data, indent=2)


def format_single_provider_json(result: CheckResult, duration_ms: int | None = None) -> str:
    data = {"username": result.username, **result.to_dict(), "url": result.url}
    if duration_ms is not None:
        data["durationMs"] = duration_ms
    return json.dumps(data, indent=2)


def format_bulk_json(bulk: BulkCheckResult, duration_ms: int | None = None) -> str:
    data = bulk.to_dict()
    if duration_ms is not None:
        data["durationMs"] = duration_ms
    return json.dumps(data, indent=2)
