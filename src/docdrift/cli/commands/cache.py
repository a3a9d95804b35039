"""
Cache Commands - inspect and clear the spec cache.

    docdrift cache status
    docdrift cache clear
"""

import typer
from rich.table import Table

from docdrift.cache.spec_cache import SpecCache
from docdrift.cli.helpers import console, get_settings, print_json

cache_app = typer.Typer(
    name="cache",
    help="Manage the spec cache",
    no_args_is_help=True,
)


def _format_bytes(size: int) -> str:
    for unit in ("B", "KB", "MB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


@cache_app.command(name="status")
def status_command(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Print JSON"),
) -> None:
    """Show cache location, entry count and size."""
    status = SpecCache(get_settings(ctx).cache_path).status()
    if as_json:
        print_json(status.to_json())
        return

    table = Table(title="Spec cache")
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_row("Directory", status.directory)
    table.add_row("Entries", str(status.entries))
    table.add_row("Size", _format_bytes(status.total_bytes))
    if status.oldest:
        table.add_row("Oldest", status.oldest.strftime("%Y-%m-%d %H:%M"))
        table.add_row("Newest", status.newest.strftime("%Y-%m-%d %H:%M"))
    console.print(table)


@cache_app.command(name="clear")
def clear_command(ctx: typer.Context) -> None:
    """Delete every cache entry."""
    removed = SpecCache(get_settings(ctx).cache_path).clear()
    console.print(f"Removed {removed} cache entr{'y' if removed == 1 else 'ies'}.")
