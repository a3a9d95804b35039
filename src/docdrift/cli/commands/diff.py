"""
Diff Commands - compare two versions of an API.

    docdrift diff old.json new.json
    docdrift breaking old.json new.json     # exit 1 on breaking changes
    docdrift semver old.json new.json       # recommended bump and next version
"""

from pathlib import Path

import typer
from rich.panel import Panel
from rich.table import Table

from docdrift.cli.helpers import EXIT_FAILED, console, fail, load_spec_or_exit, print_json
from docdrift.diff.application.engine import categorize_breaking_changes, diff_spec
from docdrift.diff.application.semver import calculate_next_version, recommend_semver_bump
from docdrift.diff.domain.models import BreakingSeverity

_SEVERITY_COLORS = {
    BreakingSeverity.HIGH: "red",
    BreakingSeverity.MEDIUM: "yellow",
    BreakingSeverity.LOW: "blue",
}

_OLD = typer.Argument(..., exists=True, dir_okay=False, help="Old ApiSpec JSON")
_NEW = typer.Argument(..., exists=True, dir_okay=False, help="New ApiSpec JSON")
_JSON = typer.Option(False, "--json", help="Print JSON")


def diff_command(old_path: Path = _OLD, new_path: Path = _NEW, as_json: bool = _JSON) -> None:
    """Show added, removed and modified exports."""
    old, new = load_spec_or_exit(old_path), load_spec_or_exit(new_path)
    diff = diff_spec(old, new)

    if as_json:
        print_json(diff.to_json())
        return
    if diff.is_empty:
        console.print("[green]No API changes[/green]")
        return

    table = Table(title=f"{old.identity} → {new.identity}")
    table.add_column("Change")
    table.add_column("Exports", style="cyan")
    for label, names, color in (
        ("added", diff.added, "green"),
        ("removed", diff.removed, "red"),
        ("breaking", [n for n in diff.breaking if n not in diff.removed], "red"),
        ("non-breaking", diff.non_breaking, "yellow"),
        ("docs only", diff.docs_only, "dim"),
    ):
        if names:
            table.add_row(f"[{color}]{label}[/{color}] ({len(names)})", ", ".join(names))
    console.print(table)


def breaking_command(old_path: Path = _OLD, new_path: Path = _NEW, as_json: bool = _JSON) -> None:
    """List breaking changes by severity; exit 1 when there are any."""
    old, new = load_spec_or_exit(old_path), load_spec_or_exit(new_path)
    categorized = categorize_breaking_changes(diff_spec(old, new).breaking, old, new)

    if as_json:
        print_json([c.to_json() for c in categorized])
    elif not categorized:
        console.print("[green]✓ No breaking changes[/green]")
    else:
        table = Table(title="Breaking changes")
        table.add_column("Severity")
        table.add_column("Export", style="cyan")
        table.add_column("Reason")
        table.add_column("Detail", style="dim")
        for change in categorized:
            color = _SEVERITY_COLORS[change.severity]
            table.add_row(f"[{color}]{change.severity.value}[/{color}]", change.name, change.reason, change.detail)
        console.print(table)

    if categorized:
        raise typer.Exit(EXIT_FAILED)


def semver_command(old_path: Path = _OLD, new_path: Path = _NEW, as_json: bool = _JSON) -> None:
    """Recommend the next semantic version."""
    old, new = load_spec_or_exit(old_path), load_spec_or_exit(new_path)
    recommendation = recommend_semver_bump(diff_spec(old, new))

    next_version = None
    if old.meta.version:
        try:
            next_version = calculate_next_version(old.meta.version, recommendation.bump)
        except ValueError as e:
            if not as_json:
                raise fail(str(e))

    if as_json:
        print_json({**recommendation.to_json(), "currentVersion": old.meta.version, "nextVersion": next_version})
        return
    lines = [f"[bold]{recommendation.bump.value}[/bold]: {recommendation.reason}"]
    if next_version:
        lines.append(f"[dim]{old.meta.version}[/dim] → [bold cyan]{next_version}[/bold cyan]")
    console.print(Panel.fit("\n".join(lines), title="Semver", border_style="cyan"))
