"""
Drift Command - check documentation against the extracted API.

Exit code 1 when drift is found and --fail-on-drift is set.
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.table import Table

from docdrift.cli.helpers import (
    EXIT_FAILED,
    collect_markdown_files,
    console,
    load_example_results,
    load_project_config_or_exit,
    load_spec_or_exit,
    print_json,
)
from docdrift.drift.application.engine import compute_drift
from docdrift.drift.domain.models import PROSE_KEY_PREFIX, DriftResult


def drift_command(
    spec_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="ApiSpec JSON file"),
    examples: Optional[Path] = typer.Option(None, "--examples", "-e", exists=True, help="Example validation results (JSON)"),
    docs: Optional[List[str]] = typer.Option(None, "--docs", "-d", help="Markdown glob(s) to cross-check"),
    as_json: bool = typer.Option(False, "--json", help="Print the drift result as JSON"),
    fail_on_drift: bool = typer.Option(False, "--fail-on-drift", help="Exit 1 when any drift is found"),
) -> None:
    """
    Find documentation that contradicts the API.

    Examples:
        docdrift drift api.json
        docdrift drift api.json --docs "docs/**/*.md" --json
    """
    spec = load_spec_or_exit(spec_path)
    project = load_project_config_or_exit()

    patterns = docs if docs else project.docs.include
    markdown_files = collect_markdown_files(patterns, project.docs.exclude) if patterns else None

    result = compute_drift(spec, example_results=load_example_results(examples), markdown_files=markdown_files)

    if as_json:
        print_json(result.to_json())
    else:
        _render(result, spec.meta.name)

    if fail_on_drift and result.total_issues:
        raise typer.Exit(EXIT_FAILED)


def _render(result: DriftResult, package: str) -> None:
    if not result.total_issues:
        console.print(f"[green]✓ No drift in {package}[/green]")
        return

    table = Table(title=f"Drift in {package}")
    table.add_column("Export", style="cyan")
    table.add_column("Type")
    table.add_column("Issue")
    table.add_column("Suggestion", style="dim")

    for key in sorted(result.exports):
        for issue in result.exports[key]:
            label = key[len(PROSE_KEY_PREFIX):] if key.startswith(PROSE_KEY_PREFIX) else key
            table.add_row(label, issue.type.value, issue.issue, issue.suggestion or "")

    console.print(table)
    console.print(f"\n[bold]Total issues:[/bold] {result.total_issues}")
    for category, count in sorted(result.count_by_category().items()):
        if count:
            console.print(f"  [dim]{category}:[/dim] {count}")
