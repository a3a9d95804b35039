"""
Health Command - composite documentation health of one package.

Optionally writes a drift report, records a history snapshot and enforces
a minimum score (raised to the best recorded score with coverage.ratchet).
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.panel import Panel
from rich.table import Table

from docdrift.cli.helpers import (
    EXIT_FAILED,
    collect_markdown_files,
    console,
    get_settings,
    load_example_results,
    load_project_config_or_exit,
    load_spec_or_exit,
    print_json,
    report_error,
    resolve_requirements_or_exit,
    score_color,
)
from docdrift.health.application.report import build_drift_report, save_drift_report
from docdrift.health.domain.models import DriftReport
from docdrift.health.domain.weights import HealthWeights
from docdrift.history.application.tracker import HistoryTracker, compute_ratchet_min, compute_snapshot
from docdrift.shared.domain.exceptions import DocDriftError


def health_command(
    ctx: typer.Context,
    spec_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="ApiSpec JSON file"),
    examples: Optional[Path] = typer.Option(None, "--examples", "-e", exists=True, help="Example validation results (JSON)"),
    docs: Optional[List[str]] = typer.Option(None, "--docs", "-d", help="Markdown glob(s) to cross-check"),
    style: Optional[str] = typer.Option(None, "--style", "-s", help="Style preset: minimal, verbose, types-only"),
    minimum: Optional[int] = typer.Option(None, "--min", min=0, max=100, help="Fail below this health score"),
    report: Optional[Path] = typer.Option(None, "--report", "-o", help="Write the drift report to this file"),
    record: bool = typer.Option(False, "--record", help="Append a snapshot to the history file"),
    commit: Optional[str] = typer.Option(None, "--commit", help="Commit to store with the snapshot"),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON"),
) -> None:
    """
    Score documentation health (0-100).

    Examples:
        docdrift health api.json
        docdrift health api.json --style verbose --min 80 --record
    """
    settings = get_settings(ctx)
    project = load_project_config_or_exit()
    spec = load_spec_or_exit(spec_path)
    requirements = resolve_requirements_or_exit(style, project, settings)

    patterns = docs if docs else project.docs.include
    markdown_files = collect_markdown_files(patterns, project.docs.exclude) if patterns else None

    drift_report = build_drift_report(
        spec,
        example_results=load_example_results(examples),
        markdown_files=markdown_files,
        requirements=requirements,
        weights=HealthWeights.from_settings(settings),
        source_file=str(spec_path),
    )
    health = drift_report.summary.health

    tracker = HistoryTracker(settings.history_path)
    try:
        if report is not None:
            save_drift_report(drift_report, report)

        effective_min = minimum if minimum is not None else project.coverage.min
        if effective_min is not None and project.coverage.ratchet:
            effective_min = compute_ratchet_min(effective_min, tracker.load_snapshots(spec.meta.name)).effective_min

        if record:
            tracker.save_snapshot(compute_snapshot(health, package=spec.meta.name, version=spec.meta.version, commit=commit))
            tracker.prune_history(settings.history_max_entries, settings.history_max_age_days)
    except DocDriftError as e:
        raise report_error(e)

    if as_json:
        print_json(drift_report.to_json())
    else:
        _render(drift_report, effective_min)

    if effective_min is not None and health.score < effective_min:
        raise typer.Exit(EXIT_FAILED)


def _render(report: DriftReport, minimum: Optional[int]) -> None:
    health = report.summary.health
    color = score_color(health.score)

    lines = [
        f"[bold {color}]{health.score}[/bold {color}]/100",
        f"[dim]Completeness:[/dim] {health.completeness.score} "
        f"({health.completeness.documented}/{health.completeness.total} documented, "
        f"coverage {health.completeness.coverage_score})",
        f"[dim]Accuracy:[/dim] {health.accuracy.score} ({health.accuracy.issues} drift issues)",
    ]
    if health.examples is not None:
        lines.append(
            f"[dim]Examples:[/dim] {health.examples.score} ({health.examples.passed}/{health.examples.total} passing)"
        )
    if minimum is not None:
        verdict = "[green]pass[/green]" if health.score >= minimum else "[red]fail[/red]"
        lines.append(f"[dim]Minimum:[/dim] {minimum} {verdict}")
    console.print(Panel.fit("\n".join(lines), title=f"Health: {report.source.package_name}", border_style=color))

    missing = {rule: count for rule, count in health.completeness.missing.items() if count}
    if missing:
        table = Table(title="Missing documentation")
        table.add_column("Rule", style="cyan")
        table.add_column("Exports", justify="right")
        for rule, count in missing.items():
            table.add_row(rule, str(count))
        console.print(table)
