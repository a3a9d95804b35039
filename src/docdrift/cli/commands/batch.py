"""
Batch Commands - analyze many packages with resumable checkpoints.

    docdrift batch run a.json b.json [--no-resume] [--no-cache] [--record]
    docdrift batch cleanup
"""

import asyncio
import tempfile
from pathlib import Path
from typing import List, Optional

import typer
from rich.progress import BarColumn, Progress, TextColumn
from rich.table import Table

from docdrift.batch.application.analyzer import BatchAnalyzer
from docdrift.batch.application.checkpoint import cleanup_orphaned_temp_files
from docdrift.batch.domain.models import BatchResult, PackageInput
from docdrift.cache.spec_cache import SpecCache
from docdrift.cli.helpers import (
    console,
    fail,
    get_settings,
    load_project_config_or_exit,
    load_spec_or_exit,
    print_json,
    report_error,
    resolve_requirements_or_exit,
    score_color,
)
from docdrift.health.domain.weights import HealthWeights
from docdrift.history.application.tracker import HistoryTracker
from docdrift.shared.domain.exceptions import DocDriftError

batch_app = typer.Typer(
    name="batch",
    help="Analyze several packages at once",
    no_args_is_help=True,
)


@batch_app.command(name="run")
def run_command(
    ctx: typer.Context,
    spec_paths: List[Path] = typer.Argument(..., exists=True, dir_okay=False, help="ApiSpec JSON files"),
    resume: bool = typer.Option(True, "--resume/--no-resume", help="Continue an interrupted run"),
    use_cache: bool = typer.Option(True, "--cache/--no-cache", help="Reuse results of unchanged packages"),
    record: bool = typer.Option(False, "--record", help="Append an aggregate snapshot to the history file"),
    style: Optional[str] = typer.Option(None, "--style", "-s", help="Style preset: minimal, verbose, types-only"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON"),
) -> None:
    """Analyze every spec and print per-package and aggregate health."""
    settings = get_settings(ctx)
    project = load_project_config_or_exit()
    requirements = resolve_requirements_or_exit(style, project, settings)

    packages = [
        PackageInput(spec=load_spec_or_exit(path), entry_path=str(path), source_files=[str(path)])
        for path in spec_paths
    ]

    with Progress(
        TextColumn("[cyan]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        console=console,
        transient=True,
        disable=as_json,
    ) as progress:
        task = progress.add_task("Analyzing", total=len(packages))
        analyzer = BatchAnalyzer(
            Path(settings.checkpoint_dir) if settings.checkpoint_dir else None,
            prefix=settings.checkpoint_prefix,
            yield_every=settings.yield_every,
            checkpoint_every=settings.checkpoint_every,
            cache=SpecCache(settings.cache_path) if use_cache else None,
            history=HistoryTracker(settings.history_path) if record else None,
            on_progress=lambda current, total, label: progress.update(task, completed=current, description=label),
            requirements=requirements,
            weights=HealthWeights.from_settings(settings),
        )
        try:
            result = asyncio.run(analyzer.analyze_packages_async(packages, resume=resume))
        except DocDriftError as e:
            raise report_error(e)
        except ValueError as e:
            raise fail(str(e))

    if as_json:
        print_json(result.to_json())
    else:
        if analyzer.resumed_count:
            console.print(f"[dim]Resumed: {analyzer.resumed_count} package(s) taken from the checkpoint[/dim]")
        _render(result)


@batch_app.command(name="cleanup")
def cleanup_command(
    ctx: typer.Context,
    max_age_seconds: Optional[int] = typer.Option(None, "--max-age", min=0, help="Minimum checkpoint age in seconds"),
) -> None:
    """Delete checkpoints left behind by crashed runs."""
    settings = get_settings(ctx)
    directory = Path(settings.checkpoint_dir) if settings.checkpoint_dir else Path(tempfile.gettempdir())
    removed = cleanup_orphaned_temp_files(
        directory,
        settings.checkpoint_prefix,
        max_age_seconds if max_age_seconds is not None else settings.orphan_max_age_seconds,
    )
    console.print(f"Removed {removed} orphaned checkpoint(s) from {directory}")


def _render(result: BatchResult) -> None:
    table = Table(title="Packages")
    table.add_column("Package", style="cyan")
    table.add_column("Version", style="dim")
    table.add_column("Exports", justify="right")
    table.add_column("Documented", justify="right")
    table.add_column("Coverage", justify="right")
    table.add_column("Drift", justify="right")
    table.add_column("Health", justify="right")
    for package in result.packages:
        color = score_color(package.health)
        table.add_row(
            package.name,
            package.version or "-",
            str(package.total_exports),
            str(package.documented),
            str(package.coverage_score),
            str(package.drift_count),
            f"[{color}]{package.health}[/{color}]",
        )
    console.print(table)

    aggregate = result.aggregate
    color = score_color(aggregate.health)
    console.print(
        f"\n[bold]Aggregate health:[/bold] [{color}]{aggregate.health}[/{color}]  "
        f"[dim]coverage {aggregate.coverage_score} · {aggregate.documented}/{aggregate.total_exports} documented · "
        f"{aggregate.drift_count} drift[/dim]"
    )
