"""
History Commands - health over time.

    docdrift history show [--package NAME] [--window N] [--weekly]
    docdrift history prune [--max-entries N] [--max-age-days N]
"""

from typing import Optional

import typer
from rich.table import Table

from docdrift.cli.helpers import console, get_settings, print_json, report_error, score_color
from docdrift.history.application.tracker import (
    HistoryTracker,
    format_delta,
    generate_weekly_summaries,
    get_extended_trend,
)
from docdrift.shared.domain.exceptions import DocDriftError

history_app = typer.Typer(
    name="history",
    help="Inspect and prune health history",
    no_args_is_help=True,
)


@history_app.command(name="show")
def show_command(
    ctx: typer.Context,
    package: Optional[str] = typer.Option(None, "--package", "-p", help="Only this package"),
    window: int = typer.Option(10, "--window", "-n", min=1, help="Snapshots to include in the trend"),
    weekly: bool = typer.Option(False, "--weekly", help="Show weekly summaries"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON"),
) -> None:
    """Show the health trend."""
    tracker = HistoryTracker(get_settings(ctx).history_path)
    try:
        snapshots = tracker.load_snapshots(package)
    except DocDriftError as e:
        raise report_error(e)

    trend = get_extended_trend(snapshots, window)
    weeks = generate_weekly_summaries(snapshots) if weekly else []

    if as_json:
        print_json(
            {
                "snapshots": [s.to_json() for s in snapshots[-window:]],
                "trend": trend.to_json() if trend else None,
                "weekly": [w.to_json() for w in weeks],
            }
        )
        return
    if trend is None:
        console.print("[yellow]No history recorded yet.[/yellow]")
        console.print("[dim]Run 'docdrift health <spec> --record' to record a snapshot.[/dim]")
        return

    color = score_color(trend.trend.current)
    console.print(
        f"[bold {color}]{trend.trend.current}[/bold {color}] "
        f"{format_delta(trend.trend.delta)} ({trend.trend.direction.value})  {trend.sparkline}"
    )
    console.print(
        f"[dim]min {trend.min} · max {trend.max} · avg {trend.average} · "
        f"{trend.velocity:+.2f}/snapshot over {trend.samples}[/dim]"
    )

    table = Table(title="Recent snapshots")
    table.add_column("Date")
    table.add_column("Package", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Documented", justify="right")
    table.add_column("Drift", justify="right")
    for snapshot in snapshots[-window:]:
        table.add_row(
            snapshot.timestamp.strftime("%Y-%m-%d %H:%M"),
            snapshot.package or "-",
            str(snapshot.score),
            f"{snapshot.documented}/{snapshot.total_exports}",
            str(snapshot.drift_count),
        )
    console.print(table)

    if weeks:
        week_table = Table(title="Weekly")
        week_table.add_column("Week of")
        week_table.add_column("Avg", justify="right")
        week_table.add_column("Range", justify="right")
        week_table.add_column("Δ", justify="right")
        for week in weeks:
            week_table.add_row(str(week.week_start), str(week.average), f"{week.min}-{week.max}", format_delta(week.delta))
        console.print(week_table)


@history_app.command(name="prune")
def prune_command(
    ctx: typer.Context,
    max_entries: Optional[int] = typer.Option(None, "--max-entries", min=1, help="Keep at most this many snapshots"),
    max_age_days: Optional[int] = typer.Option(None, "--max-age-days", min=1, help="Drop snapshots older than this"),
) -> None:
    """Drop old snapshots (defaults come from settings)."""
    settings = get_settings(ctx)
    tracker = HistoryTracker(settings.history_path)
    try:
        result = tracker.prune_history(
            max_entries if max_entries is not None else settings.history_max_entries,
            max_age_days if max_age_days is not None else settings.history_max_age_days,
        )
    except DocDriftError as e:
        raise report_error(e)
    console.print(f"Kept {result.kept} snapshot(s), removed {result.removed}.")
