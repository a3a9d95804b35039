"""
docdrift CLI
Main entry point for the command-line interface

Usage:
    docdrift drift <spec>                 # Documentation that contradicts the API
    docdrift diff <old> <new>             # API changes between two specs
    docdrift breaking <old> <new>         # Breaking changes by severity
    docdrift semver <old> <new>           # Recommended version bump
    docdrift health <spec>                # Documentation health score
    docdrift history show                 # Health trend
    docdrift batch run <spec>...          # Many packages, resumable
    docdrift cache status                 # Spec cache status
"""

import typer
from rich.console import Console
from rich.panel import Panel

from docdrift import __version__
from docdrift.cli.commands.batch import batch_app
from docdrift.cli.commands.cache import cache_app
from docdrift.cli.commands.diff import breaking_command, diff_command, semver_command
from docdrift.cli.commands.drift import drift_command
from docdrift.cli.commands.health import health_command
from docdrift.cli.commands.history import history_app
from docdrift.shared.infrastructure.config import Settings
from docdrift.shared.infrastructure.logging import configure_logging

app = typer.Typer(
    name="docdrift",
    help="docdrift - documentation drift, API diff and documentation health",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    settings = Settings()
    if verbose:
        settings = settings.model_copy(update={"log_level": "DEBUG"})
    configure_logging(settings)
    ctx.obj = settings


# Register commands
app.command(name="drift")(drift_command)
app.command(name="diff")(diff_command)
app.command(name="breaking")(breaking_command)
app.command(name="semver")(semver_command)
app.command(name="health")(health_command)
app.add_typer(history_app, name="history", help="Inspect and prune health history")
app.add_typer(batch_app, name="batch", help="Analyze several packages at once")
app.add_typer(cache_app, name="cache", help="Manage the spec cache")


@app.command()
def version() -> None:
    """Show docdrift version information"""
    console.print(Panel.fit(
        f"[bold cyan]docdrift[/bold cyan]\n[dim]Version:[/dim] {__version__}",
        title="About docdrift",
        border_style="cyan",
    ))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
