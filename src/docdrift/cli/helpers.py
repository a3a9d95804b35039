"""
Shared CLI plumbing: settings lookup, input loading and error exits.

Commands never compute anything themselves; they load inputs, call the
engine and render its results.
"""

import json
from pathlib import Path
from typing import Any, Iterable, List, Optional

import typer
from rich.console import Console

from docdrift.drift.domain.models import ExampleResult, MarkdownFile
from docdrift.health.domain.presets import DocRequirements, resolve_requirements
from docdrift.shared.domain.exceptions import DocDriftError
from docdrift.shared.infrastructure.config import Settings
from docdrift.shared.infrastructure.project_config import ProjectConfig, load_project_config
from docdrift.spec.application.loader import load_spec
from docdrift.spec.domain.models import ApiSpec

console = Console()
err_console = Console(stderr=True)

EXIT_FAILED = 1
EXIT_USAGE = 2


def get_settings(ctx: Optional[typer.Context]) -> Settings:
    if ctx is not None and isinstance(ctx.obj, Settings):
        return ctx.obj
    return Settings()


def fail(message: str, code: int = EXIT_USAGE) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {message}")
    return typer.Exit(code)


def report_error(error: DocDriftError) -> typer.Exit:
    return fail(str(error))


def load_spec_or_exit(path: Path) -> ApiSpec:
    try:
        return load_spec(path)
    except DocDriftError as e:
        details = e.context.get("errors") if e.context else None
        if details:
            for issue in details[:10]:
                err_console.print(f"  [dim]{issue}[/dim]")
        raise report_error(e)


def load_project_config_or_exit(project_root: Optional[Path] = None) -> ProjectConfig:
    try:
        return load_project_config(project_root=project_root or Path.cwd())
    except DocDriftError as e:
        raise report_error(e)


def load_example_results(path: Optional[Path]) -> Optional[List[ExampleResult]]:
    """Example validator output: a JSON list of ``{exportId, exampleIndex, passed, ...}``."""
    if path is None:
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise ValueError("expected a JSON list")
        return [ExampleResult.from_json(item) for item in data]
    except (OSError, ValueError, TypeError, AttributeError) as e:
        raise fail(f"Cannot read example results {path}: {e}")


def collect_markdown_files(
    patterns: Iterable[str],
    exclude: Iterable[str] = (),
    root: Optional[Path] = None,
) -> List[MarkdownFile]:
    root = root or Path.cwd()
    excluded = {p for pattern in exclude for p in root.glob(pattern)}
    seen = set()
    files = []
    for pattern in patterns:
        for path in sorted(root.glob(pattern)):
            if path in seen or path in excluded or not path.is_file():
                continue
            seen.add(path)
            files.append(MarkdownFile(path=str(path.relative_to(root)), content=path.read_text(encoding="utf-8")))
    return files


def resolve_requirements_or_exit(style: Optional[str], project: ProjectConfig, settings: Settings) -> DocRequirements:
    try:
        return resolve_requirements(style or project.style or settings.style, project.require.overrides())
    except ValueError as e:
        raise fail(str(e))


def print_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


def score_color(score: int) -> str:
    if score >= 80:
        return "green"
    if score >= 60:
        return "yellow"
    return "red"
