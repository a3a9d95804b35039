"""
Drift report documents.

A report bundles health, per-group analysis and prose findings of one spec
into a versioned JSON document. Loading rejects versions this build does
not know instead of guessing at their layout.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, Union

import structlog

from docdrift.drift.application.engine import compute_drift
from docdrift.drift.domain.models import DriftResult, ExampleResult, MarkdownFile
from docdrift.health.application.coverage import analyze_exports
from docdrift.health.application.scorer import compute_health
from docdrift.health.domain.models import DriftCounts, DriftReport, DriftSummary, ReportSource
from docdrift.health.domain.presets import DEFAULT_REQUIREMENTS, DocRequirements
from docdrift.health.domain.weights import DEFAULT_HEALTH_WEIGHTS, HealthWeights
from docdrift.shared.domain.exceptions import UnsupportedVersionError
from docdrift.shared.infrastructure.atomic_io import atomic_write_json
from docdrift.spec.domain.models import ApiSpec

logger = structlog.get_logger(__name__)

DRIFT_REPORT_VERSION = "1.0.0"
SUPPORTED_REPORT_VERSIONS = frozenset({DRIFT_REPORT_VERSION})


def build_drift_report(
    spec: ApiSpec,
    drift_result: Optional[DriftResult] = None,
    *,
    example_results: Optional[Iterable[ExampleResult]] = None,
    markdown_files: Optional[Iterable[MarkdownFile]] = None,
    requirements: Optional[DocRequirements] = None,
    weights: HealthWeights = DEFAULT_HEALTH_WEIGHTS,
    source_file: Optional[str] = None,
    now: Optional[datetime] = None,
) -> DriftReport:
    """
    Analyze *spec* and assemble a report.

    When *drift_result* is omitted, drift is computed here from the example
    results and markdown files.
    """
    example_results = list(example_results) if example_results is not None else None
    if drift_result is None:
        drift_result = compute_drift(spec, example_results=example_results, markdown_files=markdown_files)

    requirements = requirements or DEFAULT_REQUIREMENTS
    health = compute_health(spec, drift_result, example_results, weights=weights, requirements=requirements)
    analyses = analyze_exports(spec, drift_result, requirements)

    summary = DriftSummary(
        score=health.completeness.coverage_score,
        total_exports=health.completeness.total,
        documented_exports=health.completeness.documented,
        missing_by_rule=dict(health.completeness.missing),
        drift=DriftCounts(total=health.accuracy.issues, by_category=dict(health.accuracy.by_category)),
        health=health,
    )
    return DriftReport(
        version=DRIFT_REPORT_VERSION,
        source=ReportSource(package_name=spec.meta.name, package_version=spec.meta.version, file=source_file),
        generated_at=now or datetime.now(timezone.utc),
        summary=summary,
        exports=analyses,
        prose={key: drift_result.exports[key] for key in drift_result.prose_keys()},
    )


def save_drift_report(report: DriftReport, path: Union[str, Path]) -> None:
    atomic_write_json(path, report.to_json())
    logger.info("drift_report_saved", path=str(path), package=report.source.package_name)


def load_drift_report(path: Union[str, Path]) -> DriftReport:
    """
    Load a saved report.

    Raises:
        UnsupportedVersionError: If the report was written with an unknown version
        json.JSONDecodeError: If the file is not JSON
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    version = data.get("version") if isinstance(data, dict) else None
    if version not in SUPPORTED_REPORT_VERSIONS:
        raise UnsupportedVersionError(
            f"Unsupported drift report version {version!r} in {path}",
            context={"path": str(path), "version": version, "supported": sorted(SUPPORTED_REPORT_VERSIONS)},
        )
    return DriftReport.from_json(data)
