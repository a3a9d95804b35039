"""
Documentation health scoring.

    completeness = documented / total            (overload groups, @internal excluded)
    accuracy     = 1 - drift issues / total      (clamped to 0..100)
    examples     = passed / validated examples   (only when validation ran)
    score        = weighted mean of the present components (HealthWeights)

An empty public surface scores 100 on completeness and accuracy.
"""

from typing import Dict, Iterable, List, Optional

import structlog

from docdrift.drift.domain.enums import DriftCategory
from docdrift.drift.domain.models import DriftResult, ExampleResult
from docdrift.health.application.coverage import analyze_exports, included_exports
from docdrift.health.domain.models import (
    AccuracyMetrics,
    CompletenessMetrics,
    DocumentationHealth,
    ExampleMetrics,
    ExportAnalysis,
    empty_missing_counts,
)
from docdrift.health.domain.presets import DEFAULT_REQUIREMENTS, DocRequirements
from docdrift.health.domain.weights import DEFAULT_HEALTH_WEIGHTS, HealthWeights
from docdrift.shared.utils.scoring import clamp_score, percentage, round_score, weighted_average
from docdrift.spec.domain.models import ApiSpec

logger = structlog.get_logger(__name__)


def compute_example_metrics(
    spec: ApiSpec,
    example_results: Optional[Iterable[ExampleResult]],
) -> Optional[ExampleMetrics]:
    """None when validation did not run or produced no records for this spec."""
    if example_results is None:
        return None
    included = {e.id for e in included_exports(spec)}
    results = [r for r in example_results if r.export_id in included]
    if not results:
        return None
    passed = sum(1 for r in results if r.passed)
    return ExampleMetrics(
        score=percentage(passed, len(results)),
        passed=passed,
        failed=len(results) - passed,
        total=len(results),
    )


def combine_scores(
    completeness: float,
    accuracy: float,
    examples: Optional[float],
    weights: HealthWeights = DEFAULT_HEALTH_WEIGHTS,
) -> int:
    pairs = [(completeness, weights.completeness), (accuracy, weights.accuracy)]
    if examples is not None:
        pairs.append((examples, weights.examples))
    combined = weighted_average(pairs)
    return round_score(clamp_score(combined if combined is not None else 100.0))


def health_from_analyses(
    analyses: Dict[str, ExportAnalysis],
    examples: Optional[ExampleMetrics] = None,
    weights: HealthWeights = DEFAULT_HEALTH_WEIGHTS,
) -> DocumentationHealth:
    """Health from already analyzed overload groups."""
    total = len(analyses)
    documented = sum(1 for a in analyses.values() if a.documented)

    missing = empty_missing_counts()
    for analysis in analyses.values():
        for rule in analysis.missing:
            missing[rule] = missing.get(rule, 0) + 1

    coverage_scores: List[int] = [a.coverage_score for a in analyses.values()]
    completeness = CompletenessMetrics(
        score=percentage(documented, total),
        documented=documented,
        total=total,
        coverage_score=round_score(sum(coverage_scores) / len(coverage_scores)) if coverage_scores else 100,
        missing=missing,
    )

    by_category = {category.value: 0 for category in DriftCategory}
    issues = 0
    for analysis in analyses.values():
        for issue in analysis.drift:
            by_category[issue.category.value] += 1
            issues += 1
    accuracy = AccuracyMetrics(
        score=round_score(clamp_score(100.0 * (1 - issues / max(total, 1)))),
        issues=issues,
        by_category=by_category,
    )

    score = combine_scores(
        completeness.score,
        accuracy.score,
        examples.score if examples else None,
        weights,
    )
    return DocumentationHealth(score=score, completeness=completeness, accuracy=accuracy, examples=examples)


def compute_health(
    spec: ApiSpec,
    drift_result: DriftResult,
    example_results: Optional[Iterable[ExampleResult]] = None,
    *,
    weights: HealthWeights = DEFAULT_HEALTH_WEIGHTS,
    requirements: Optional[DocRequirements] = None,
) -> DocumentationHealth:
    """Composite 0-100 documentation health of one spec."""
    analyses = analyze_exports(spec, drift_result, requirements or DEFAULT_REQUIREMENTS)
    health = health_from_analyses(analyses, compute_example_metrics(spec, example_results), weights)

    logger.debug(
        "health_computed",
        spec=spec.identity,
        score=health.score,
        completeness=health.completeness.score,
        accuracy=health.accuracy.score,
        examples=health.examples.score if health.examples else None,
    )
    return health
