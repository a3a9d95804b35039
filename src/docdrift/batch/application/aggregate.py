"""Per-package results and their aggregation."""

from typing import List

from docdrift.batch.domain.models import BatchAggregate, BatchResult, PackageResult
from docdrift.drift.domain.models import DriftResult
from docdrift.health.domain.models import DocumentationHealth
from docdrift.shared.utils.scoring import round_score
from docdrift.spec.domain.models import ApiSpec


def create_package_result(
    spec: ApiSpec,
    health: DocumentationHealth,
    drift_result: DriftResult,
    entry_path: str,
) -> PackageResult:
    prose_issues = sum(len(drift_result.issues_for(key)) for key in drift_result.prose_keys())
    return PackageResult(
        name=spec.meta.name,
        version=spec.meta.version,
        entry_path=entry_path,
        total_exports=health.completeness.total,
        documented=health.completeness.documented,
        health=health.score,
        drift_count=health.accuracy.issues + prose_issues,
        coverage_score=health.completeness.coverage_score,
        details=health,
    )


def aggregate_results(packages: List[PackageResult]) -> BatchResult:
    """
    Combine package results.

    Counts are summed. Health and coverage are averaged weighted by export
    count; packages without exports add nothing to the average, and when no
    package has exports both are 100.
    """
    weighted = [p for p in packages if p.total_exports > 0]
    total_weight = sum(p.total_exports for p in weighted)

    aggregate = BatchAggregate(
        total_exports=sum(p.total_exports for p in packages),
        documented=sum(p.documented for p in packages),
        drift_count=sum(p.drift_count for p in packages),
    )
    if total_weight > 0:
        aggregate.health = round_score(sum(p.health * p.total_exports for p in weighted) / total_weight)
        aggregate.coverage_score = round_score(sum(p.coverage_score * p.total_exports for p in weighted) / total_weight)
    return BatchResult(packages=list(packages), aggregate=aggregate)
