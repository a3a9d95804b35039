"""Health and drift report models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from docdrift.drift.domain.models import DriftIssue
from docdrift.shared.domain.base_model import BaseDomainModel

MISSING_RULES = ("description", "params", "returns", "throws", "examples")


def empty_missing_counts() -> Dict[str, int]:
    return {rule: 0 for rule in MISSING_RULES}


@dataclass
class CompletenessMetrics(BaseDomainModel):
    """
    ``score`` is the share of documented exports; ``coverage_score`` is the
    mean per-export coverage under the active style preset.
    """

    score: int
    documented: int
    total: int
    coverage_score: int = 100
    missing: Dict[str, int] = field(default_factory=empty_missing_counts)


@dataclass
class AccuracyMetrics(BaseDomainModel):
    score: int
    issues: int
    by_category: Dict[str, int] = field(default_factory=dict)


@dataclass
class ExampleMetrics(BaseDomainModel):
    score: int
    passed: int
    failed: int
    total: int


@dataclass
class DocumentationHealth(BaseDomainModel):
    score: int
    completeness: CompletenessMetrics
    accuracy: AccuracyMetrics
    examples: Optional[ExampleMetrics] = None


@dataclass
class ExportAnalysis(BaseDomainModel):
    """Coverage and drift of one overload group (one exported name)."""

    export_id: str
    name: str
    coverage_score: int
    documented: bool
    missing: List[str] = field(default_factory=list)
    drift: List[DriftIssue] = field(default_factory=list)
    overload_count: Optional[int] = None


@dataclass
class ReportSource(BaseDomainModel):
    package_name: str
    package_version: Optional[str] = None
    file: Optional[str] = None


@dataclass
class DriftCounts(BaseDomainModel):
    total: int = 0
    by_category: Dict[str, int] = field(default_factory=dict)


@dataclass
class DriftSummary(BaseDomainModel):
    score: int
    total_exports: int
    documented_exports: int
    missing_by_rule: Dict[str, int]
    drift: DriftCounts
    health: DocumentationHealth


@dataclass
class DriftReport(BaseDomainModel):
    """Versioned report document (``version`` guards the layout)."""

    version: str
    source: ReportSource
    generated_at: datetime
    summary: DriftSummary
    exports: Dict[str, ExportAnalysis] = field(default_factory=dict)
    prose: Dict[str, List[DriftIssue]] = field(default_factory=dict)
