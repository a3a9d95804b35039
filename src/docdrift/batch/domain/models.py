"""Batch analysis models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from docdrift.drift.domain.models import ExampleResult, MarkdownFile
from docdrift.health.domain.models import DocumentationHealth, ExportAnalysis
from docdrift.shared.domain.base_model import BaseDomainModel
from docdrift.spec.domain.models import ApiSpec


class RunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CRASHED = "crashed"


@dataclass(frozen=True)
class WorkItem:
    item_id: str
    label: str


@dataclass
class PackageInput:
    """One package to analyze in a batch run."""

    spec: ApiSpec
    entry_path: str
    example_results: Optional[List[ExampleResult]] = None
    source_files: Optional[List[str]] = None
    markdown_files: Optional[List[MarkdownFile]] = None

    @property
    def item_id(self) -> str:
        return f"{self.spec.meta.name}:{self.entry_path}"


@dataclass
class PackageResult(BaseDomainModel):
    name: str
    entry_path: str
    total_exports: int
    documented: int
    health: int
    drift_count: int
    coverage_score: int
    version: Optional[str] = None
    details: Optional[DocumentationHealth] = None


@dataclass
class BatchAggregate(BaseDomainModel):
    total_exports: int = 0
    documented: int = 0
    health: int = 100
    drift_count: int = 0
    coverage_score: int = 100


@dataclass
class BatchResult(BaseDomainModel):
    packages: List[PackageResult] = field(default_factory=list)
    aggregate: BatchAggregate = field(default_factory=BatchAggregate)


@dataclass
class ExportBatchResult(BaseDomainModel):
    """Per-group analysis of one spec, built export group by export group."""

    package_name: str
    run_id: str
    health: DocumentationHealth
    exports: Dict[str, ExportAnalysis] = field(default_factory=dict)
    package_version: Optional[str] = None


@dataclass
class CheckpointHeader(BaseDomainModel):
    """First line of a checkpoint log."""

    schema_version: str
    run_id: str
    pid: int
    started_at: datetime
    total_expected: int
    item_ids: List[str] = field(default_factory=list)
    type: str = "header"


@dataclass
class CheckpointRecord(BaseDomainModel):
    """One processed work item; ``data`` is the item's JSON result."""

    index: int
    item_id: str
    data: Any = None
    type: str = "result"


@dataclass
class PartialAnalysisState(BaseDomainModel):
    """What a checkpoint log holds: which items are done and their results."""

    run_id: str
    total_expected: int
    processed_ids: List[str] = field(default_factory=list)
    results: Dict[str, Any] = field(default_factory=dict)
    pid: Optional[int] = None

    @property
    def interrupted(self) -> bool:
        return len(self.processed_ids) < self.total_expected
