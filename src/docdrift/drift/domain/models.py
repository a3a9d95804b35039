"""
Drift domain models.

Issues and results are plain output models (camelCase JSON). Inputs from
the external collaborators (example validation, markdown docs) are modelled
here as well so detectors never read untyped dictionaries.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from docdrift.drift.domain.enums import DriftCategory, DriftType, category_of
from docdrift.shared.domain.base_model import BaseDomainModel

PROSE_KEY_PREFIX = "prose:"


@dataclass
class DriftIssue(BaseDomainModel):
    """A documented claim that contradicts the extracted API."""

    type: DriftType
    category: DriftCategory
    issue: str
    target: Optional[str] = None
    suggestion: Optional[str] = None
    file_path: Optional[str] = None
    line: Optional[int] = None

    @classmethod
    def create(
        cls,
        drift_type: DriftType,
        issue: str,
        *,
        target: Optional[str] = None,
        suggestion: Optional[str] = None,
        file_path: Optional[str] = None,
        line: Optional[int] = None,
    ) -> "DriftIssue":
        """Build an issue with its category taken from the fixed mapping."""
        return cls(
            type=drift_type,
            category=category_of(drift_type),
            issue=issue,
            target=target,
            suggestion=suggestion,
            file_path=file_path,
            line=line,
        )


@dataclass
class DriftResult(BaseDomainModel):
    """
    Drift issues keyed by export id.

    Every export of the analyzed spec has an entry (an empty list when the
    export is clean). Prose findings live under ``prose:<file path>`` keys.
    """

    exports: Dict[str, List[DriftIssue]] = field(default_factory=dict)

    def issues_for(self, export_id: str) -> List[DriftIssue]:
        return self.exports.get(export_id, [])

    def iter_issues(self) -> Iterator[DriftIssue]:
        for issues in self.exports.values():
            yield from issues

    @property
    def total_issues(self) -> int:
        return sum(len(issues) for issues in self.exports.values())

    def count_for(self, export_ids) -> int:
        """Issue count restricted to the given export ids."""
        return sum(len(self.exports.get(export_id, [])) for export_id in export_ids)

    def count_by_category(self) -> Dict[str, int]:
        counts = {category.value: 0 for category in DriftCategory}
        for issue in self.iter_issues():
            counts[issue.category.value] += 1
        return counts

    def count_by_type(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for issue in self.iter_issues():
            counts[issue.type.value] = counts.get(issue.type.value, 0) + 1
        return dict(sorted(counts.items()))

    def export_ids(self) -> List[str]:
        return [key for key in self.exports if not key.startswith(PROSE_KEY_PREFIX)]

    def prose_keys(self) -> List[str]:
        return [key for key in self.exports if key.startswith(PROSE_KEY_PREFIX)]


@dataclass
class ExampleResult(BaseDomainModel):
    """Outcome of running or typechecking one ``@example`` block."""

    export_id: str
    example_index: int
    passed: bool
    error: Optional[str] = None
    error_kind: Optional[str] = None


@dataclass
class MarkdownFile(BaseDomainModel):
    path: str
    content: str
