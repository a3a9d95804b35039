"""Merge external example validation results into drift issues."""

from typing import Iterable, List

from docdrift.drift.domain.enums import DriftType
from docdrift.drift.domain.models import DriftIssue, ExampleResult

ERROR_KIND_TYPES = {
    "syntax": DriftType.EXAMPLE_SYNTAX_ERROR,
    "runtime": DriftType.EXAMPLE_RUNTIME_ERROR,
    "assertion": DriftType.EXAMPLE_ASSERTION_FAILED,
}


def example_drift_type(error_kind) -> DriftType:
    return ERROR_KIND_TYPES.get((error_kind or "").lower(), DriftType.EXAMPLE_DRIFT)


def detect_example_issues(results: Iterable[ExampleResult]) -> List[DriftIssue]:
    """One issue per failed example, ordered by example index."""
    issues: List[DriftIssue] = []
    for result in sorted(results, key=lambda r: r.example_index):
        if result.passed:
            continue
        detail = result.error or "example failed"
        issues.append(
            DriftIssue.create(
                example_drift_type(result.error_kind),
                f"Example {result.example_index + 1} failed: {detail}",
                target=f"example[{result.example_index}]",
                suggestion="Update the example to match the current API",
            )
        )
    return issues
