"""
Drift rule engine.

compute_drift is a pure function of its inputs: no I/O, no shared state.
Missing documentation never produces an issue here (that is a coverage
gap, scored by the health module); only documentation that contradicts
the extracted API does.
"""

from typing import Dict, Iterable, List, Optional

import structlog

from docdrift.drift.application.module_graph import ModuleGraph
from docdrift.drift.detectors.example_drift import detect_example_issues
from docdrift.drift.detectors.param_drift import (
    detect_optionality_drift,
    detect_param_drift,
    detect_param_type_drift,
)
from docdrift.drift.detectors.prose_drift import detect_prose_drift
from docdrift.drift.detectors.semantic_drift import (
    detect_async_mismatch,
    detect_broken_links,
    detect_deprecated_drift,
    detect_visibility_drift,
)
from docdrift.drift.detectors.type_drift import (
    detect_generic_constraint_drift,
    detect_property_type_drift,
    detect_return_type_drift,
)
from docdrift.drift.domain.models import PROSE_KEY_PREFIX, DriftIssue, DriftResult, ExampleResult, MarkdownFile
from docdrift.drift.domain.registry import ExportRegistry, build_export_registry
from docdrift.spec.domain.models import ApiExport, ApiSpec

logger = structlog.get_logger(__name__)

TAG_DETECTORS = (
    detect_param_drift,
    detect_optionality_drift,
    detect_param_type_drift,
    detect_return_type_drift,
    detect_generic_constraint_drift,
    detect_deprecated_drift,
    detect_visibility_drift,
    detect_async_mismatch,
    detect_property_type_drift,
)


def _has_signature_tags(export: ApiExport) -> bool:
    return any(sig.tags for sig in export.signatures)


def compute_export_drift(
    export: ApiExport,
    registry: Optional[ExportRegistry] = None,
    module_graph: Optional[ModuleGraph] = None,
    example_results: Iterable[ExampleResult] = (),
) -> List[DriftIssue]:
    """Drift issues for a single export."""
    issues: List[DriftIssue] = []
    has_tags = bool(export.tags) or _has_signature_tags(export)

    if has_tags:
        for detector in TAG_DETECTORS:
            issues.extend(detector(export))
    if export.description or has_tags:
        issues.extend(detect_broken_links(export, registry, module_graph))
    issues.extend(detect_example_issues(example_results))

    if export.source and export.source.file:
        for issue in issues:
            if issue.file_path is None:
                issue.file_path = export.source.file
                issue.line = issue.line or export.source.line
    return issues


def group_example_results(example_results: Optional[Iterable[ExampleResult]]) -> Dict[str, List[ExampleResult]]:
    grouped: Dict[str, List[ExampleResult]] = {}
    for result in example_results or ():
        grouped.setdefault(result.export_id, []).append(result)
    return grouped


def compute_drift(
    spec: ApiSpec,
    *,
    example_results: Optional[Iterable[ExampleResult]] = None,
    markdown_files: Optional[Iterable[MarkdownFile]] = None,
    module_graph: Optional[ModuleGraph] = None,
) -> DriftResult:
    """
    Compute drift for every export of *spec*.

    Args:
        spec: The API spec to analyze
        example_results: Findings of the external example validator
        markdown_files: Markdown docs to cross-check (prose drift)
        module_graph: Other packages' symbols, for cross-package links

    Returns:
        DriftResult with an entry (possibly empty) for every export id, plus
        ``prose:<path>`` entries when markdown files were given.
    """
    registry = build_export_registry(spec)
    examples_by_export = group_example_results(example_results)

    result = DriftResult()
    for export in spec.exports:
        result.exports[export.id] = compute_export_drift(
            export,
            registry,
            module_graph,
            examples_by_export.get(export.id, ()),
        )

    if markdown_files:
        for path, issues in detect_prose_drift(markdown_files, registry, module_graph).items():
            result.exports[f"{PROSE_KEY_PREFIX}{path}"] = issues

    unknown = sorted(set(examples_by_export) - set(result.exports))
    if unknown:
        logger.warning("example_results_for_unknown_exports", spec=spec.identity, export_ids=unknown)

    logger.debug("drift_computed", spec=spec.identity, exports=len(spec.exports), issues=result.total_issues)
    return result
