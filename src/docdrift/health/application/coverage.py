"""
Per-export documentation coverage.

Coverage is scored in points (description 30, params 25, returns 20,
throws 10, examples 15). Only the rules the style preset requires count
towards the maximum, except throws which counts whenever errors are
declared. An export with no required rules scores 100.

Overloads (several signatures, or several exports sharing a name) form one
group: the group scores as its best-covered overload and is counted once.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from docdrift.drift.detectors.tag_parser import PARAM_TAGS, RETURN_TAGS, parse_param_tag, parse_typed_tag
from docdrift.drift.domain.models import DriftResult
from docdrift.health.domain.models import ExportAnalysis
from docdrift.health.domain.presets import DEFAULT_REQUIREMENTS, DocRequirements
from docdrift.shared.utils.scoring import round_score
from docdrift.spec.domain.enums import ExportKind
from docdrift.spec.domain.models import ApiExport, ApiSignature, ApiSpec

DESCRIPTION_POINTS = 30
PARAMS_POINTS = 25
RETURNS_POINTS = 20
THROWS_POINTS = 10
EXAMPLES_POINTS = 15


@dataclass
class CoverageResult:
    score: int
    missing: List[str] = field(default_factory=list)
    documented: bool = False


def _has_text(text: Optional[str]) -> bool:
    return bool(text and text.strip())


def is_export_documented(export: ApiExport, signature: Optional[ApiSignature] = None) -> bool:
    """
    Documented means a description or at least one tag.

    Namespaces and modules count as documented only through their
    description, whatever their members carry.
    """
    description = export.description
    if signature is not None and _has_text(signature.description):
        description = signature.description
    if export.kind.is_container:
        return _has_text(description)
    if _has_text(description):
        return True
    return bool(export.tags) or (signature is not None and bool(signature.tags))


def _tag_param_descriptions(export: ApiExport, signature: ApiSignature) -> Dict[str, str]:
    described = {}
    for tag in list(export.tags) + list(signature.tags):
        if tag.name not in PARAM_TAGS:
            continue
        parsed = parse_param_tag(tag)
        if parsed and _has_text(parsed.description):
            described.setdefault(parsed.root_name, parsed.description)
    return described


def _returns_described(export: ApiExport, signature: ApiSignature) -> bool:
    if signature.returns and _has_text(signature.returns.description):
        return True
    for tag in list(export.tags) + list(signature.tags):
        if tag.name in RETURN_TAGS and _has_text(parse_typed_tag(tag)[1]):
            return True
    return False


def compute_signature_coverage(
    export: ApiExport,
    signature: Optional[ApiSignature],
    requirements: DocRequirements = DEFAULT_REQUIREMENTS,
) -> CoverageResult:
    """Coverage of one overload (or of a signature-less export)."""
    missing: List[str] = []
    points = 0
    max_points = 0

    description = export.description
    if signature is not None and _has_text(signature.description):
        description = signature.description
    if requirements.description:
        max_points += DESCRIPTION_POINTS
    if _has_text(description):
        points += DESCRIPTION_POINTS if requirements.description else 0
    else:
        missing.append("description")

    if export.kind.is_callable and signature is not None:
        params = signature.parameters
        if params:
            if requirements.params:
                max_points += PARAMS_POINTS
            from_tags = _tag_param_descriptions(export, signature)
            documented = [p for p in params if _has_text(p.description) or p.name in from_tags]
            if requirements.params:
                points += round_score(len(documented) / len(params) * PARAMS_POINTS)
            if len(documented) < len(params):
                missing.append("params")

        if export.kind is ExportKind.FUNCTION and signature.returns:
            if requirements.returns:
                max_points += RETURNS_POINTS
            if _returns_described(export, signature):
                points += RETURNS_POINTS if requirements.returns else 0
            else:
                missing.append("returns")

        if signature.throws:
            max_points += THROWS_POINTS
            if all(_has_text(t.description) for t in signature.throws):
                points += THROWS_POINTS
            else:
                missing.append("throws")

    if requirements.examples:
        max_points += EXAMPLES_POINTS
    if export.examples:
        points += EXAMPLES_POINTS if requirements.examples else 0
    else:
        missing.append("examples")

    score = round_score(points / max_points * 100) if max_points > 0 else 100
    return CoverageResult(score=score, missing=missing, documented=is_export_documented(export, signature))


def compute_export_coverage(
    export: ApiExport,
    requirements: DocRequirements = DEFAULT_REQUIREMENTS,
) -> CoverageResult:
    """Best coverage across the export's own signatures."""
    candidates = [compute_signature_coverage(export, sig, requirements) for sig in export.signatures]
    if not candidates:
        return compute_signature_coverage(export, None, requirements)
    return _best(candidates)


def _best(candidates: List[CoverageResult]) -> CoverageResult:
    # first wins on ties; a documented overload beats an undocumented one
    return max(candidates, key=lambda c: (c.score, c.documented))


def group_overloads(exports: Iterable[ApiExport]) -> Dict[str, List[ApiExport]]:
    """Group exports by name, keeping first-seen order."""
    groups: Dict[str, List[ApiExport]] = {}
    for export in exports:
        groups.setdefault(export.name, []).append(export)
    return groups


def included_exports(spec: ApiSpec) -> List[ApiExport]:
    """Exports that count for health (everything not tagged ``@internal``)."""
    return [e for e in spec.exports if not e.is_internal]


def analyze_group(
    name: str,
    group: List[ApiExport],
    drift_result: Optional[DriftResult] = None,
    requirements: DocRequirements = DEFAULT_REQUIREMENTS,
) -> ExportAnalysis:
    """
    Coverage and drift of one overload group.

    ``missing`` lists the best overload's missing rules; ``drift`` merges the
    issues of every export in the group.
    """
    scored = []
    for export in group:
        if export.signatures:
            scored.extend((export, compute_signature_coverage(export, s, requirements)) for s in export.signatures)
        else:
            scored.append((export, compute_signature_coverage(export, None, requirements)))
    best_export, best = max(scored, key=lambda pair: (pair[1].score, pair[1].documented))

    drift = []
    if drift_result is not None:
        for export in group:
            drift.extend(drift_result.issues_for(export.id))

    overload_count = len(scored)
    return ExportAnalysis(
        export_id=best_export.id,
        name=name,
        coverage_score=best.score,
        documented=best.documented,
        missing=list(best.missing),
        drift=drift,
        overload_count=overload_count if overload_count > 1 else None,
    )


def analyze_exports(
    spec: ApiSpec,
    drift_result: Optional[DriftResult] = None,
    requirements: DocRequirements = DEFAULT_REQUIREMENTS,
) -> Dict[str, ExportAnalysis]:
    """Coverage and drift per overload group, keyed by the best overload's id."""
    analyses: Dict[str, ExportAnalysis] = {}
    for name, group in group_overloads(included_exports(spec)).items():
        analysis = analyze_group(name, group, drift_result, requirements)
        analyses[analysis.export_id] = analysis
    return analyses
