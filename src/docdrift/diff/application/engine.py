"""
Structural diff of two API specs.

Exports are matched by name (several exports with one name form an
overload group). Only the exports section is diffed; the ``types``
section is reachable through ``$ref`` and surfaces as schema changes of the
exports that use it.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import structlog

from docdrift.diff.domain.models import (
    BreakingSeverity,
    CategorizedBreaking,
    ChangeClass,
    ChangeReason,
    SpecDiff,
)
from docdrift.drift.detectors.type_text import is_complex, render_schema, union_members
from docdrift.spec.domain.models import ApiExport, ApiMember, ApiParameter, ApiSignature, ApiSpec

logger = structlog.get_logger(__name__)

MEDIUM_REASONS = frozenset({"param-added-required", "return-narrowed"})


@dataclass
class ExportChange:
    name: str
    classification: ChangeClass
    reasons: List[ChangeReason] = field(default_factory=list)

    @property
    def breaking_reasons(self) -> List[ChangeReason]:
        return [r for r in self.reasons if r.breaking]


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def _group_by_name(spec: ApiSpec) -> Dict[str, List[ApiExport]]:
    groups: Dict[str, List[ApiExport]] = {}
    for export in spec.exports:
        groups.setdefault(export.name, []).append(export)
    return groups


# -- fingerprints -------------------------------------------------------------


def _param_shape(param: ApiParameter) -> dict:
    return {"schema": param.type_schema, "required": param.required, "rest": param.rest, "name": param.name}


def _signature_shape(signature: ApiSignature) -> dict:
    return {
        "parameters": [_param_shape(p) for p in signature.parameters],
        "returns": signature.returns.type_schema if signature.returns else None,
        "typeParameters": [tp.model_dump(mode="json") for tp in signature.type_parameters],
        "throws": sorted(t.type or "" for t in signature.throws),
    }


def _member_shape(member: ApiMember) -> dict:
    return {
        "kind": member.kind,
        "schema": member.type_schema,
        "visibility": member.visibility,
        "signatures": [_signature_shape(s) for s in member.signatures],
    }


def structural_fingerprint(exports: Sequence[ApiExport]) -> str:
    return _canonical(
        [
            {
                "kind": e.kind.value,
                "schema": e.type_schema,
                "typeParameters": [tp.model_dump(mode="json") for tp in e.type_parameters],
                "signatures": [_signature_shape(s) for s in e.signatures],
                "members": sorted((_canonical(_member_shape(m)) for m in e.members)),
            }
            for e in exports
        ]
    )


def docs_fingerprint(exports: Sequence[ApiExport]) -> str:
    return _canonical(
        [
            {
                "description": e.description,
                "deprecated": e.deprecated,
                "tags": [t.model_dump(mode="json") for t in e.tags],
                "examples": e.examples,
                "signatures": [
                    {
                        "description": s.description,
                        "tags": [t.model_dump(mode="json") for t in s.tags],
                        "params": [p.description for p in s.parameters],
                        "returns": s.returns.description if s.returns else None,
                    }
                    for s in e.signatures
                ],
                "members": sorted(
                    _canonical([m.name, m.description, [t.model_dump(mode="json") for t in m.tags], m.deprecated])
                    for m in e.members
                ),
            }
            for e in exports
        ]
    )


# -- type relations -----------------------------------------------------------


def _type_relation(old_schema: Any, new_schema: Any) -> str:
    """
    Relation of two schemas: ``same``, ``widened``, ``narrowed`` or ``changed``.

    Widened means every member of the old union is still accepted by the new
    one (and the new one accepts more).
    """
    if _canonical(old_schema) == _canonical(new_schema):
        return "same"
    old_text, new_text = render_schema(old_schema), render_schema(new_schema)
    if not old_text or not new_text or is_complex(old_text) or is_complex(new_text):
        return "changed"
    old_members, new_members = set(union_members(old_text)), set(union_members(new_text))
    if old_members == new_members:
        return "same"
    if old_members < new_members:
        return "widened"
    if new_members < old_members:
        return "narrowed"
    return "changed"


def _compare_params(old: ApiParameter, new: ApiParameter, position: int) -> List[ChangeReason]:
    reasons: List[ChangeReason] = []
    label = f"parameter {position + 1} ({new.name})"
    relation = _type_relation(old.type_schema, new.type_schema)
    if relation == "widened":
        reasons.append(ChangeReason("param-widened", False, f"{label} accepts more types"))
    elif relation != "same":
        reasons.append(ChangeReason("param-type-changed", True, f"{label} changed type"))

    old_optional = not old.required or old.rest
    new_optional = not new.required or new.rest
    if old_optional and not new_optional:
        reasons.append(ChangeReason("param-now-required", True, f"{label} is now required"))
    elif not old_optional and new_optional:
        reasons.append(ChangeReason("param-now-optional", False, f"{label} is now optional"))
    if old.name != new.name:
        reasons.append(ChangeReason("param-renamed", False, f"parameter {position + 1} renamed {old.name} -> {new.name}"))
    return reasons


def compare_signatures(old: ApiSignature, new: ApiSignature) -> List[ChangeReason]:
    """Reasons a call valid against *old* may or may not be valid against *new*."""
    reasons: List[ChangeReason] = []
    for i in range(max(len(old.parameters), len(new.parameters))):
        old_param = old.parameters[i] if i < len(old.parameters) else None
        new_param = new.parameters[i] if i < len(new.parameters) else None
        if new_param is None:
            reasons.append(ChangeReason("param-removed", True, f"parameter {old_param.name} was removed"))
        elif old_param is None:
            if new_param.required and not new_param.rest:
                reasons.append(ChangeReason("param-added-required", True, f"required parameter {new_param.name} added"))
            else:
                reasons.append(ChangeReason("param-added-optional", False, f"optional parameter {new_param.name} added"))
        else:
            reasons.extend(_compare_params(old_param, new_param, i))

    old_returns = old.returns.type_schema if old.returns else None
    new_returns = new.returns.type_schema if new.returns else None
    relation = _type_relation(old_returns, new_returns)
    if relation == "widened":
        reasons.append(ChangeReason("return-widened", False, "return type accepts more values"))
    elif relation == "narrowed":
        reasons.append(ChangeReason("return-narrowed", True, "return type was narrowed"))
    elif relation == "changed":
        reasons.append(ChangeReason("return-changed", True, "return type changed"))

    if _canonical([tp.model_dump(mode="json") for tp in old.type_parameters]) != _canonical(
        [tp.model_dump(mode="json") for tp in new.type_parameters]
    ):
        reasons.append(ChangeReason("type-params-changed", True, "type parameters changed"))
    return reasons


def _compare_overloads(old_sigs: List[ApiSignature], new_sigs: List[ApiSignature]) -> List[ChangeReason]:
    reasons: List[ChangeReason] = []
    for index, old_sig in enumerate(old_sigs):
        comparisons = [compare_signatures(old_sig, new_sig) for new_sig in new_sigs]
        compatible = [c for c in comparisons if not any(r.breaking for r in c)]
        if compatible:
            reasons.extend(min(compatible, key=len))
        elif not new_sigs:
            reasons.append(ChangeReason("overload-removed", True, "all signatures were removed"))
        elif len(new_sigs) < len(old_sigs) and index >= len(new_sigs):
            reasons.append(ChangeReason("overload-removed", True, f"overload {index + 1} was removed"))
        else:
            reasons.extend(comparisons[min(index, len(new_sigs) - 1)])
    if len(new_sigs) > len(old_sigs) and old_sigs:
        reasons.append(ChangeReason("overload-added", False, f"{len(new_sigs) - len(old_sigs)} overload(s) added"))
    return reasons


def _member_key(member: ApiMember) -> str:
    return member.name or member.id or ""


def _compare_members(old_members: List[ApiMember], new_members: List[ApiMember]) -> List[ChangeReason]:
    reasons: List[ChangeReason] = []
    new_by_key = {_member_key(m): m for m in new_members}
    old_keys = set()
    for member in old_members:
        key = _member_key(member)
        old_keys.add(key)
        if (member.visibility or "").lower() == "private":
            continue
        other = new_by_key.get(key)
        if other is None:
            reasons.append(ChangeReason("member-removed", True, f"member {key} was removed"))
        elif _canonical(_member_shape(member)) != _canonical(_member_shape(other)):
            reasons.append(ChangeReason("member-changed", True, f"member {key} changed"))
    for key in sorted(set(new_by_key) - old_keys):
        reasons.append(ChangeReason("member-added", False, f"member {key} added"))
    return reasons


def compare_exports(name: str, old: Sequence[ApiExport], new: Sequence[ApiExport]) -> ExportChange:
    """Classify the change of one export name present in both specs."""
    if structural_fingerprint(old) == structural_fingerprint(new):
        if docs_fingerprint(old) == docs_fingerprint(new):
            return ExportChange(name, ChangeClass.UNCHANGED)
        return ExportChange(name, ChangeClass.DOCS_ONLY, [ChangeReason("docs-changed", False)])

    reasons: List[ChangeReason] = []
    old_kinds = sorted({e.kind.value for e in old})
    new_kinds = sorted({e.kind.value for e in new})
    if old_kinds != new_kinds:
        reasons.append(
            ChangeReason("kind-changed", True, f"kind changed from {', '.join(old_kinds)} to {', '.join(new_kinds)}")
        )
    else:
        reasons.extend(_compare_overloads([s for e in old for s in e.signatures], [s for e in new for s in e.signatures]))
        reasons.extend(_compare_members([m for e in old for m in e.members], [m for e in new for m in e.members]))
        old_schema = [e.type_schema for e in old if e.type_schema is not None]
        new_schema = [e.type_schema for e in new if e.type_schema is not None]
        if len(old_schema) == len(new_schema) == 1:
            relation = _type_relation(old_schema[0], new_schema[0])
            if relation == "widened":
                reasons.append(ChangeReason("type-widened", False, "type accepts more values"))
            elif relation != "same":
                reasons.append(ChangeReason("type-changed", True, "type changed"))
        elif _canonical(old_schema) != _canonical(new_schema):
            reasons.append(ChangeReason("type-changed", True, "type changed"))
        old_tps = [tp.model_dump(mode="json") for e in old for tp in e.type_parameters]
        new_tps = [tp.model_dump(mode="json") for e in new for tp in e.type_parameters]
        if _canonical(old_tps) != _canonical(new_tps):
            reasons.append(ChangeReason("type-params-changed", True, "type parameters changed"))

    if not reasons:
        reasons.append(ChangeReason("signature-changed", False, "signature changed compatibly"))
    if any(r.breaking for r in reasons):
        return ExportChange(name, ChangeClass.BREAKING, reasons)
    return ExportChange(name, ChangeClass.NON_BREAKING, reasons)


def diff_spec(old: ApiSpec, new: ApiSpec) -> SpecDiff:
    """
    Compare two specs export by export.

    Removal always wins: a removed name is breaking regardless of anything
    else.
    """
    old_groups, new_groups = _group_by_name(old), _group_by_name(new)
    diff = SpecDiff(
        added=sorted(set(new_groups) - set(old_groups)),
        removed=sorted(set(old_groups) - set(new_groups)),
    )
    diff.breaking.extend(diff.removed)

    for name in sorted(set(old_groups) & set(new_groups)):
        change = compare_exports(name, old_groups[name], new_groups[name])
        if change.classification is ChangeClass.UNCHANGED:
            continue
        diff.modified.append(name)
        if change.classification is ChangeClass.BREAKING:
            diff.breaking.append(name)
        elif change.classification is ChangeClass.NON_BREAKING:
            diff.non_breaking.append(name)
        else:
            diff.docs_only.append(name)

    diff.breaking.sort()
    logger.debug(
        "spec_diff_computed",
        old=old.identity,
        new=new.identity,
        added=len(diff.added),
        removed=len(diff.removed),
        breaking=len(diff.breaking),
    )
    return diff


def categorize_breaking_changes(breaking: Sequence[str], old: ApiSpec, new: ApiSpec) -> List[CategorizedBreaking]:
    """
    Severity and reason for each breaking name.

    ``high`` for removals, ``medium`` for a new required parameter or a
    narrowed return type, ``low`` for everything else. Sorted by severity,
    then name.
    """
    old_groups, new_groups = _group_by_name(old), _group_by_name(new)
    categorized: List[CategorizedBreaking] = []

    for name in dict.fromkeys(breaking):
        if name not in new_groups:
            categorized.append(CategorizedBreaking(name, BreakingSeverity.HIGH, "removed", f"{name} was removed"))
            continue
        if name not in old_groups:
            continue
        reasons = compare_exports(name, old_groups[name], new_groups[name]).breaking_reasons
        if not reasons:
            continue
        medium: Optional[ChangeReason] = next((r for r in reasons if r.reason in MEDIUM_REASONS), None)
        chosen = medium or reasons[0]
        severity = BreakingSeverity.MEDIUM if medium else BreakingSeverity.LOW
        categorized.append(CategorizedBreaking(name, severity, chosen.reason, chosen.detail))

    categorized.sort(key=lambda c: (c.severity.rank, c.name))
    return categorized
