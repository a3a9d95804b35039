"""Return, throws, generic constraint and property type drift."""

from typing import List, Optional

from docdrift.drift.detectors.tag_parser import (
    PROPERTY_TAGS,
    RETURN_TAGS,
    THROWS_TAGS,
    parse_property_tag,
    parse_template_tag,
    parse_typed_tag,
)
from docdrift.drift.detectors.type_text import (
    normalize_type_text,
    promise_inner,
    render_schema,
    types_compatible,
)
from docdrift.drift.domain.enums import DriftType
from docdrift.drift.domain.models import DriftIssue
from docdrift.spec.domain.models import ApiExport, ApiSignature


def _return_type(signature: ApiSignature) -> Optional[str]:
    return render_schema(signature.returns.type_schema) if signature.returns else None


def _return_scopes(export: ApiExport):
    export_docs = [parse_typed_tag(t)[0] for t in export.tags if t.name in RETURN_TAGS]
    scopes = []
    if export_docs:
        scopes.append((export_docs, export.signatures))
    for signature in export.signatures:
        own = [parse_typed_tag(t)[0] for t in signature.tags if t.name in RETURN_TAGS]
        if own:
            scopes.append((own, [signature]))
    return scopes


def _return_matches(documented: str, actual: str) -> bool:
    if types_compatible(documented, actual):
        return True
    # documenting the resolved value of a Promise is a common convention;
    # async-mismatch reports it when the export is flagged async
    inner = promise_inner(actual)
    return inner is not None and types_compatible(documented, inner)


def detect_return_type_drift(export: ApiExport) -> List[DriftIssue]:
    """``return-type-mismatch`` for ``@returns`` and ``@throws`` contradictions."""
    issues: List[DriftIssue] = []

    for documented_types, signatures in _return_scopes(export):
        actual_types = [t for t in (_return_type(s) for s in signatures) if t]
        for documented in documented_types:
            if not documented or not actual_types:
                continue
            if any(_return_matches(documented, actual) for actual in actual_types):
                continue
            issues.append(
                DriftIssue.create(
                    DriftType.RETURN_TYPE_MISMATCH,
                    f"@returns is documented as {{{documented}}} but {export.name} returns {actual_types[0]}",
                    target="returns",
                    suggestion=f"Update the return type to {{{actual_types[0]}}}",
                )
            )

    declared = {normalize_type_text(t.type) for sig in export.signatures for t in sig.throws if t.type}
    if declared:
        reported = set()
        for tag in export.all_tags():
            if tag.name not in THROWS_TAGS:
                continue
            documented, _ = parse_typed_tag(tag)
            if not documented:
                continue
            normalized = normalize_type_text(documented)
            if normalized in declared or normalized in reported:
                continue
            reported.add(normalized)
            issues.append(
                DriftIssue.create(
                    DriftType.RETURN_TYPE_MISMATCH,
                    f"@throws {{{documented}}} is not among the errors {export.name} declares",
                    target=documented,
                    suggestion=f"Declared errors: {', '.join(sorted(declared))}",
                )
            )
    return issues


def detect_generic_constraint_drift(export: ApiExport) -> List[DriftIssue]:
    """``generic-constraint-mismatch`` for ``@template`` constraints."""
    constraints = {}
    for type_param in export.type_parameters:
        constraints.setdefault(type_param.name, render_schema(type_param.constraint))
    for signature in export.signatures:
        for type_param in signature.type_parameters:
            constraints.setdefault(type_param.name, render_schema(type_param.constraint))

    issues: List[DriftIssue] = []
    for tag in export.all_tags():
        if tag.name != "template":
            continue
        for name, documented in parse_template_tag(tag):
            actual = constraints.get(name)
            if not documented or not actual or types_compatible(documented, actual):
                continue
            issues.append(
                DriftIssue.create(
                    DriftType.GENERIC_CONSTRAINT_MISMATCH,
                    f"@template {name} is documented as extending {documented} but is constrained to {actual}",
                    target=name,
                    suggestion=f"Update the constraint to {actual}",
                )
            )
    return issues


def _property_types(export: ApiExport) -> dict:
    types = {}
    schema = export.type_schema
    if isinstance(schema, dict) and isinstance(schema.get("properties"), dict):
        for name, prop_schema in schema["properties"].items():
            types[name] = render_schema(prop_schema)
    for member in export.members:
        if member.name and member.type_schema is not None:
            types.setdefault(member.name, render_schema(member.type_schema))
    return types


def detect_property_type_drift(export: ApiExport) -> List[DriftIssue]:
    """``property-type-drift`` for ``@property {T} name`` against member schemas."""
    documented = [p for p in (parse_property_tag(t) for t in export.tags if t.name in PROPERTY_TAGS) if p]
    if not documented:
        return []
    actual_types = _property_types(export)

    issues: List[DriftIssue] = []
    for prop in documented:
        actual = actual_types.get(prop.name)
        if not prop.type or not actual or types_compatible(prop.type, actual):
            continue
        issues.append(
            DriftIssue.create(
                DriftType.PROPERTY_TYPE_DRIFT,
                f"@property {prop.name} is documented as {{{prop.type}}} but is {actual}",
                target=prop.name,
                suggestion=f"Update the type to {{{actual}}}",
            )
        )
    return issues
