"""
Parameter drift: documented ``@param`` tags against real signatures.

Export-level tags are checked against the parameters of all overloads
together; tags attached to one signature are checked against that
signature only. A name is reported at most once per export
and detector. Undocumented parameters are a coverage gap and never
produce an issue here.
"""

from typing import Iterable, List, Optional, Sequence, Tuple

from docdrift.drift.detectors.tag_parser import PARAM_TAGS, DocumentedParam, parse_param_tag
from docdrift.drift.detectors.type_text import render_schema, types_compatible
from docdrift.drift.domain.enums import DriftType
from docdrift.drift.domain.models import DriftIssue
from docdrift.shared.utils.fuzzy import find_closest_match
from docdrift.spec.domain.models import ApiExport, ApiParameter, ApiSignature, ApiTag


def _documented_params(tags: Iterable[ApiTag]) -> List[DocumentedParam]:
    params, seen = [], set()
    for tag in tags:
        if tag.name not in PARAM_TAGS:
            continue
        parsed = parse_param_tag(tag)
        if parsed is None or parsed.name in seen:
            continue
        seen.add(parsed.name)
        params.append(parsed)
    return params


def _is_destructured(param: ApiParameter) -> bool:
    return param.name.startswith(("{", "[", "__"))


def param_scopes(export: ApiExport) -> List[Tuple[List[DocumentedParam], Sequence[ApiSignature]]]:
    """
    Pair each group of documented params with the signatures it describes.

    Exports without signatures have nothing to compare against.
    """
    if not export.signatures:
        return []
    scopes = [(_documented_params(export.tags), export.signatures)]
    for signature in export.signatures:
        own = _documented_params(signature.tags)
        if own:
            scopes.append((own, [signature]))
    return [(docs, sigs) for docs, sigs in scopes if docs]


def _params_named(signatures: Sequence[ApiSignature], name: str) -> List[ApiParameter]:
    return [p for sig in signatures for p in sig.parameters if p.name == name]


def detect_param_drift(export: ApiExport) -> List[DriftIssue]:
    """``param-mismatch`` for documented names missing from the signature."""
    issues: List[DriftIssue] = []
    # a name documented both on the export and on a signature is reported once
    reported = set()
    for documented, signatures in param_scopes(export):
        real_params = [p for sig in signatures for p in sig.parameters]
        real_names = sorted({p.name for p in real_params})
        if any(_is_destructured(p) for p in real_params):
            # documented names may be properties of a destructured argument
            continue
        for doc in documented:
            if doc.root_name in real_names or doc.root_name in reported:
                continue
            reported.add(doc.root_name)
            match = find_closest_match(doc.root_name, real_names)
            if match:
                suggestion = f"Did you mean '{match}'?"
            elif real_names:
                suggestion = f"Signature parameters are: {', '.join(real_names)}"
            else:
                suggestion = f"Remove @param {doc.root_name}; the signature takes no parameters"
            issues.append(
                DriftIssue.create(
                    DriftType.PARAM_MISMATCH,
                    f"@param {doc.root_name} does not match any parameter of {export.name}",
                    target=doc.root_name,
                    suggestion=suggestion,
                )
            )
    return issues


def detect_optionality_drift(export: ApiExport) -> List[DriftIssue]:
    """``optionality-mismatch`` when docs call a required parameter optional."""
    issues: List[DriftIssue] = []
    reported = set()
    for documented, signatures in param_scopes(export):
        for doc in documented:
            if not doc.optional or doc.is_nested or doc.name in reported:
                continue
            params = _params_named(signatures, doc.name)
            if params and all(p.required and p.default is None and not p.rest for p in params):
                reported.add(doc.name)
                issues.append(
                    DriftIssue.create(
                        DriftType.OPTIONALITY_MISMATCH,
                        f"@param {doc.name} is documented as optional but is required",
                        target=doc.name,
                        suggestion=f"Remove the brackets around {doc.name} or make the parameter optional",
                    )
                )
    return issues


def _actual_param_type(param: ApiParameter) -> Optional[str]:
    rendered = render_schema(param.type_schema)
    if rendered and param.rest and rendered.endswith("[]"):
        return rendered[:-2].strip("()")
    return rendered


def detect_param_type_drift(export: ApiExport) -> List[DriftIssue]:
    """``param-type-mismatch`` when a documented ``{type}`` contradicts the schema."""
    issues: List[DriftIssue] = []
    reported = set()
    for documented, signatures in param_scopes(export):
        for doc in documented:
            if not doc.type or doc.is_nested or doc.name in reported:
                continue
            doc_type = doc.type.lstrip(".")
            params = _params_named(signatures, doc.name)
            actual_types = [t for t in (_actual_param_type(p) for p in params) if t]
            if not actual_types:
                continue
            # one compatible overload is enough
            if any(types_compatible(doc_type, actual) for actual in actual_types):
                continue
            reported.add(doc.name)
            issues.append(
                DriftIssue.create(
                    DriftType.PARAM_TYPE_MISMATCH,
                    f"@param {doc.name} is documented as {{{doc.type}}} but the signature declares {actual_types[0]}",
                    target=doc.name,
                    suggestion=f"Update the type to {{{actual_types[0]}}}",
                )
            )
    return issues
