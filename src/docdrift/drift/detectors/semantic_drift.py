"""Deprecation, visibility, async and ``{@link}`` drift."""

from typing import Iterable, List, Optional

from docdrift.drift.detectors.tag_parser import RETURN_TAGS, VISIBILITY_TAGS, extract_links, parse_typed_tag
from docdrift.drift.detectors.type_text import is_promise, render_schema
from docdrift.drift.domain.enums import DriftType
from docdrift.drift.domain.models import DriftIssue
from docdrift.drift.domain.registry import ExportRegistry
from docdrift.shared.utils.fuzzy import find_closest_match
from docdrift.spec.domain.models import ApiExport, ApiTag

# Globals a link may point at without being part of the package
BUILTIN_LINK_TARGETS = frozenset(
    {
        "Array", "ArrayBuffer", "BigInt", "Boolean", "Date", "Error", "Function", "Iterable",
        "Iterator", "JSON", "Map", "Math", "Number", "Object", "Partial", "Promise", "Readonly",
        "Record", "RegExp", "Set", "String", "Symbol", "TypeError", "URL", "Uint8Array",
        "WeakMap", "WeakSet",
    }
)


def _documented_visibility(tags: Iterable[ApiTag]) -> Optional[str]:
    for tag in tags:
        if tag.name in VISIBILITY_TAGS:
            return tag.name
        if tag.name == "access" and tag.text.strip().lower() in VISIBILITY_TAGS:
            return tag.text.strip().lower()
    return None


def detect_deprecated_drift(export: ApiExport) -> List[DriftIssue]:
    """``@deprecated`` on an export explicitly marked as not deprecated."""
    if export.has_tag("deprecated") and export.deprecated is False:
        return [
            DriftIssue.create(
                DriftType.DEPRECATED_MISMATCH,
                f"{export.name} is documented as @deprecated but is not deprecated in code",
                target=export.name,
                suggestion="Remove the @deprecated tag or deprecate the export",
            )
        ]
    return []


def detect_visibility_drift(export: ApiExport) -> List[DriftIssue]:
    """Documented ``@public/@protected/@private`` against extracted access."""
    issues: List[DriftIssue] = []

    documented = _documented_visibility(export.tags)
    actual = export.flags.access.value if export.flags.access else None
    if documented and actual and documented != actual:
        issues.append(
            DriftIssue.create(
                DriftType.VISIBILITY_MISMATCH,
                f"{export.name} is documented as @{documented} but is {actual}",
                target=export.name,
                suggestion=f"Change the tag to @{actual}",
            )
        )

    for member in export.members:
        documented = _documented_visibility(member.tags)
        actual = (member.visibility or "").lower() or None
        if documented and actual and documented != actual:
            target = f"{export.name}.{member.name}" if member.name else export.name
            issues.append(
                DriftIssue.create(
                    DriftType.VISIBILITY_MISMATCH,
                    f"{target} is documented as @{documented} but is {actual}",
                    target=target,
                    suggestion=f"Change the tag to @{actual}",
                )
            )
    return issues


def detect_async_mismatch(export: ApiExport) -> List[DriftIssue]:
    """
    ``async-mismatch`` when the docs and the code disagree about async-ness.

    Raised for ``@async`` on a function that returns no Promise, and for an
    async-flagged function whose ``@returns`` type is not a Promise.
    """
    return_types = [render_schema(s.returns.type_schema) for s in export.signatures if s.returns]
    known_returns = [t for t in return_types if t]

    if export.has_tag("async") and known_returns and not any(is_promise(t) for t in known_returns):
        return [
            DriftIssue.create(
                DriftType.ASYNC_MISMATCH,
                f"{export.name} is documented as @async but returns {known_returns[0]}",
                target=export.name,
                suggestion="Remove the @async tag",
            )
        ]

    if export.is_async:
        for tag in export.all_tags():
            if tag.name not in RETURN_TAGS:
                continue
            documented, _ = parse_typed_tag(tag)
            if documented and not is_promise(documented):
                return [
                    DriftIssue.create(
                        DriftType.ASYNC_MISMATCH,
                        f"{export.name} is async but @returns documents {{{documented}}}",
                        target=export.name,
                        suggestion=f"Document the return type as {{Promise<{documented}>}}",
                    )
                ]
    return []


def _link_texts(export: ApiExport) -> Iterable[str]:
    if export.description:
        yield export.description
    for tag in export.all_tags():
        if tag.text:
            yield tag.text


def link_target_exists(target: str, registry: ExportRegistry, module_graph=None) -> bool:
    if registry.has(target) or target in BUILTIN_LINK_TARGETS:
        return True
    return module_graph is not None and module_graph.has(target)


def detect_broken_links(export: ApiExport, registry: Optional[ExportRegistry], module_graph=None) -> List[DriftIssue]:
    """``broken-link`` for ``{@link X}`` targets the registry does not know."""
    if registry is None:
        return []

    issues: List[DriftIssue] = []
    seen = set()
    for text in _link_texts(export):
        for target in extract_links(text):
            if target in seen:
                continue
            seen.add(target)
            root, _, member = target.partition(".")
            if not link_target_exists(root, registry, module_graph):
                match = find_closest_match(root, registry.all_names())
                issues.append(
                    DriftIssue.create(
                        DriftType.BROKEN_LINK,
                        f"{{@link {target}}} references '{root}', which is not exported",
                        target=target,
                        suggestion=f"Did you mean '{match}'?" if match else None,
                    )
                )
                continue
            if not member:
                continue
            member = member.split(".", 1)[0].split("#", 1)[0]
            known = registry.members_of(root)
            if known is not None and member not in known:
                match = find_closest_match(member, known)
                issues.append(
                    DriftIssue.create(
                        DriftType.BROKEN_LINK,
                        f"{{@link {target}}} references member '{member}', which does not exist on {root}",
                        target=target,
                        suggestion=f"Did you mean '{root}.{match}'?" if match else None,
                    )
                )
    return issues
