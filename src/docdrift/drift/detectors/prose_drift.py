"""
Prose drift: markdown documentation against the export registry.

Fenced code blocks are scanned for ``import { a, b as c } from '<pkg>'``
statements; imported names the package does not export are broken
references. ``X.y(`` calls in code and ``{@link X.y}`` in prose are checked
against the members known for ``X``.
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

from docdrift.drift.detectors.semantic_drift import link_target_exists
from docdrift.drift.detectors.tag_parser import extract_links
from docdrift.drift.domain.enums import DriftType
from docdrift.drift.domain.models import DriftIssue, MarkdownFile
from docdrift.drift.domain.registry import ExportRegistry
from docdrift.shared.utils.fuzzy import find_closest_match

_FENCE_RE = re.compile(r"^(```|~~~)[^\n]*\n(.*?)^\1[ \t]*$", re.MULTILINE | re.DOTALL)
_IMPORT_RE = re.compile(
    r"import\s+(?:type\s+)?(?:[\w$]+\s*,\s*)?\{(?P<names>[^}]*)\}\s*from\s*['\"](?P<source>[^'\"]+)['\"]"
)
_MEMBER_CALL_RE = r"\b{name}\.([\w$]+)\s*\("


@dataclass
class CodeBlock:
    code: str
    line_start: int


def extract_code_blocks(content: str) -> List[CodeBlock]:
    blocks = []
    for match in _FENCE_RE.finditer(content):
        line_start = content.count("\n", 0, match.start(2)) + 1
        blocks.append(CodeBlock(code=match.group(2), line_start=line_start))
    return blocks


def extract_named_imports(code: str, package_name: str) -> List[str]:
    """Names imported from *package_name* (or one of its subpaths)."""
    names = []
    for match in _IMPORT_RE.finditer(code):
        source = match.group("source")
        if source != package_name and not source.startswith(f"{package_name}/"):
            continue
        for spec in match.group("names").split(","):
            spec = spec.strip()
            if spec.startswith("type "):
                spec = spec[5:].strip()
            name = spec.split(" as ", 1)[0].strip()
            if name:
                names.append(name)
    return names


def _unresolved_member(root: str, member: str, registry: ExportRegistry, path: str, line: int) -> Optional[DriftIssue]:
    known = registry.members_of(root)
    if known is None or member in known:
        return None
    match = find_closest_match(member, known)
    return DriftIssue.create(
        DriftType.PROSE_UNRESOLVED_MEMBER,
        f"'{root}.{member}' is referenced in {path} but {root} has no member '{member}'",
        target=f"{root}.{member}",
        suggestion=f"Did you mean '{root}.{match}'?" if match else None,
        file_path=path,
        line=line,
    )


def _scan_file(file: MarkdownFile, registry: ExportRegistry, module_graph) -> List[DriftIssue]:
    issues: List[DriftIssue] = []
    package_name = registry.package_name

    for block in extract_code_blocks(file.content):
        imported = extract_named_imports(block.code, package_name) if package_name else []
        for name in dict.fromkeys(imported):
            if link_target_exists(name, registry, module_graph):
                continue
            match = find_closest_match(name, registry.all_names())
            issues.append(
                DriftIssue.create(
                    DriftType.PROSE_BROKEN_REFERENCE,
                    f"Import '{name}' from '{package_name}' does not exist in package exports",
                    target=name,
                    suggestion=f"Did you mean '{match}'?" if match else f"'{name}' is not exported from '{package_name}'",
                    file_path=file.path,
                    line=block.line_start,
                )
            )
        for name in dict.fromkeys(imported):
            if not registry.has(name):
                continue
            for member in dict.fromkeys(re.findall(_MEMBER_CALL_RE.format(name=re.escape(name)), block.code)):
                issue = _unresolved_member(name, member, registry, file.path, block.line_start)
                if issue:
                    issues.append(issue)

    for target in dict.fromkeys(extract_links(file.content)):
        root, _, member = target.partition(".")
        if member and registry.has(root):
            line = file.content.count("\n", 0, file.content.find(target)) + 1
            issue = _unresolved_member(root, member.split(".", 1)[0], registry, file.path, line)
            if issue:
                issues.append(issue)
    return issues


def detect_prose_drift(
    markdown_files: Iterable[MarkdownFile],
    registry: ExportRegistry,
    module_graph=None,
) -> dict:
    """
    Scan markdown files for references the package cannot satisfy.

    Returns:
        Mapping of file path to its issues (files without issues included).
    """
    return {file.path: _scan_file(file, registry, module_graph) for file in markdown_files}
