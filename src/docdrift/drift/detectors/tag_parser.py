"""
JSDoc tag text parsing.

Tags arrive with their raw text (``{string} [name=default] - desc``) and,
for ``@param``, optionally a structured ``param`` object filled in by the
extractor. Structured data wins; text parsing is the fallback. Nothing here
raises on malformed input: unparseable pieces come back as None.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from docdrift.spec.domain.models import ApiTag

PARAM_TAGS = ("param", "arg", "argument")
RETURN_TAGS = ("returns", "return")
THROWS_TAGS = ("throws", "throw", "exception")
PROPERTY_TAGS = ("property", "prop")
VISIBILITY_TAGS = ("public", "protected", "private")

_NAME_RE = re.compile(r"^(\[[^\]]*\]|[\w$.\[\]]+)")
_LINK_RE = re.compile(r"\{@link(?:code|plain)?\s+([^}\s|]+)[^}]*\}")
_TEMPLATE_EXTENDS_RE = re.compile(r"^([\w$]+)\s+extends\s+(.+?)\s*(?:-\s.*)?$", re.DOTALL)


@dataclass(frozen=True)
class DocumentedParam:
    name: str
    type: Optional[str] = None
    optional: bool = False
    description: Optional[str] = None

    @property
    def root_name(self) -> str:
        """``options.timeout`` -> ``options``."""
        return self.name.split(".", 1)[0].split("[", 1)[0]

    @property
    def is_nested(self) -> bool:
        return self.root_name != self.name


def split_braced_type(text: str) -> Tuple[Optional[str], str]:
    """
    Split a leading ``{type}`` off *text*, honouring nested braces.

    Returns (type or None, remaining text).
    """
    text = (text or "").lstrip()
    if not text.startswith("{"):
        return None, text
    depth = 0
    for i, char in enumerate(text):
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[1:i].strip() or None, text[i + 1 :].lstrip()
    # unbalanced
    return None, text


def _strip_description(rest: str) -> Optional[str]:
    rest = rest.strip()
    if rest.startswith("-"):
        rest = rest[1:].strip()
    return rest or None


def parse_param_tag(tag: ApiTag) -> Optional[DocumentedParam]:
    """Parse an ``@param`` tag, or return None when no name can be found."""
    if tag.param is not None and tag.param.name:
        doc_type = tag.param.type
        optional = bool(tag.param.optional)
        if doc_type and doc_type.endswith("="):
            doc_type, optional = doc_type[:-1], True
        return DocumentedParam(
            name=tag.param.name,
            type=doc_type or None,
            optional=optional,
            description=tag.param.description,
        )

    doc_type, rest = split_braced_type(tag.text)
    match = _NAME_RE.match(rest)
    if not match:
        return None

    raw_name = match.group(1)
    optional = False
    if raw_name.startswith("[") and raw_name.endswith("]"):
        optional = True
        raw_name = raw_name[1:-1].split("=", 1)[0].strip()
    if not raw_name:
        return None
    if doc_type and doc_type.endswith("="):
        doc_type, optional = doc_type[:-1], True

    return DocumentedParam(
        name=raw_name,
        type=doc_type,
        optional=optional,
        description=_strip_description(rest[match.end() :]),
    )


def parse_typed_tag(tag: ApiTag) -> Tuple[Optional[str], Optional[str]]:
    """``@returns {T} desc`` / ``@throws {E} desc`` -> (T, desc)."""
    doc_type, rest = split_braced_type(tag.text)
    return doc_type, _strip_description(rest)


def parse_property_tag(tag: ApiTag) -> Optional[DocumentedParam]:
    """``@property {T} name - desc`` has the same shape as ``@param``."""
    return parse_param_tag(tag)


def parse_template_tag(tag: ApiTag) -> List[Tuple[str, Optional[str]]]:
    """
    Parse ``@template`` into (name, constraint) pairs.

    Accepts ``{Constraint} T``, ``T extends Constraint`` and ``T, U``.
    """
    constraint, rest = split_braced_type(tag.text)
    rest = rest.strip()
    if not rest:
        return []
    if constraint is None:
        match = _TEMPLATE_EXTENDS_RE.match(rest)
        if match:
            return [(match.group(1), match.group(2).strip())]
    first = rest.split(" - ", 1)[0].split()[0] if rest.split() else ""
    names = [name.strip() for name in first.split(",") if name.strip()]
    return [(name, constraint) for name in names]


def extract_links(text: Optional[str]) -> List[str]:
    """Targets of ``{@link X}``, ``{@linkcode X.y}``, ``{@link X | label}``."""
    if not text:
        return []
    targets = []
    for target in _LINK_RE.findall(text):
        target = target.strip()
        if "://" in target or target.startswith("#") or target.startswith("mailto:"):
            continue
        targets.append(target.rstrip(".,;:()"))
    return [t for t in targets if t]
