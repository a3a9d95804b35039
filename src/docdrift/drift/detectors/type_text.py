"""
Type text rendering and comparison.

Schemas are rendered to TypeScript-like type text so they can be compared
with documented ``{type}`` annotations. Comparison is deliberately lenient:
a mismatch is only reported when the two sides are irreconcilable, never
when one side is unknown, a wildcard, or too complex to compare.
"""

import re
from typing import Any, List, Mapping, Optional

from docdrift.spec.application.deref import ref_name

WILDCARDS = {"any", "unknown", "*", "mixed"}
NULLISH = {"undefined", "null", "void"}
PRIMITIVES = {"string", "number", "boolean", "bigint", "symbol", "undefined", "null", "void", "never"}
_BOXED = {"String": "string", "Number": "number", "Boolean": "boolean", "Object": "object", "Function": "function"}
_JSON_TYPES = {"integer": "number", "array": "unknown[]", "object": "object", "function": "function"}
_COMPLEX_MARKERS = ("{", "=>", "typeof ", "keyof ", "&", "infer ", " extends ", "`", "(")
_ARRAY_GENERIC_RE = re.compile(r"^(?:Array|ReadonlyArray)<(.+)>$")
_PROMISE_RE = re.compile(r"^Promise<(.+)>$")


def _render_literal(value: Any) -> str:
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def render_schema(schema: Any) -> Optional[str]:
    """
    Render a schema as type text, or None when it cannot be rendered.

    Handles type strings, ``$ref`` (with ``typeArguments``), ``anyOf`` /
    ``oneOf`` unions, ``allOf`` intersections, arrays, enums and consts.
    """
    if schema is None:
        return None
    if isinstance(schema, str):
        return schema.strip() or None
    if not isinstance(schema, Mapping):
        return None

    if isinstance(schema.get("tsType"), str):
        return schema["tsType"]

    ref = schema.get("$ref")
    if isinstance(ref, str):
        name = ref_name(ref)
        args = schema.get("typeArguments")
        if isinstance(args, list) and args:
            rendered = [render_schema(arg) or "unknown" for arg in args]
            return f"{name}<{', '.join(rendered)}>"
        return name

    for key, joiner in (("anyOf", " | "), ("oneOf", " | "), ("allOf", " & ")):
        members = schema.get(key)
        if isinstance(members, list) and members:
            rendered = [render_schema(m) for m in members]
            if any(r is None for r in rendered):
                return None
            return joiner.join(_parenthesize(r) for r in rendered)

    if "const" in schema:
        return _render_literal(schema["const"])

    enum = schema.get("enum")
    if isinstance(enum, list) and enum:
        return " | ".join(_render_literal(v) for v in enum)

    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        rendered = [render_schema({**schema, "type": t}) for t in schema_type]
        return None if any(r is None for r in rendered) else " | ".join(rendered)
    if schema_type == "array":
        items = render_schema(schema.get("items"))
        return f"{_parenthesize(items)}[]" if items else "unknown[]"
    if isinstance(schema_type, str):
        return _JSON_TYPES.get(schema_type, schema_type)
    return None


def _parenthesize(text: str) -> str:
    return f"({text})" if "|" in text or "&" in text else text


def split_top_level(text: str, sep: str = "|") -> List[str]:
    """Split on *sep* outside of brackets, braces, parens and generics."""
    parts, depth, current = [], 0, []
    for char in text:
        if char in "<([{":
            depth += 1
        elif char in ">)]}":
            depth = max(0, depth - 1)
        if char == sep and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))
    return [p.strip() for p in parts if p.strip()]


def _normalize_member(text: str) -> str:
    text = re.sub(r"\s+", "", text)
    text = text.lstrip(".")  # rest parameter spelling: ...number
    text = _BOXED.get(text, text)
    match = _ARRAY_GENERIC_RE.match(text)
    if match:
        text = f"{_normalize_member(match.group(1))}[]"
    if text.endswith("[]") and len(text) > 2:
        text = f"{_normalize_member(text[:-2])}[]"
    match = _PROMISE_RE.match(text)
    if match:
        text = f"Promise<{normalize_type_text(match.group(1))}>"
    return text.replace("'", '"')


def normalize_type_text(text: str) -> str:
    """Canonical union text: whitespace removed, members normalized, sorted."""
    members = {_normalize_member(m) for m in split_top_level(text.strip())}
    return "|".join(sorted(m for m in members if m))


def union_members(text: str) -> List[str]:
    return normalize_type_text(text).split("|") if text.strip() else []


def is_complex(text: str) -> bool:
    return any(marker in text for marker in _COMPLEX_MARKERS)


def promise_inner(text: Optional[str]) -> Optional[str]:
    """``Promise<T>`` -> ``T``; None when *text* is not a Promise type."""
    if not text:
        return None
    match = _PROMISE_RE.match(re.sub(r"\s+", "", text))
    return match.group(1) if match else None


def is_promise(text: Optional[str]) -> bool:
    return promise_inner(text) is not None or (text or "").strip() == "Promise"


def _member_matches(doc: str, actual: str) -> bool:
    if doc == actual or doc in WILDCARDS or actual in WILDCARDS:
        return True
    if doc == "string" and actual.startswith('"'):
        return True
    if doc == "number" and re.fullmatch(r"-?\d+(\.\d+)?", actual):
        return True
    if doc == "boolean" and actual in ("true", "false"):
        return True
    if doc in ("Array", "array") and actual.endswith("[]"):
        return True
    if doc == "Promise" and actual.startswith("Promise<"):
        return True
    if doc == "object" and actual not in PRIMITIVES and not actual.startswith('"'):
        return True
    if doc == "function" and actual in ("Function", "function"):
        return True
    # generic instance documented without arguments: Map vs Map<string,number>
    if "<" in actual and actual.split("<", 1)[0] == doc:
        return True
    if doc.endswith("[]") and actual.endswith("[]"):
        return _member_matches(doc[:-2], actual[:-2])
    return False


def types_compatible(documented: Optional[str], actual: Optional[str]) -> bool:
    """
    True unless the documented type and the actual type are irreconcilable.

    Unknown, wildcard and structurally complex types are always compatible.
    ``null``/``undefined`` members are ignored on both sides.
    """
    if not documented or not actual:
        return True
    if is_complex(documented) or is_complex(actual):
        return True

    doc_members = [m for m in union_members(documented) if m not in NULLISH]
    actual_members = [m for m in union_members(actual) if m not in NULLISH]
    if not doc_members or not actual_members:
        return True
    if any(m in WILDCARDS for m in doc_members + actual_members):
        return True

    every_actual_documented = all(any(_member_matches(d, a) for d in doc_members) for a in actual_members)
    every_doc_real = all(any(_member_matches(d, a) for a in actual_members) for d in doc_members)
    return every_actual_documented and every_doc_real
