"""Layout fingerprint for persisted models.

The batch checkpoint log stores ``CheckpointRecord`` lines whose ``data``
payload is an ``ExportAnalysis`` or a ``PackageResult``. A log written by a
build with a different layout of any of those models must be treated as
foreign, so the fingerprint covers the given classes and every dataclass or
pydantic model reachable through their field annotations.
"""

from __future__ import annotations

import dataclasses
import hashlib
import typing
from typing import Any, Dict, Iterable, Iterator, List, Tuple


def derive_schema_version(*classes: type) -> str:
    """
    8-character hex digest of the field layout of *classes* and their nested models.

    Adding, removing or retyping a field anywhere in the tree changes the
    digest; declaration order does not.
    """
    if not classes:
        raise TypeError("derive_schema_version() needs at least one model class")
    entries: List[Tuple[str, str, str]] = []
    for cls in _reachable_models(classes):
        entries.extend((cls.__qualname__, name, repr(tp)) for name, tp in _field_types(cls).items())
    entries.sort()
    return hashlib.md5(str(entries).encode()).hexdigest()[:8]


def _is_model(tp: Any) -> bool:
    return isinstance(tp, type) and (dataclasses.is_dataclass(tp) or hasattr(tp, "model_fields"))


def _field_types(cls: type) -> Dict[str, Any]:
    """Resolved ``{field name: annotation}`` of a dataclass or pydantic model."""
    if dataclasses.is_dataclass(cls):
        hints = typing.get_type_hints(cls)
        return {f.name: hints.get(f.name, f.type) for f in dataclasses.fields(cls)}

    model_fields = getattr(cls, "model_fields", None)
    if model_fields is not None:
        return {name: info.annotation for name, info in model_fields.items()}

    raise TypeError(f"{cls.__name__} is neither a dataclass nor a Pydantic BaseModel")


def _models_in(annotation: Any) -> Iterator[type]:
    if _is_model(annotation):
        yield annotation
        return
    for arg in typing.get_args(annotation):
        yield from _models_in(arg)


def _reachable_models(roots: Iterable[type]) -> List[type]:
    found: List[type] = []
    pending = list(roots)
    while pending:
        cls = pending.pop()
        if cls in found:
            continue
        found.append(cls)
        for annotation in _field_types(cls).values():
            pending.extend(_models_in(annotation))
    return found
