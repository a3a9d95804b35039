"""
Spec normalization.

Two logically identical specs must compare equal byte for byte after
normalization: exports and types are sorted and every optional field is
filled with its explicit default. Applying normalize twice is a no-op.
"""

import json
from typing import Any, Mapping, Union

from docdrift.spec.domain.models import ApiSpec


def normalize(spec: Union[ApiSpec, Mapping[str, Any]]) -> ApiSpec:
    """
    Return a normalized copy of *spec*.

    Args:
        spec: An ApiSpec or its raw JSON mapping

    Returns:
        New ApiSpec with exports and types sorted by (name, id)

    Raises:
        pydantic.ValidationError: If a raw mapping does not match the spec shape
            (use validate_spec for a structured report instead)
    """
    if not isinstance(spec, ApiSpec):
        spec = ApiSpec.model_validate(spec)

    exports = sorted(spec.exports, key=lambda e: (e.name, e.id))
    types = sorted(spec.types, key=lambda t: (t.name, t.id))
    # Round-trip through JSON so raw schema values are plain JSON as well
    return ApiSpec.model_validate(spec.model_copy(update={"exports": exports, "types": types}).to_dict())


def canonical_json(spec: ApiSpec) -> str:
    """Stable serialization of a normalized spec (sorted keys, no whitespace)."""
    return json.dumps(spec.to_dict(), sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def is_normalized(spec: ApiSpec) -> bool:
    return canonical_json(spec) == canonical_json(normalize(spec))
