"""
Documentation style presets.

A preset states which pieces of documentation an export must carry to get
full coverage points.

| Preset     | description | params   | returns  | examples |
|------------|-------------|----------|----------|----------|
| minimal    | required    | optional | optional | optional |
| verbose    | required    | required | required | optional |
| types-only | optional    | optional | optional | optional |
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Mapping, Optional, Union


class StylePreset(str, Enum):
    MINIMAL = "minimal"
    VERBOSE = "verbose"
    TYPES_ONLY = "types-only"


@dataclass(frozen=True)
class DocRequirements:
    description: bool = True
    params: bool = False
    returns: bool = False
    examples: bool = False
    since: bool = False


DEFAULT_REQUIREMENTS = DocRequirements()

PRESETS = {
    StylePreset.MINIMAL: DocRequirements(description=True),
    StylePreset.VERBOSE: DocRequirements(description=True, params=True, returns=True),
    StylePreset.TYPES_ONLY: DocRequirements(description=False),
}


def resolve_requirements(
    style: Optional[Union[StylePreset, str]] = None,
    require: Optional[Mapping[str, bool]] = None,
) -> DocRequirements:
    """
    Requirements for a style preset with per-rule overrides applied.

    Raises:
        ValueError: For an unknown style or override key
    """
    base = PRESETS[StylePreset(style)] if style else DEFAULT_REQUIREMENTS
    if not require:
        return base
    unknown = set(require) - set(DocRequirements.__dataclass_fields__)
    if unknown:
        raise ValueError(f"Unknown documentation requirement(s): {', '.join(sorted(unknown))}")
    return replace(base, **{key: bool(value) for key, value in require.items() if value is not None})
