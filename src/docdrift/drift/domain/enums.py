"""
Drift type enums.

Every DriftType has exactly one DriftCategory. The mapping is total and is
checked when this module is imported, so a new drift type without a
category fails immediately instead of surfacing as a reporting gap.
"""

from enum import Enum
from typing import Dict


class DriftCategory(str, Enum):
    STRUCTURAL = "structural"
    SEMANTIC = "semantic"
    EXAMPLE = "example"
    PROSE = "prose"


class DriftType(str, Enum):
    # structural
    PARAM_MISMATCH = "param-mismatch"
    PARAM_TYPE_MISMATCH = "param-type-mismatch"
    RETURN_TYPE_MISMATCH = "return-type-mismatch"
    GENERIC_CONSTRAINT_MISMATCH = "generic-constraint-mismatch"
    OPTIONALITY_MISMATCH = "optionality-mismatch"
    PROPERTY_TYPE_DRIFT = "property-type-drift"
    ASYNC_MISMATCH = "async-mismatch"

    # semantic
    DEPRECATED_MISMATCH = "deprecated-mismatch"
    VISIBILITY_MISMATCH = "visibility-mismatch"
    BROKEN_LINK = "broken-link"

    # example
    EXAMPLE_DRIFT = "example-drift"
    EXAMPLE_SYNTAX_ERROR = "example-syntax-error"
    EXAMPLE_RUNTIME_ERROR = "example-runtime-error"
    EXAMPLE_ASSERTION_FAILED = "example-assertion-failed"

    # prose
    PROSE_BROKEN_REFERENCE = "prose-broken-reference"
    PROSE_UNRESOLVED_MEMBER = "prose-unresolved-member"


DRIFT_CATEGORIES: Dict[DriftType, DriftCategory] = {
    DriftType.PARAM_MISMATCH: DriftCategory.STRUCTURAL,
    DriftType.PARAM_TYPE_MISMATCH: DriftCategory.STRUCTURAL,
    DriftType.RETURN_TYPE_MISMATCH: DriftCategory.STRUCTURAL,
    DriftType.GENERIC_CONSTRAINT_MISMATCH: DriftCategory.STRUCTURAL,
    DriftType.OPTIONALITY_MISMATCH: DriftCategory.STRUCTURAL,
    DriftType.PROPERTY_TYPE_DRIFT: DriftCategory.STRUCTURAL,
    DriftType.ASYNC_MISMATCH: DriftCategory.STRUCTURAL,
    DriftType.DEPRECATED_MISMATCH: DriftCategory.SEMANTIC,
    DriftType.VISIBILITY_MISMATCH: DriftCategory.SEMANTIC,
    DriftType.BROKEN_LINK: DriftCategory.SEMANTIC,
    DriftType.EXAMPLE_DRIFT: DriftCategory.EXAMPLE,
    DriftType.EXAMPLE_SYNTAX_ERROR: DriftCategory.EXAMPLE,
    DriftType.EXAMPLE_RUNTIME_ERROR: DriftCategory.EXAMPLE,
    DriftType.EXAMPLE_ASSERTION_FAILED: DriftCategory.EXAMPLE,
    DriftType.PROSE_BROKEN_REFERENCE: DriftCategory.PROSE,
    DriftType.PROSE_UNRESOLVED_MEMBER: DriftCategory.PROSE,
}


def check_category_mapping() -> None:
    """Raise if any DriftType lacks a category."""
    missing = [t.value for t in DriftType if t not in DRIFT_CATEGORIES]
    if missing:
        raise TypeError(f"DriftType values without a category: {', '.join(missing)}")


def category_of(drift_type: DriftType) -> DriftCategory:
    return DRIFT_CATEGORIES[drift_type]


check_category_mapping()
