"""Diff module - API changes between versions and the semver bump they imply."""

from docdrift.diff.application.engine import categorize_breaking_changes, diff_spec
from docdrift.diff.application.semver import calculate_next_version, recommend_semver_bump
from docdrift.diff.domain.models import (
    BreakingSeverity,
    CategorizedBreaking,
    SemverBump,
    SemverRecommendation,
    SpecDiff,
)

__all__ = [
    "BreakingSeverity",
    "CategorizedBreaking",
    "SemverBump",
    "SemverRecommendation",
    "SpecDiff",
    "diff_spec",
    "categorize_breaking_changes",
    "recommend_semver_bump",
    "calculate_next_version",
]
