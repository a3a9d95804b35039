"""Diff and semver domain models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from docdrift.shared.domain.base_model import BaseDomainModel


class ChangeClass(str, Enum):
    BREAKING = "breaking"
    NON_BREAKING = "non-breaking"
    DOCS_ONLY = "docs-only"
    UNCHANGED = "unchanged"


class BreakingSeverity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {BreakingSeverity.HIGH: 0, BreakingSeverity.MEDIUM: 1, BreakingSeverity.LOW: 2}[self]


class SemverBump(str, Enum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


@dataclass
class SpecDiff(BaseDomainModel):
    """
    Names added, removed and modified between two specs.

    Removed names are also breaking. Every modified name is in exactly one
    of breaking / non_breaking / docs_only.
    """

    added: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    modified: List[str] = field(default_factory=list)
    breaking: List[str] = field(default_factory=list)
    non_breaking: List[str] = field(default_factory=list)
    docs_only: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.modified)


@dataclass
class ChangeReason(BaseDomainModel):
    """Machine-readable reason for one change (``param-removed``, ...)."""

    reason: str
    breaking: bool
    detail: str = ""


@dataclass
class CategorizedBreaking(BaseDomainModel):
    name: str
    severity: BreakingSeverity
    reason: str
    detail: str = ""


@dataclass
class SemverRecommendation(BaseDomainModel):
    bump: SemverBump
    reason: str
    breaking_count: int = 0
