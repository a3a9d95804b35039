"""Semantic version recommendation."""

import re

from docdrift.diff.domain.models import SemverBump, SemverRecommendation, SpecDiff

_VERSION_RE = re.compile(
    r"^(?P<prefix>v?)(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?$"
)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def recommend_semver_bump(diff: SpecDiff) -> SemverRecommendation:
    """major if anything broke, minor for additions, patch otherwise."""
    if diff.breaking:
        return SemverRecommendation(
            bump=SemverBump.MAJOR,
            reason=f"{_plural(len(diff.breaking), 'breaking change')}",
            breaking_count=len(diff.breaking),
        )
    if diff.added or diff.non_breaking:
        parts = []
        if diff.added:
            parts.append(_plural(len(diff.added), "new export"))
        if diff.non_breaking:
            parts.append(_plural(len(diff.non_breaking), "non-breaking change"))
        return SemverRecommendation(bump=SemverBump.MINOR, reason=", ".join(parts))
    if diff.docs_only:
        return SemverRecommendation(
            bump=SemverBump.PATCH,
            reason=f"{_plural(len(diff.docs_only), 'documentation-only change')}",
        )
    return SemverRecommendation(bump=SemverBump.PATCH, reason="No changes detected")


def calculate_next_version(version: str, bump: SemverBump | str) -> str:
    """
    Apply a semver bump.

    A leading ``v`` is preserved; prerelease and build metadata are dropped.

    Raises:
        ValueError: If *version* is not ``MAJOR.MINOR.PATCH`` or the bump is unknown
    """
    match = _VERSION_RE.match((version or "").strip())
    if not match:
        raise ValueError(f"Invalid semantic version: {version!r}")
    bump = SemverBump(bump)

    major, minor, patch = (int(match.group(part)) for part in ("major", "minor", "patch"))
    if bump is SemverBump.MAJOR:
        major, minor, patch = major + 1, 0, 0
    elif bump is SemverBump.MINOR:
        minor, patch = minor + 1, 0
    else:
        patch += 1
    return f"{match.group('prefix')}{major}.{minor}.{patch}"
