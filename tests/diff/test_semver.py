"""Tests for semver recommendation and next-version calculation."""

import pytest

from docdrift.diff.application.semver import calculate_next_version, recommend_semver_bump
from docdrift.diff.domain.models import SemverBump, SpecDiff


class TestRecommendSemverBump:
    def test_breaking_means_major(self):
        rec = recommend_semver_bump(SpecDiff(removed=["a"], breaking=["a", "b"], modified=["b"]))
        assert rec.bump is SemverBump.MAJOR
        assert rec.reason == "2 breaking changes"
        assert rec.breaking_count == 2

    def test_additions_mean_minor(self):
        rec = recommend_semver_bump(SpecDiff(added=["x"], modified=["y"], non_breaking=["y"]))
        assert rec.bump is SemverBump.MINOR
        assert rec.reason == "1 new export, 1 non-breaking change"

    def test_docs_only_means_patch(self):
        rec = recommend_semver_bump(SpecDiff(modified=["a", "b"], docs_only=["a", "b"]))
        assert rec.bump is SemverBump.PATCH
        assert rec.reason == "2 documentation-only changes"

    def test_no_changes(self):
        rec = recommend_semver_bump(SpecDiff())
        assert (rec.bump, rec.reason) == (SemverBump.PATCH, "No changes detected")
        assert rec.to_json() == {"bump": "patch", "reason": "No changes detected", "breakingCount": 0}


class TestCalculateNextVersion:
    @pytest.mark.parametrize(
        "version, bump, expected",
        [
            ("1.2.3", "major", "2.0.0"),
            ("1.2.3", "minor", "1.3.0"),
            ("1.2.3", "patch", "1.2.4"),
            ("v1.2.3", SemverBump.MAJOR, "v2.0.0"),
            ("0.9.9", "minor", "0.10.0"),
            ("2.0.0-beta.1+build.5", "patch", "2.0.1"),
        ],
    )
    def test_bumps(self, version, bump, expected):
        assert calculate_next_version(version, bump) == expected

    @pytest.mark.parametrize("version", ["1.2", "latest", "", "01.2.3"])
    def test_invalid_version(self, version):
        with pytest.raises(ValueError):
            calculate_next_version(version, "patch")

    def test_unknown_bump(self):
        with pytest.raises(ValueError):
            calculate_next_version("1.0.0", "huge")
