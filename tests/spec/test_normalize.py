"""Tests for spec normalization and validation."""

import json

import pytest

from conftest import export_data, make_spec, param, signature, spec_data, tag
from docdrift.drift.application.engine import compute_drift
from docdrift.shared.domain.exceptions import SpecValidationError
from docdrift.spec.application.loader import load_spec
from docdrift.spec.application.normalize import canonical_json, is_normalized, normalize
from docdrift.spec.application.validate import assert_spec, validate_spec


class TestNormalize:
    def test_exports_are_sorted_by_name_then_id(self):
        spec = normalize(make_spec([export_data("b-2", "b"), export_data("a"), export_data("b-1", "b")]))
        assert [e.id for e in spec.exports] == ["a", "b-1", "b-2"]

    def test_idempotent(self, sample_spec):
        once = normalize(sample_spec)
        twice = normalize(once)
        assert canonical_json(once) == canonical_json(twice)
        assert is_normalized(once)

    def test_accepts_raw_mapping(self, sample_spec_data):
        assert normalize(sample_spec_data).meta.name == "my-lib"

    def test_logically_equal_specs_serialize_identically(self):
        first = make_spec([export_data("a", description="A"), export_data("b")])
        second = make_spec([export_data("b"), export_data("a", description="A", tags=[])])
        assert canonical_json(normalize(first)) == canonical_json(normalize(second))

    def test_drift_is_unchanged_by_normalization(self, sample_spec):
        before = compute_drift(sample_spec)
        after = compute_drift(normalize(sample_spec))
        assert before.to_json() == after.to_json()


class TestValidateSpec:
    def test_valid_spec(self, sample_spec_data):
        result = validate_spec(sample_spec_data)
        assert result.ok
        assert result.spec.meta.name == "my-lib"

    def test_schema_errors_have_paths(self):
        data = spec_data([export_data("a", kind="gadget")])
        result = validate_spec(data)
        assert not result.ok
        assert result.spec is None
        assert result.errors[0].path == "exports[0].kind"

    def test_missing_meta(self):
        result = validate_spec({"exports": []})
        assert [e.path for e in result.errors] == ["meta"]

    def test_not_an_object(self):
        assert validate_spec([1, 2]).errors[0].path == "<root>"

    def test_duplicate_ids(self):
        result = validate_spec(spec_data([export_data("a"), export_data("a")]))
        assert result.errors[0].path == "exports[1].id"
        assert "Duplicate" in result.errors[0].message

    def test_assert_spec_raises_with_all_errors(self):
        with pytest.raises(SpecValidationError) as exc_info:
            assert_spec(spec_data([export_data("", "")], name=""))
        assert len(exc_info.value.context["errors"]) == 3


class TestLoadSpec:
    def test_load_normalizes(self, tmp_path):
        path = tmp_path / "api.json"
        path.write_text(json.dumps(spec_data([export_data("z"), export_data("a")])))
        assert [e.id for e in load_spec(path).exports] == ["a", "z"]

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "api.json"
        path.write_text("{not json")
        with pytest.raises(SpecValidationError) as exc_info:
            load_spec(path)
        assert exc_info.value.context["path"] == str(path)

    def test_invalid_spec_carries_path(self, tmp_path):
        path = tmp_path / "api.json"
        path.write_text(json.dumps({"meta": {}}))
        with pytest.raises(SpecValidationError) as exc_info:
            load_spec(path)
        assert exc_info.value.context["path"] == str(path)
