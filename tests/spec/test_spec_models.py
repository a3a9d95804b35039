"""
Tests for docdrift.spec.domain

Covers:
1. camelCase aliases and the ``schema`` field
2. Typed flags per export kind, unknown keys kept in ``extra``
3. Example and tag normalization
"""

import pytest
from pydantic import ValidationError

from conftest import export_data, make_export, make_spec, tag
from docdrift.spec.domain.enums import ExportKind, Visibility
from docdrift.spec.domain.flags import ClassFlags, FunctionFlags, GenericFlags, VariableFlags, parse_flags
from docdrift.spec.domain.models import ApiExport, ApiTag


class TestApiExport:
    def test_schema_alias_and_snake_case_attributes(self):
        export = make_export("VERSION", kind="variable", schema="string", typeParameters=[{"name": "T"}])
        assert export.type_schema == "string"
        assert export.type_parameters[0].name == "T"

    def test_unknown_kind_is_rejected(self):
        with pytest.raises(ValidationError):
            make_export("x", kind="gadget")

    def test_examples_are_coerced_to_code(self):
        export = make_export("f", examples=[{"code": "f(1)", "title": "basic"}, "f(2)"])
        assert export.examples == ["f(1)", "f(2)"]

    def test_tag_names_lose_the_at_sign(self):
        assert ApiTag(name="@param", text=None).name == "param"
        assert ApiTag(name="@param", text=None).text == ""

    def test_internal_and_tag_lookup(self):
        export = make_export("f", tags=[tag("internal"), tag("param", "x")])
        assert export.is_internal
        assert export.has_tag("param")
        assert len(export.tags_named("param")) == 1

    def test_models_are_frozen(self):
        export = make_export("f")
        with pytest.raises(ValidationError):
            export.name = "g"

    def test_all_tags_yields_export_then_signature_tags(self):
        export = make_export("f", tags=[tag("since", "1.0")], signatures=[{"tags": [tag("param", "a")]}])
        assert [t.name for t in export.all_tags()] == ["since", "param"]


class TestSpecIdentity:
    def test_identity_with_version(self):
        assert make_spec(name="lib", version="2.1.0").identity == "lib@2.1.0"

    def test_identity_without_version(self):
        assert make_spec(name="lib", version=None).identity == "lib"

    def test_find_export(self):
        spec = make_spec([export_data("a"), export_data("b")])
        assert spec.find_export("b").id == "b"
        assert spec.find_export("zzz") is None


class TestFlags:
    def test_function_flags_read_async(self):
        export = make_export("f", flags={"async": True})
        assert isinstance(export.flags, FunctionFlags)
        assert export.is_async is True

    def test_class_and_variable_variants(self):
        assert isinstance(parse_flags(ExportKind.CLASS, {"abstract": True}), ClassFlags)
        assert parse_flags(ExportKind.VARIABLE, {"const": True}).readonly is True

    def test_other_kinds_get_generic_flags(self):
        flags = parse_flags(ExportKind.INTERFACE, {"access": "public"})
        assert type(flags) is GenericFlags
        assert flags.access is Visibility.PUBLIC

    def test_unknown_keys_and_bad_values_go_to_extra(self):
        flags = parse_flags(ExportKind.FUNCTION, {"async": "yes", "generator": True, "access": "friend"})
        assert flags.is_async is None
        assert flags.extra == {"async": "yes", "generator": True, "access": "friend"}

    def test_non_function_export_is_not_async(self):
        assert make_export("C", kind="class", flags={"async": True}).is_async is None

    def test_dumped_flags_parse_back_equal(self):
        export = make_export("f", flags={"isAsync": True, "access": "protected", "pure": True})
        again = ApiExport.model_validate(export.model_dump(mode="json", by_alias=True))
        assert again.flags == export.flags
        assert again.flags.extra == {"pure": True}
