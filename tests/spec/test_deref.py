"""Tests for $ref resolution."""

from conftest import export_data, make_spec, param, signature
from docdrift.spec.application.deref import build_type_index, deref_schema, dereference_spec, ref_name


def _types():
    return [
        {"id": "Point", "name": "Point", "schema": {"type": "object", "properties": {"x": {"type": "number"}}}},
        {"id": "Node", "name": "Node", "schema": {"type": "object", "properties": {"next": {"$ref": "#/types/Node"}}}},
    ]


class TestDeref:
    def test_ref_name(self):
        assert ref_name("#/types/Point") == "Point"
        assert ref_name("Point") == "Point"

    def test_resolves_nested_refs(self):
        index = build_type_index(make_spec(types=_types()))
        resolved = deref_schema({"type": "array", "items": {"$ref": "#/types/Point"}}, index)
        assert resolved["items"]["properties"]["x"] == {"type": "number"}

    def test_cycles_stay_references(self):
        index = build_type_index(make_spec(types=_types()))
        resolved = deref_schema({"$ref": "#/types/Node"}, index)
        assert resolved["properties"]["next"] == {"$ref": "#/types/Node"}

    def test_unknown_refs_are_kept(self):
        assert deref_schema({"$ref": "#/types/Nope"}, {}) == {"$ref": "#/types/Nope"}

    def test_dereference_spec_rewrites_signatures(self):
        spec = make_spec(
            [export_data("move", signatures=[signature([param("to", {"$ref": "#/types/Point"})], {"$ref": "#/types/Point"})])],
            types=_types(),
        )
        sig = dereference_spec(spec).exports[0].signatures[0]
        assert sig.parameters[0].type_schema["type"] == "object"
        assert sig.returns.type_schema["properties"]["x"] == {"type": "number"}
