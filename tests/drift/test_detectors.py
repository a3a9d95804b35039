"""
Tests for the drift detectors.

Covers:
1. Parameter name, optionality and type drift (including overloads)
2. Return, throws, generic constraint and property type drift
3. Deprecation, visibility, async and link drift
4. Example result merging
"""

from conftest import make_export, make_spec, param, signature, tag, export_data
from docdrift.drift.detectors.example_drift import detect_example_issues, example_drift_type
from docdrift.drift.detectors.param_drift import (
    detect_optionality_drift,
    detect_param_drift,
    detect_param_type_drift,
)
from docdrift.drift.detectors.semantic_drift import (
    detect_async_mismatch,
    detect_broken_links,
    detect_deprecated_drift,
    detect_visibility_drift,
)
from docdrift.drift.detectors.type_drift import (
    detect_generic_constraint_drift,
    detect_property_type_drift,
    detect_return_type_drift,
)
from docdrift.drift.domain.enums import DriftCategory, DriftType
from docdrift.drift.domain.models import ExampleResult
from docdrift.drift.domain.registry import build_export_registry


def _fn(params, tags, returns=None, **extra):
    return make_export("fn", tags=tags, signatures=[signature(params, returns)], **extra)


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------


class TestParamDrift:
    def test_one_issue_per_unknown_name(self):
        export = _fn(
            [param("userId"), param("options", "object")],
            [
                tag("param", "{string} id - renamed"),
                tag("param", "{object} options"),
                tag("param", "{number} options.timeout"),
                tag("param", "{boolean} verbose"),
            ],
        )
        issues = detect_param_drift(export)
        assert [i.target for i in issues] == ["id", "verbose"]
        assert all(i.type is DriftType.PARAM_MISMATCH for i in issues)
        assert all(i.category is DriftCategory.STRUCTURAL for i in issues)

    def test_suggests_closest_name(self):
        export = _fn([param("format")], [tag("param", "fmt")])
        assert detect_param_drift(export)[0].suggestion == "Did you mean 'format'?"

    def test_undocumented_params_are_not_drift(self):
        export = _fn([param("a"), param("b"), param("c")], [tag("param", "{string} a - first")])
        assert detect_param_drift(export) == []
        assert detect_param_type_drift(export) == []

    def test_export_tags_match_any_overload(self):
        export = make_export(
            "fn",
            tags=[tag("param", "a"), tag("param", "b")],
            signatures=[signature([param("a")]), signature([param("a"), param("b")])],
        )
        assert detect_param_drift(export) == []

    def test_signature_tags_match_their_own_signature(self):
        export = make_export(
            "fn",
            signatures=[
                signature([param("a")], tags=[tag("param", "b")]),
                signature([param("a"), param("b")]),
            ],
        )
        assert [i.target for i in detect_param_drift(export)] == ["b"]

    def test_name_documented_on_export_and_signature_is_reported_once(self):
        export = make_export(
            "fn",
            tags=[tag("param", "bogus"), tag("param", "{number} [a]")],
            signatures=[signature([param("a")], tags=[tag("param", "bogus"), tag("param", "{number} [a]")])],
        )
        assert [i.target for i in detect_param_drift(export)] == ["bogus"]
        assert [i.target for i in detect_optionality_drift(export)] == ["a"]
        assert [i.target for i in detect_param_type_drift(export)] == ["a"]

    def test_destructured_parameter_is_skipped(self):
        export = _fn([param("__0", "object")], [tag("param", "timeout")])
        assert detect_param_drift(export) == []

    def test_no_signature_no_comparison(self):
        export = make_export("CONST", kind="variable", tags=[tag("param", "x")])
        assert detect_param_drift(export) == []

    def test_optional_in_docs_but_required(self):
        export = _fn([param("limit", "number")], [tag("param", "{number} [limit]")])
        issues = detect_optionality_drift(export)
        assert len(issues) == 1
        assert issues[0].type is DriftType.OPTIONALITY_MISMATCH

    def test_optional_with_default_is_fine(self):
        export = _fn([param("limit", "number", default=10)], [tag("param", "{number} [limit]")])
        assert detect_optionality_drift(export) == []

    def test_param_type_mismatch(self):
        export = _fn([param("count", "number")], [tag("param", "{string} count")])
        issues = detect_param_type_drift(export)
        assert len(issues) == 1
        assert "number" in issues[0].suggestion

    def test_rest_param_documented_by_element_type(self):
        export = _fn(
            [param("values", {"type": "array", "items": {"type": "number"}}, rest=True)],
            [tag("param", "{...number} values")],
        )
        assert detect_param_type_drift(export) == []


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


class TestTypeDrift:
    def test_return_type_mismatch(self):
        export = _fn([], [tag("returns", "{string} the id")], returns="number")
        issues = detect_return_type_drift(export)
        assert [i.type for i in issues] == [DriftType.RETURN_TYPE_MISMATCH]

    def test_documenting_resolved_promise_value_is_accepted(self):
        export = _fn([], [tag("returns", "{User} the user")], returns="Promise<User>")
        assert detect_return_type_drift(export) == []

    def test_throws_not_declared(self):
        export = make_export(
            "fn",
            tags=[tag("throws", "{NotFoundError} when missing"), tag("throws", "{TypeError} bad input")],
            signatures=[signature([], "void", throws=[{"type": "TypeError"}])],
        )
        issues = detect_return_type_drift(export)
        assert [i.target for i in issues] == ["NotFoundError"]

    def test_throws_ignored_without_declarations(self):
        export = _fn([], [tag("throws", "{Error} always")], returns="void")
        assert detect_return_type_drift(export) == []

    def test_generic_constraint(self):
        export = make_export(
            "fn",
            tags=[tag("template", "{string} T")],
            signatures=[signature([], "void", typeParameters=[{"name": "T", "constraint": "number"}])],
        )
        assert [i.type for i in detect_generic_constraint_drift(export)] == [DriftType.GENERIC_CONSTRAINT_MISMATCH]

    def test_property_type(self):
        export = make_export(
            "Options",
            kind="interface",
            tags=[tag("property", "{string} retries"), tag("property", "{string} name")],
            schema={"type": "object", "properties": {"retries": {"type": "number"}, "name": {"type": "string"}}},
        )
        issues = detect_property_type_drift(export)
        assert [i.target for i in issues] == ["retries"]


# ---------------------------------------------------------------------------
# Semantics
# ---------------------------------------------------------------------------


class TestSemanticDrift:
    def test_deprecated_tag_on_live_export(self):
        export = make_export("old", tags=[tag("deprecated", "use new")], deprecated=False)
        assert [i.type for i in detect_deprecated_drift(export)] == [DriftType.DEPRECATED_MISMATCH]

    def test_deprecated_unknown_in_code_is_not_drift(self):
        assert detect_deprecated_drift(make_export("old", tags=[tag("deprecated")])) == []

    def test_visibility_mismatch_on_export_and_member(self):
        export = make_export(
            "Widget",
            kind="class",
            tags=[tag("public")],
            flags={"access": "protected"},
            members=[{"name": "render", "visibility": "private", "tags": [tag("public")]}],
        )
        assert [i.target for i in detect_visibility_drift(export)] == ["Widget", "Widget.render"]

    def test_async_tag_without_promise(self):
        export = _fn([], [tag("async")], returns="string")
        assert [i.type for i in detect_async_mismatch(export)] == [DriftType.ASYNC_MISMATCH]

    def test_async_flag_with_plain_returns_doc(self):
        export = _fn([], [tag("returns", "{User} the user")], returns="Promise<User>", flags={"async": True})
        issues = detect_async_mismatch(export)
        assert len(issues) == 1
        assert issues[0].suggestion == "Document the return type as {Promise<User>}"

    def test_broken_link_root_and_member(self):
        spec = make_spec(
            [
                export_data("fetchUser", description="See {@link Client.gett} and {@link Clinet}."),
                export_data("Client", kind="class", members=[{"name": "get"}]),
            ]
        )
        registry = build_export_registry(spec)
        issues = detect_broken_links(spec.find_export("fetchUser"), registry)
        assert [i.target for i in issues] == ["Client.gett", "Clinet"]
        assert issues[0].suggestion == "Did you mean 'Client.get'?"
        assert issues[1].suggestion == "Did you mean 'Client'?"

    def test_builtin_and_known_links(self):
        spec = make_spec([export_data("a", description="Returns a {@link Promise} of {@link b}."), export_data("b")])
        assert detect_broken_links(spec.find_export("a"), build_export_registry(spec)) == []


class TestExampleIssues:
    def test_failed_examples_become_issues(self):
        results = [
            ExampleResult(export_id="f", example_index=1, passed=False, error="boom", error_kind="runtime"),
            ExampleResult(export_id="f", example_index=0, passed=True),
            ExampleResult(export_id="f", example_index=2, passed=False),
        ]
        issues = detect_example_issues(results)
        assert [i.type for i in issues] == [DriftType.EXAMPLE_RUNTIME_ERROR, DriftType.EXAMPLE_DRIFT]
        assert issues[0].target == "example[1]"
        assert all(i.category is DriftCategory.EXAMPLE for i in issues)

    def test_error_kind_mapping(self):
        assert example_drift_type("Syntax") is DriftType.EXAMPLE_SYNTAX_ERROR
        assert example_drift_type("typecheck") is DriftType.EXAMPLE_DRIFT
