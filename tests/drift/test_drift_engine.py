"""Tests for compute_drift, prose drift and the cross-package module graph."""

import pytest

from conftest import export_data, make_spec, param, signature, tag
from docdrift.drift.application.engine import compute_drift, compute_export_drift
from docdrift.drift.application.module_graph import build_module_graph
from docdrift.drift.detectors.prose_drift import extract_code_blocks, extract_named_imports
from docdrift.drift.domain.enums import DRIFT_CATEGORIES, DriftCategory, DriftType, category_of
from docdrift.drift.domain.models import DriftResult, ExampleResult, MarkdownFile

README = """# Usage

```ts
import { createClient, Client, createClien } from 'my-lib';
const client = createClient('https://api.example.com');
Client.postt();
```

See {@link Client.gett} for the low-level call.
"""


class TestComputeDrift:
    def test_sample_spec_has_two_param_issues(self, sample_spec):
        result = compute_drift(sample_spec)
        assert result.total_issues == 2
        assert [i.target for i in result.issues_for("formatDate")] == ["input", "fmt"]
        assert result.issues_for("formatDate")[1].suggestion == "Did you mean 'format'?"
        assert result.issues_for("createClient") == []

    def test_every_export_has_an_entry(self, sample_spec):
        result = compute_drift(sample_spec)
        assert sorted(result.exports) == ["VERSION", "createClient", "formatDate"]
        assert result.export_ids() == list(result.exports)

    def test_missing_docs_are_not_drift(self):
        spec = make_spec(
            [
                export_data("bare", signatures=[signature([param("a"), param("b")], "string")]),
                export_data("partial", tags=[tag("param", "a")], signatures=[signature([param("a"), param("b")])]),
            ]
        )
        assert compute_drift(spec).total_issues == 0

    def test_pure_function(self, sample_spec):
        assert compute_drift(sample_spec).to_json() == compute_drift(sample_spec).to_json()

    def test_example_results_are_merged(self, sample_spec):
        results = [ExampleResult(export_id="createClient", example_index=0, passed=False, error_kind="assertion")]
        result = compute_drift(sample_spec, example_results=results)
        assert [i.type for i in result.issues_for("createClient")] == [DriftType.EXAMPLE_ASSERTION_FAILED]
        assert result.count_by_category()["example"] == 1

    def test_source_location_is_attached(self):
        spec = make_spec(
            [
                export_data(
                    "fn",
                    tags=[tag("param", "nope")],
                    signatures=[signature([param("a")])],
                    source={"file": "src/fn.ts", "line": 12},
                )
            ]
        )
        issue = compute_drift(spec).issues_for("fn")[0]
        assert (issue.file_path, issue.line) == ("src/fn.ts", 12)

    def test_counts(self, sample_spec):
        result = compute_drift(sample_spec)
        assert result.count_by_type() == {"param-mismatch": 2}
        assert result.count_by_category() == {"structural": 2, "semantic": 0, "example": 0, "prose": 0}
        assert result.count_for(["createClient", "VERSION"]) == 0

    def test_result_serializes_with_camel_case_keys(self, sample_spec):
        data = compute_drift(sample_spec).to_json()
        issue = data["exports"]["formatDate"][0]
        assert issue["type"] == "param-mismatch"
        assert issue["category"] == "structural"
        assert "filePath" in issue
        assert DriftResult.from_json(data).total_issues == 2

    def test_export_without_tags_or_description_skips_links(self):
        spec = make_spec([export_data("fn")])
        assert compute_export_drift(spec.exports[0]) == []


class TestProseDrift:
    def test_code_blocks_and_imports(self):
        blocks = extract_code_blocks(README)
        assert len(blocks) == 1
        assert blocks[0].line_start == 4
        assert extract_named_imports(blocks[0].code, "my-lib") == ["createClient", "Client", "createClien"]
        assert extract_named_imports("import { a as b } from 'my-lib/sub';", "my-lib") == ["a"]
        assert extract_named_imports("import { a } from 'other';", "my-lib") == []

    def test_prose_issues_are_keyed_by_path(self, sample_spec):
        result = compute_drift(sample_spec, markdown_files=[MarkdownFile(path="README.md", content=README)])
        assert result.prose_keys() == ["prose:README.md"]
        assert "prose:README.md" not in result.export_ids()

        issues = result.issues_for("prose:README.md")
        by_target = {i.target: i for i in issues}
        assert by_target["createClien"].type is DriftType.PROSE_BROKEN_REFERENCE
        assert by_target["createClien"].suggestion == "Did you mean 'createClient'?"
        assert by_target["createClien"].line == 4
        assert by_target["Client.postt"].type is DriftType.PROSE_UNRESOLVED_MEMBER
        assert by_target["Client.postt"].suggestion == "Did you mean 'Client.post'?"
        assert by_target["Client.gett"].line == 9
        assert len(issues) == 3
        assert all(i.category is DriftCategory.PROSE for i in issues)

    def test_clean_markdown_still_gets_an_entry(self, sample_spec):
        files = [MarkdownFile(path="docs/intro.md", content="Nothing to check here.")]
        assert compute_drift(sample_spec, markdown_files=files).exports["prose:docs/intro.md"] == []


class TestModuleGraph:
    def test_cross_package_link_resolves(self):
        core = make_spec([export_data("Logger", kind="class")], name="core")
        app = make_spec([export_data("run", description="Logs through {@link Logger}.")], name="app")

        alone = compute_drift(app)
        assert [i.type for i in alone.issues_for("run")] == [DriftType.BROKEN_LINK]

        graph = build_module_graph([core, app])
        assert graph.find_symbol_module("Logger") == "core"
        assert compute_drift(app, module_graph=graph).total_issues == 0

    def test_first_module_wins(self):
        a = make_spec([export_data("shared")], name="a")
        b = make_spec([export_data("shared")], name="b")
        graph = build_module_graph([a, b])
        assert graph.find_symbol_module("shared") == "a"
        assert graph.modules["b"].exports == {"shared"}


class TestDriftCategories:
    def test_mapping_is_total(self):
        assert set(DRIFT_CATEGORIES) == set(DriftType)

    @pytest.mark.parametrize(
        "drift_type, category",
        [
            (DriftType.ASYNC_MISMATCH, DriftCategory.STRUCTURAL),
            (DriftType.BROKEN_LINK, DriftCategory.SEMANTIC),
            (DriftType.EXAMPLE_SYNTAX_ERROR, DriftCategory.EXAMPLE),
            (DriftType.PROSE_UNRESOLVED_MEMBER, DriftCategory.PROSE),
        ],
    )
    def test_category_of(self, drift_type, category):
        assert category_of(drift_type) is category
