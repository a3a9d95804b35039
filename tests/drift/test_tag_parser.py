"""Tests for JSDoc tag text parsing."""

from docdrift.drift.detectors.tag_parser import (
    extract_links,
    parse_param_tag,
    parse_template_tag,
    parse_typed_tag,
    split_braced_type,
)
from docdrift.spec.domain.models import ApiTag


def _tag(name, text="", **extra):
    return ApiTag.model_validate({"name": name, "text": text, **extra})


class TestSplitBracedType:
    def test_nested_braces(self):
        assert split_braced_type("{{ a: string }} opts - the options") == ("{ a: string }", "opts - the options")

    def test_no_type(self):
        assert split_braced_type("name - desc") == (None, "name - desc")

    def test_unbalanced(self):
        assert split_braced_type("{string name") == (None, "{string name")


class TestParseParamTag:
    def test_typed_with_description(self):
        parsed = parse_param_tag(_tag("param", "{string} name - The name"))
        assert (parsed.name, parsed.type, parsed.optional, parsed.description) == ("name", "string", False, "The name")

    def test_bracketed_optional_with_default(self):
        parsed = parse_param_tag(_tag("param", "{number} [retries=3] how often"))
        assert parsed.name == "retries"
        assert parsed.optional is True

    def test_closure_style_optional_type(self):
        parsed = parse_param_tag(_tag("param", "{number=} retries"))
        assert parsed.type == "number"
        assert parsed.optional is True

    def test_nested_property_name(self):
        parsed = parse_param_tag(_tag("param", "{number} options.timeout"))
        assert parsed.root_name == "options"
        assert parsed.is_nested

    def test_structured_param_wins(self):
        parsed = parse_param_tag(_tag("param", "garbage", param={"name": "id", "type": "string", "optional": True}))
        assert (parsed.name, parsed.type, parsed.optional) == ("id", "string", True)

    def test_unparseable(self):
        assert parse_param_tag(_tag("param", "{string}")) is None


class TestOtherTags:
    def test_returns(self):
        assert parse_typed_tag(_tag("returns", "{Promise<User>} - the user")) == ("Promise<User>", "the user")

    def test_returns_without_type(self):
        assert parse_typed_tag(_tag("returns", "the user")) == (None, "the user")

    def test_template_forms(self):
        assert parse_template_tag(_tag("template", "{object} T")) == [("T", "object")]
        assert parse_template_tag(_tag("template", "T extends string")) == [("T", "string")]
        assert parse_template_tag(_tag("template", "K,V")) == [("K", None), ("V", None)]

    def test_extract_links_skips_urls_and_anchors(self):
        text = "See {@link Client.get}, {@linkcode parse | the parser}, {@link https://x.dev} and {@link #top}."
        assert extract_links(text) == ["Client.get", "parse"]
