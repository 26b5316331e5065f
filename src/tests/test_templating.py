import pytest

from dynamic_mcp.errors import ConfigError
from dynamic_mcp.errors import RenderError
from dynamic_mcp.errors import TemplateSyntaxError
from dynamic_mcp.templating import Template
from dynamic_mcp.templating import register_formatter
from dynamic_mcp.templating import render
from dynamic_mcp.templating import url_encode


def test_template_without_expressions_renders_unchanged() -> None:
    assert render("https://example.com/a?b=c", {"x": 1}) == "https://example.com/a?b=c"
    assert render("", {}) == ""


def test_json_body_braces_are_literal() -> None:
    template = '{"query": { input.q | json }, "limit": { input.limit }}'

    out = render(template, {"q": 'say "hi"', "limit": 5})

    assert out == '{"query": "say \\"hi\\"", "limit": 5}'


def test_nested_paths_and_array_indices() -> None:
    context = {"user": {"name": "ada", "tags": ["a", "b"]}}

    assert render("{input.user.name}/{ input.user.tags.1 }", context) == "ada/b"


def test_default_stringification() -> None:
    context = {"flag": True, "none": None, "num": 1.5, "obj": {"a": [1, 2]}}

    assert render("{input.flag} {input.none} {input.num} {input.obj}", context) == 'true null 1.5 {"a":[1,2]}'


def test_whole_input_can_be_rendered() -> None:
    assert render("{ input }", {"a": 1}) == '{"a":1}'
    assert render("{ input }", "plain") == "plain"


def test_missing_field_raises_render_error() -> None:
    with pytest.raises(RenderError) as exc_info:
        render("q={ input.missing }", {"other": 1})

    assert exc_info.value.expression == "{ input.missing }"
    assert exc_info.value.path == "input.missing"
    assert exc_info.value.to_data()["kind"] == "RenderError"


def test_index_out_of_range_raises_render_error() -> None:
    with pytest.raises(RenderError) as exc_info:
        render("{input.items.3}", {"items": [1]})

    assert exc_info.value.path == "input.items.3"


def test_indexing_into_scalar_raises_render_error() -> None:
    with pytest.raises(RenderError):
        render("{input.a.b}", {"a": 1})


def test_url_encode_formatter() -> None:
    out = render("https://x.test/s?q={ input.q | url_encode }", {"q": "hello world & more"})

    assert out == "https://x.test/s?q=hello%20world%20%26%20more"


def test_url_encode_keeps_unreserved_characters() -> None:
    assert url_encode("A-z_0.9~") == "A-z_0.9~"
    assert url_encode("a/b?c=d") == "a%2Fb%3Fc%3Dd"


def test_url_encode_is_not_idempotent() -> None:
    once = url_encode("a b")

    assert once == "a%20b"
    assert url_encode(once) == "a%2520b"


def test_unknown_formatter_is_a_config_error() -> None:
    with pytest.raises(TemplateSyntaxError):
        Template.parse("{ input.x | shout }")
    with pytest.raises(ConfigError):
        Template.parse("{ input.x | shout }")


def test_malformed_expression_is_rejected() -> None:
    with pytest.raises(TemplateSyntaxError):
        Template.parse("{ input..x }")


def test_registered_formatter_is_available() -> None:
    register_formatter("upper_case", lambda value: str(value).upper())

    assert render("{ input.x | upper_case }", {"x": "abc"}) == "ABC"


def test_register_formatter_rejects_bad_names() -> None:
    with pytest.raises(ValueError):
        register_formatter("not valid", str)


def test_expressions_are_parsed_once() -> None:
    template = Template.parse("{input.a}/{ input.b | url_encode }")

    assert [expr.path for expr in template.expressions] == [("a",), ("b",)]
    assert [expr.formatter_name for expr in template.expressions] == [None, "url_encode"]
    assert Template.parse("{input.a}/{ input.b | url_encode }") is template
