import pytest

from onedoc.errors import TemplateRenderFailure
from onedoc.templates import DEFAULT_TEMPLATE, build_environment, compile_template, render_template, trim_prefix


def test_trim_prefix_strips_repeated_prefix():
    assert trim_prefix("https://example.com", "https://") == "example.com"
    assert trim_prefix("ababc", "ab") == "c"
    assert trim_prefix("value", "") == "value"
    assert trim_prefix("value", "x") == "value"


def test_trim_prefix_filter_is_registered():
    env = build_environment()
    template = compile_template(env, "{{ manifest.repository | trim_prefix('https://') }}", "t")
    rendered = render_template(template, "t", {"manifest": {"repository": "https://github.com/x/y"}})
    assert rendered == "github.com/x/y"


def test_default_template_renders_summary_and_contents():
    env = build_environment()
    template = compile_template(env, DEFAULT_TEMPLATE, "<default>")
    rendered = render_template(template, "<default>", {"manifest": {"name": "demo"}, "summary": "S.", "contents": "C."})
    assert rendered == "# demo\n\nS.\n\nC.\n"


def test_syntax_error_is_reported_with_name():
    with pytest.raises(TemplateRenderFailure, match="docs/README.tpl"):
        compile_template(build_environment(), "{{ summary ", "docs/README.tpl")


def test_undefined_value_is_an_error():
    template = compile_template(build_environment(), "{{ missing }}", "t")
    with pytest.raises(TemplateRenderFailure):
        render_template(template, "t", {})


def test_trim_prefix_on_missing_manifest_field():
    assert trim_prefix(None, "https://") == ""
    template = compile_template(build_environment(), "[{{ manifest.repository | trim_prefix('https://') }}]", "t")
    assert render_template(template, "t", {"manifest": {"repository": None}}) == "[]"
