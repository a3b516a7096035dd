"""Jinja2 templates for the generated documents.

Part of the `onedoc` framework.

Templates see these values:

- `manifest`: the crate metadata reported by `cargo metadata`
- `summary`: the first paragraph of the documentation
- `contents`: everything after the summary
- `full_contents`: summary and contents together
- `toc`: a table of contents for headings of level 2 to 6

and one extra filter, `trim_prefix`, e.g. `{{ manifest.repository | trim_prefix("https://") }}`.
"""

from __future__ import annotations

from typing import Any, Mapping

from jinja2 import BaseLoader, Environment, StrictUndefined, Template, TemplateError

from onedoc.errors import TemplateRenderFailure

DEFAULT_TEMPLATE_NAME = "<default>"
DEFAULT_TEMPLATE = """\
# {{ manifest.name }}

{{ summary }}

{{ contents }}
"""


def trim_prefix(value: Any, prefix: str) -> str:
    """Strip every leading repetition of `prefix` from `value`.

    Missing manifest fields (`None`) render as an empty string.
    """
    if value is None:
        return ""
    value = str(value)
    if not prefix:
        return value
    while value.startswith(prefix):
        value = value[len(prefix) :]
    return value


def build_environment() -> Environment:
    env = Environment(
        loader=BaseLoader(),
        keep_trailing_newline=True,
        undefined=StrictUndefined,
        autoescape=False,
    )
    env.filters["trim_prefix"] = trim_prefix
    return env


def compile_template(env: Environment, source: str, name: str) -> Template:
    try:
        return env.from_string(source)
    except TemplateError as exc:
        raise TemplateRenderFailure(name, str(exc)) from exc


def render_template(template: Template, name: str, values: Mapping[str, Any]) -> str:
    try:
        return template.render(**values)
    except TemplateError as exc:
        raise TemplateRenderFailure(name, str(exc)) from exc
