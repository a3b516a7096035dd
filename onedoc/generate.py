"""Generating every configured document and syncing it to disk.

Part of the `onedoc` framework.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

from jinja2 import Environment, Template

from onedoc.config import Config, Doc
from onedoc.diagnostics import Diagnostics
from onedoc.errors import IoFailure, MalformedStream, OnedocError
from onedoc.links import LinkTable
from onedoc.pipeline import render
from onedoc.sources import check_kinds, load_source, read_text
from onedoc.templates import DEFAULT_TEMPLATE, DEFAULT_TEMPLATE_NAME, build_environment, compile_template


class Outcome(Enum):
    UP_TO_DATE = "up to date"
    UPDATED = "updated"
    OUT_OF_DATE = "out of date"


@dataclass
class Context:
    config: Config
    manifest: Mapping[str, Any]
    check: bool = False
    keep_going: bool = False


@dataclass
class RunReport:
    outcomes: Dict[Path, Outcome] = field(default_factory=dict)
    failures: Dict[Path, OnedocError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures and Outcome.OUT_OF_DATE not in self.outcomes.values()


def load_template(env: Environment, doc: Doc) -> Tuple[Template, str]:
    if doc.template is None:
        return compile_template(env, DEFAULT_TEMPLATE, DEFAULT_TEMPLATE_NAME), DEFAULT_TEMPLATE_NAME
    name = str(doc.template)
    return compile_template(env, read_text(doc.template), name), name


def read_current(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return ""
    except (OSError, UnicodeDecodeError) as exc:
        raise IoFailure("read current contents of", path, str(exc)) from exc


def sync_output(path: Path, rendered: str, check: bool, diagnostics: Diagnostics) -> Outcome:
    """Write `rendered` to `path` unless it is already there (or `check` is set)."""
    if read_current(path) == rendered:
        diagnostics.status(f"{path} is up to date")
        return Outcome.UP_TO_DATE
    if check:
        diagnostics.status(f"{path} is out of date")
        return Outcome.OUT_OF_DATE
    try:
        path.write_text(rendered, encoding="utf-8")
    except OSError as exc:
        raise IoFailure("write to", path, str(exc)) from exc
    diagnostics.status(f"{path} was updated")
    return Outcome.UPDATED


def render_doc(
    env: Environment,
    ctx: Context,
    doc: Doc,
    table: LinkTable,
    diagnostics: Diagnostics,
) -> str:
    template, template_name = load_template(env, doc)
    sources = [load_source(path) for path in doc.inputs]
    try:
        return render(template, template_name, sources, ctx.manifest, ctx.config.links, table, diagnostics)
    except MalformedStream as exc:
        # Serializer errors carry no source path yet.
        if exc.path is not None:
            raise
        raise exc.with_path(doc.output) from exc


def generate_doc(
    env: Environment,
    ctx: Context,
    doc: Doc,
    table: LinkTable,
    diagnostics: Diagnostics,
) -> Outcome:
    rendered = render_doc(env, ctx, doc, table, diagnostics)
    return sync_output(doc.output, rendered, ctx.check, diagnostics)


def generate_all(ctx: Context, diagnostics: Diagnostics) -> RunReport:
    """Generate every document in configuration order.

    Unsupported inputs are rejected before anything is rendered. The link table
    is shared by all documents so reference identifiers agree between them.
    """
    check_kinds(path for doc in ctx.config.docs for path in doc.inputs)

    env = build_environment()
    table = LinkTable()
    report = RunReport()
    for doc in ctx.config.docs:
        try:
            report.outcomes[doc.output] = generate_doc(env, ctx, doc, table, diagnostics)
        except OnedocError as exc:
            if not ctx.keep_going:
                raise
            diagnostics.error(str(exc))
            report.failures[doc.output] = exc
    return report
