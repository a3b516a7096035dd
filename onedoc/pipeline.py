"""Rendering one output document from its sources.

Part of the `onedoc` framework.

Every source is parsed once and fixed up according to its kind:

- all sources: headings move one level down (the template owns the `#` title)
- Rust doc comments: code blocks become `rust` blocks without hidden lines,
  and ``[`name`]`` doc links become reference links
- Markdown files: relative file links are pointed at their configured URLs

The fixed-up streams are concatenated, split into summary and contents,
serialized and handed to the template. Definitions for the reference links the
document uses are appended after the template output.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Sequence

from jinja2 import Template

from onedoc.diagnostics import Diagnostics
from onedoc.doclinks import resolve_doc_links
from onedoc.errors import HeadingLevelOverflow, MalformedStream
from onedoc.events import Event, Link, LinkType, Start
from onedoc.fixes import normalize_code_blocks, rewrite_relative_links, shift_headings, split_summary
from onedoc.links import LinkTable
from onedoc.parse import parse
from onedoc.serialize import to_markdown
from onedoc.sources import Kind, Source
from onedoc.templates import render_template
from onedoc.toc import table_of_contents

DOC_LANGUAGE = "rust"


def process(
    source: Source,
    links: Mapping[str, str],
    table: LinkTable,
    diagnostics: Diagnostics,
    language: str = DOC_LANGUAGE,
) -> List[Event]:
    """Parse one source and apply the fixups for its kind."""
    try:
        events = shift_headings(parse(source.text))
        if source.kind is Kind.RUSTDOC:
            events = normalize_code_blocks(events, language)
            events = resolve_doc_links(events, links, table, diagnostics)
        elif source.kind is Kind.MARKDOWN:
            events = rewrite_relative_links(events, links, diagnostics)
        else:
            raise TypeError(f"unknown source kind {source.kind!r}")
    except (MalformedStream, HeadingLevelOverflow) as exc:
        raise exc.with_path(source.path) from exc
    return events


def used_references(events: Sequence[Event]) -> List[str]:
    """Identifiers of the reference links in `events`, first use first."""
    identifiers: List[str] = []
    for event in events:
        if isinstance(event, Start) and isinstance(event.tag, Link) and event.tag.link_type is LinkType.REFERENCE:
            if event.tag.destination not in identifiers:
                identifiers.append(event.tag.destination)
    return identifiers


def reference_footer(table: LinkTable, used: Sequence[str]) -> str:
    return "".join(f"[{identifier}]: {destination}\n" for identifier, destination in table.definitions(used))


def render(
    template: Template,
    template_name: str,
    sources: Sequence[Source],
    manifest: Mapping[str, Any],
    links: Mapping[str, str],
    table: LinkTable,
    diagnostics: Diagnostics,
) -> str:
    events: List[Event] = []
    for source in sources:
        events.extend(process(source, links, table, diagnostics))

    full_contents = to_markdown(events)
    summary_events, content_events = split_summary(events)
    rendered = render_template(
        template,
        template_name,
        {
            "manifest": manifest,
            "summary": to_markdown(summary_events),
            "contents": to_markdown(content_events),
            "full_contents": full_contents,
            "toc": table_of_contents(full_contents),
        },
    )

    used = used_references(events)
    if used:
        rendered = rendered.rstrip("\n") + "\n\n" + reference_footer(table, used)
    return rendered
