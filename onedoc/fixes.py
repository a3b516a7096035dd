"""Event stream fixups applied before a document is serialized.

Part of the `onedoc` framework.

Each fixup takes a list of events and returns a new list; none of them
mutates its input. Doc-link resolution lives in `onedoc.doclinks`.
"""

from __future__ import annotations

import re
from typing import Iterator, List, Mapping, Optional, Sequence, Tuple

from onedoc.diagnostics import Diagnostics
from onedoc.errors import HeadingLevelOverflow, MalformedStream
from onedoc.events import (
    CodeBlock,
    End,
    Event,
    Fenced,
    Heading,
    Indented,
    Link,
    LinkType,
    Paragraph,
    Start,
    Text,
)

MIN_HEADING_LEVEL = 1
MAX_HEADING_LEVEL = 6
HIDDEN_LINE_MARKER = "#"
ABSOLUTE_LINK_PATTERN = re.compile(r"^(#|(?:[a-z+]+:)?//)")
LINE_BREAK_PATTERN = re.compile(r"\r?\n")


def shift_headings(events: Sequence[Event], offset: int = 1) -> List[Event]:
    """Move every heading `offset` levels deeper."""
    result: List[Event] = []
    iterator = iter(events)
    for event in iterator:
        if not (isinstance(event, Start) and isinstance(event.tag, Heading)):
            result.append(event)
            continue
        level = event.tag.level + offset
        if not MIN_HEADING_LEVEL <= level <= MAX_HEADING_LEVEL:
            raise HeadingLevelOverflow(level)
        tag = Heading(level, event.tag.id, event.tag.classes)
        result.append(Start(tag))
        for inner in iterator:
            if isinstance(inner, End) and isinstance(inner.tag, Heading):
                result.append(End(tag))
                break
            result.append(inner)
        else:
            raise MalformedStream(f"heading at level {event.tag.level} is never closed")
    return result


def is_primary_language(kind: object, language: str) -> bool:
    if isinstance(kind, Indented):
        return True
    if isinstance(kind, Fenced):
        return kind.info in ("", language)
    raise TypeError(f"unknown code block kind {kind!r}")


def is_hidden_line(line: str) -> bool:
    stripped = line.strip()
    return stripped == HIDDEN_LINE_MARKER or stripped.startswith(HIDDEN_LINE_MARKER + " ")


def split_lines(text: str) -> List[str]:
    lines = LINE_BREAK_PATTERN.split(text)
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def strip_hidden_lines(code: str) -> str:
    """Drop hidden lines and end each remaining line with a single newline."""
    return "".join(f"{line}\n" for line in split_lines(code) if not is_hidden_line(line))


def normalize_code_blocks(events: Sequence[Event], language: str = "rust") -> List[Event]:
    """Tag untagged code blocks with `language` and hide their `# ` lines."""
    result: List[Event] = []
    iterator = iter(events)
    for event in iterator:
        if not (
            isinstance(event, Start)
            and isinstance(event.tag, CodeBlock)
            and is_primary_language(event.tag.kind, language)
        ):
            result.append(event)
            continue

        kind = event.tag.kind
        if isinstance(kind, Fenced) and not kind.info:
            kind = Fenced(language)
        tag = CodeBlock(kind)
        result.append(Start(tag))
        for inner in iterator:
            if isinstance(inner, Text):
                result.append(Text(strip_hidden_lines(inner.text)))
            elif isinstance(inner, End) and isinstance(inner.tag, CodeBlock):
                result.append(End(tag))
                break
            else:
                raise MalformedStream(f"expected the end of a code block, got {inner!r}")
        else:
            raise MalformedStream("code block is never closed")
    return result


def split_fragment(destination: str) -> Tuple[str, str]:
    """Split `path#fragment` into the path and the fragment (with its `#`)."""
    index = destination.find("#")
    if index == -1:
        return destination, ""
    return destination[:index], destination[index:]


def _link_body(iterator: Iterator[Event]) -> Tuple[List[Event], Optional[End]]:
    """Collect events up to the `End` closing the current link."""
    body: List[Event] = []
    depth = 0
    for event in iterator:
        if isinstance(event, Start) and isinstance(event.tag, Link):
            depth += 1
        elif isinstance(event, End) and isinstance(event.tag, Link):
            if depth == 0:
                return body, event
            depth -= 1
        body.append(event)
    return body, None


def rewrite_relative_links(
    events: Sequence[Event],
    links: Mapping[str, str],
    diagnostics: Diagnostics,
) -> List[Event]:
    """Point relative file links at the URLs configured for them."""
    result: List[Event] = []
    iterator = iter(events)
    for event in iterator:
        if not (
            isinstance(event, Start)
            and isinstance(event.tag, Link)
            and event.tag.link_type is LinkType.INLINE
            and not ABSOLUTE_LINK_PATTERN.match(event.tag.destination)
        ):
            result.append(event)
            continue

        path, fragment = split_fragment(event.tag.destination)
        body, end = _link_body(iterator)
        if end is None:
            raise MalformedStream(f"link to `{event.tag.destination}` is never closed")

        target = links.get(path)
        if target is None:
            diagnostics.unresolved_link(path)
            result.append(event)
            result.extend(body)
            result.append(end)
            continue

        tag = Link(LinkType.INLINE, f"{target}{fragment}", event.tag.title)
        result.append(Start(tag))
        result.extend(body)
        result.append(End(tag))
    return result


def split_summary(events: Sequence[Event]) -> Tuple[List[Event], List[Event]]:
    """Split off everything up to the end of the first paragraph."""
    depth = 0
    for index, event in enumerate(events):
        if isinstance(event, Start) and isinstance(event.tag, Paragraph):
            depth += 1
        elif isinstance(event, End) and isinstance(event.tag, Paragraph):
            depth -= 1
            if depth == 0:
                return list(events[: index + 1]), list(events[index + 1 :])
    return list(events), []
