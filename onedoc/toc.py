"""Table of contents for rendered Markdown.

Part of the `onedoc` framework.

Builds a nested list of `[Heading](#slug)` links with GitHub-style slugs, the
same anchors a Markdown host generates for the headings.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Dict, List, Sequence, Tuple

from onedoc.events import Code, End, Event, Heading, Image, Link, Start, Text
from onedoc.parse import parse
from onedoc.serialize import to_markdown

DEFAULT_LEVELS = (2, 6)
SLUG_STRIP_PATTERN = re.compile(r"[^\w\- ]")


def slugify(text: str, *, seen: Dict[str, int]) -> str:
    normalized = unicodedata.normalize("NFKD", text)
    normalized = "".join(char for char in normalized if not unicodedata.combining(char))
    normalized = SLUG_STRIP_PATTERN.sub("", normalized.lower().strip()).replace(" ", "-")

    count = seen.get(normalized, 0)
    seen[normalized] = count + 1
    if count:
        return f"{normalized}-{count}"
    return normalized


def collect_headings(events: Sequence[Event]) -> List[Tuple[int, List[Event]]]:
    """Return `(level, content events)` for every heading, links unwrapped."""
    headings: List[Tuple[int, List[Event]]] = []
    current: List[Event] | None = None
    level = 0
    for event in events:
        if isinstance(event, Start) and isinstance(event.tag, Heading):
            current = []
            level = event.tag.level
        elif isinstance(event, End) and isinstance(event.tag, Heading):
            if current is not None:
                headings.append((level, current))
            current = None
        elif current is not None:
            if isinstance(event, (Start, End)) and isinstance(event.tag, (Link, Image)):
                continue
            current.append(event)
    return headings


def plain_text(events: Sequence[Event]) -> str:
    return "".join(event.text for event in events if isinstance(event, (Text, Code)))


def table_of_contents(markdown: str, levels: Tuple[int, int] = DEFAULT_LEVELS) -> str:
    """Render a nested list linking every heading within `levels`."""
    low, high = levels
    seen: Dict[str, int] = {}
    lines: List[str] = []
    for level, content in collect_headings(parse(markdown)):
        slug = slugify(plain_text(content), seen=seen)
        if not low <= level <= high:
            continue
        indent = "  " * (level - low)
        lines.append(f"{indent}- [{to_markdown(content)}](#{slug})")
    return "\n".join(lines)
