"""Intra-doc link resolution.

Part of the `onedoc` framework.

Rustdoc lets documentation refer to items with a bare code span in brackets,
e.g. ``[`Vec`]``. Such a link has no destination in plain Markdown, so the
parser leaves the brackets as text. This module finds those bracket groups,
looks the code span up in the configured link map and replaces the group with
a reference-style link whose identifier comes from the `LinkTable`.

Scanning is a two-state machine: outside a bracket group, or collecting the
events of one. Anything it cannot resolve is passed through as it was.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Mapping, Sequence

from onedoc.diagnostics import Diagnostics
from onedoc.events import Code, End, Event, Link, LinkType, Start, Text
from onedoc.links import LinkTable, reference_name

OPEN_BRACKET = "["
CLOSE_BRACKET = "]"


class ScanState(Enum):
    OUTSIDE = "outside"
    COLLECTING = "collecting"


def is_open_bracket(event: Event) -> bool:
    return isinstance(event, Text) and event.text == OPEN_BRACKET


def is_close_bracket(event: Event) -> bool:
    return isinstance(event, Text) and event.text == CLOSE_BRACKET


def is_flat(interior: Sequence[Event]) -> bool:
    """True when a group neither opens nor closes an element."""
    return not any(isinstance(event, (Start, End)) for event in interior)


def literal_group(interior: Sequence[Event], closed: bool = True) -> List[Event]:
    group: List[Event] = [Text(OPEN_BRACKET), *interior]
    if closed:
        group.append(Text(CLOSE_BRACKET))
    return group


class DocLinkResolver:
    def __init__(self, links: Mapping[str, str], table: LinkTable, diagnostics: Diagnostics) -> None:
        self.links = links
        self.table = table
        self.diagnostics = diagnostics

    def resolve_group(self, interior: Sequence[Event]) -> List[Event]:
        """Turn one closed bracket group into a link, or give it back literally."""
        if len(interior) != 1 or not isinstance(interior[0], Code):
            return literal_group(interior)

        code = interior[0]
        destination = self.links.get(code.text)
        name = reference_name(code.text)
        if destination is None or not name:
            self.diagnostics.unresolved_link(code.text)
            return literal_group(interior)

        identifier = self.table.lookup_or_register(name, destination)
        if self.table.is_ambiguous(identifier):
            self.diagnostics.warn(f"reference `{identifier}` names more than one destination")
        tag = Link(LinkType.REFERENCE, identifier, "")
        return [Start(tag), code, End(tag)]

    def resolve(self, events: Sequence[Event]) -> List[Event]:
        result: List[Event] = []
        state = ScanState.OUTSIDE
        interior: List[Event] = []
        # True right after a group closed: a group opening now is its `[]` suffix.
        after_group = False
        in_suffix = False

        for event in events:
            if state is ScanState.OUTSIDE:
                follows_group, after_group = after_group, False
                if is_open_bracket(event):
                    state = ScanState.COLLECTING
                    interior = []
                    in_suffix = follows_group
                else:
                    result.append(event)
                continue

            if not is_close_bracket(event):
                interior.append(event)
                continue

            state = ScanState.OUTSIDE
            if in_suffix:
                in_suffix = False
                if not is_flat(interior):
                    result.extend(literal_group(interior))
            else:
                result.extend(self.resolve_group(interior))
                after_group = True

        if state is ScanState.COLLECTING:
            result.extend(literal_group(interior, closed=False))
        return result


def resolve_doc_links(
    events: Sequence[Event],
    links: Mapping[str, str],
    table: LinkTable,
    diagnostics: Diagnostics,
) -> List[Event]:
    """Replace ``[`name`]`` groups with reference links to configured URLs."""
    return DocLinkResolver(links, table, diagnostics).resolve(events)
