"""Markdown event stream model.

Part of the `onedoc` framework.

A parsed document is a flat list of events. Container elements open with
`Start(tag)` and close with an `End(tag)` carrying the same tag; everything else
is a leaf event. Fixups consume and produce lists of these events.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


class LinkType(Enum):
    INLINE = "inline"
    REFERENCE = "reference"
    AUTOLINK = "autolink"


class Alignment(Enum):
    NONE = "none"
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass(frozen=True)
class Indented:
    pass


@dataclass(frozen=True)
class Fenced:
    info: str = ""


CodeBlockKind = Union[Indented, Fenced]


@dataclass(frozen=True)
class Paragraph:
    pass


@dataclass(frozen=True)
class Heading:
    level: int
    id: Optional[str] = None
    classes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class BlockQuote:
    pass


@dataclass(frozen=True)
class CodeBlock:
    kind: CodeBlockKind


@dataclass(frozen=True)
class List:
    # None for bullet lists, the first number for ordered lists
    start: Optional[int] = None


@dataclass(frozen=True)
class Item:
    pass


@dataclass(frozen=True)
class FootnoteDefinition:
    label: str


@dataclass(frozen=True)
class Table:
    alignments: Tuple[Alignment, ...] = ()


@dataclass(frozen=True)
class TableHead:
    pass


@dataclass(frozen=True)
class TableRow:
    pass


@dataclass(frozen=True)
class TableCell:
    pass


@dataclass(frozen=True)
class Emphasis:
    pass


@dataclass(frozen=True)
class Strong:
    pass


@dataclass(frozen=True)
class Strikethrough:
    pass


@dataclass(frozen=True)
class Link:
    link_type: LinkType
    destination: str
    title: str = ""


@dataclass(frozen=True)
class Image:
    link_type: LinkType
    destination: str
    title: str = ""


Tag = Union[
    Paragraph,
    Heading,
    BlockQuote,
    CodeBlock,
    List,
    Item,
    FootnoteDefinition,
    Table,
    TableHead,
    TableRow,
    TableCell,
    Emphasis,
    Strong,
    Strikethrough,
    Link,
    Image,
]

INLINE_TAGS = (Emphasis, Strong, Strikethrough, Link, Image)


@dataclass(frozen=True)
class Start:
    tag: Tag


@dataclass(frozen=True)
class End:
    tag: Tag


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Code:
    text: str


@dataclass(frozen=True)
class Html:
    text: str


@dataclass(frozen=True)
class SoftBreak:
    pass


@dataclass(frozen=True)
class HardBreak:
    pass


@dataclass(frozen=True)
class Rule:
    pass


@dataclass(frozen=True)
class FootnoteReference:
    label: str


@dataclass(frozen=True)
class TaskListMarker:
    checked: bool


Event = Union[
    Start,
    End,
    Text,
    Code,
    Html,
    SoftBreak,
    HardBreak,
    Rule,
    FootnoteReference,
    TaskListMarker,
]


def same_family(left: Tag, right: Tag) -> bool:
    """Return True when two tags open and close the same kind of element."""
    return type(left) is type(right)
