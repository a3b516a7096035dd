"""Markdown to event stream, on top of markdown-it-py.

Part of the `onedoc` framework.

markdown-it produces a flat list of block tokens with nested inline children.
This module flattens both levels into `onedoc.events` events. Two details
matter to the fixups downstream:

- square brackets inside text always become standalone `Text("[")` and
  `Text("]")` events, so unresolved bracket groups can be recognised;
- paragraphs that markdown-it hides (tight list items) produce no events.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional, Sequence

from markdown_it import MarkdownIt
from markdown_it.token import Token
from mdit_py_plugins.footnote import footnote_plugin

from onedoc.events import (
    Alignment,
    BlockQuote,
    Code,
    CodeBlock,
    Emphasis,
    End,
    Event,
    Fenced,
    FootnoteDefinition,
    FootnoteReference,
    HardBreak,
    Heading,
    Html,
    Image,
    Indented,
    Item,
    Link,
    LinkType,
    List,
    Paragraph,
    Rule,
    SoftBreak,
    Start,
    Strikethrough,
    Strong,
    Table,
    TableCell,
    TableHead,
    TableRow,
    Tag,
    Text,
)

BRACKET_SPLIT_PATTERN = re.compile(r"([\[\]])")
ALIGNMENT_PATTERN = re.compile(r"text-align:\s*(left|center|right)")

# Token types that carry no events of their own.
SKIPPED_TOKENS = {
    "footnote_block_open",
    "footnote_block_close",
    "footnote_anchor",
    "tbody_open",
    "tbody_close",
}

SIMPLE_CONTAINERS: Dict[str, Callable[[], Tag]] = {
    "blockquote": BlockQuote,
    "bullet_list": List,
    "list_item": Item,
    "em": Emphasis,
    "strong": Strong,
    "s": Strikethrough,
    "thead": TableHead,
    "th": TableCell,
    "td": TableCell,
}


def build_parser() -> MarkdownIt:
    md = MarkdownIt("commonmark", {"html": True})
    md.enable(["table", "strikethrough"])
    md.use(footnote_plugin)
    return md


_PARSER: Optional[MarkdownIt] = None


def get_parser() -> MarkdownIt:
    global _PARSER
    if _PARSER is None:
        _PARSER = build_parser()
    return _PARSER


def split_text(content: str) -> List[Event]:
    """Split text so that every bracket is an event of its own."""
    return [Text(part) for part in BRACKET_SPLIT_PATTERN.split(content) if part]


def _alignment(token: Token) -> Alignment:
    style = str(token.attrGet("style") or "")
    match = ALIGNMENT_PATTERN.search(style)
    if not match:
        return Alignment.NONE
    return Alignment(match.group(1))


def _table_alignments(tokens: Sequence[Token], start: int) -> tuple:
    alignments: List[Alignment] = []
    for token in tokens[start + 1 :]:
        if token.type == "th_open":
            alignments.append(_alignment(token))
        elif token.type in ("thead_close", "table_close"):
            break
    return tuple(alignments)


def _footnote_label(token: Token) -> str:
    meta = token.meta or {}
    label = meta.get("label")
    if label is None:
        label = str(meta.get("id", ""))
    return str(label)


class _Converter:
    def __init__(self) -> None:
        self.events: List[Event] = []
        # Open tags, None for tokens that open without producing an event.
        self.stack: List[Optional[Tag]] = []
        self.in_table_head = False

    def open(self, tag: Optional[Tag]) -> None:
        self.stack.append(tag)
        if tag is not None:
            self.events.append(Start(tag))

    def close(self) -> None:
        tag = self.stack.pop()
        if tag is not None:
            self.events.append(End(tag))

    def block(self, tokens: Sequence[Token]) -> None:
        for index, token in enumerate(tokens):
            kind = token.type
            if kind in SKIPPED_TOKENS:
                continue
            if kind == "inline":
                self.inline(token.children or [])
            elif kind.endswith("_close"):
                if kind == "thead_close":
                    self.in_table_head = False
                self.close()
            elif kind == "paragraph_open":
                self.open(None if token.hidden else Paragraph())
            elif kind == "heading_open":
                self.open(Heading(int(token.tag[1:])))
            elif kind == "ordered_list_open":
                self.open(List(int(token.attrGet("start") or 1)))
            elif kind == "table_open":
                self.open(Table(_table_alignments(tokens, index)))
            elif kind == "thead_open":
                self.in_table_head = True
                self.open(TableHead())
            elif kind == "tr_open":
                self.open(None if self.in_table_head else TableRow())
            elif kind == "footnote_open":
                self.open(FootnoteDefinition(_footnote_label(token)))
            elif kind.endswith("_open") and kind[: -len("_open")] in SIMPLE_CONTAINERS:
                self.open(SIMPLE_CONTAINERS[kind[: -len("_open")]]())
            elif kind == "fence":
                self.code_block(Fenced(token.info.strip()), token.content)
            elif kind == "code_block":
                self.code_block(Indented(), token.content)
            elif kind == "html_block":
                self.events.append(Html(token.content))
            elif kind == "hr":
                self.events.append(Rule())
            else:
                raise ValueError(f"unsupported block token `{kind}`")

    def code_block(self, kind, content: str) -> None:
        tag = CodeBlock(kind)
        self.events.append(Start(tag))
        if content:
            self.events.append(Text(content))
        self.events.append(End(tag))

    def inline(self, tokens: Sequence[Token]) -> None:
        for token in tokens:
            kind = token.type
            if kind in ("text", "text_special"):
                self.events.extend(split_text(token.content))
            elif kind == "code_inline":
                self.events.append(Code(token.content))
            elif kind == "softbreak":
                self.events.append(SoftBreak())
            elif kind == "hardbreak":
                self.events.append(HardBreak())
            elif kind == "html_inline":
                self.events.append(Html(token.content))
            elif kind == "footnote_ref":
                self.events.append(FootnoteReference(_footnote_label(token)))
            elif kind == "link_open":
                link_type = LinkType.AUTOLINK if token.markup == "autolink" else LinkType.INLINE
                title = str(token.attrGet("title") or "")
                self.open(Link(link_type, str(token.attrGet("href") or ""), title))
            elif kind == "image":
                tag = Image(LinkType.INLINE, str(token.attrGet("src") or ""), str(token.attrGet("title") or ""))
                self.events.append(Start(tag))
                self.inline(token.children or [])
                self.events.append(End(tag))
            elif kind.endswith("_close"):
                self.close()
            elif kind.endswith("_open") and kind[: -len("_open")] in SIMPLE_CONTAINERS:
                self.open(SIMPLE_CONTAINERS[kind[: -len("_open")]]())
            else:
                raise ValueError(f"unsupported inline token `{kind}`")


def parse(text: str) -> List[Event]:
    """Parse Markdown text into a list of events."""
    converter = _Converter()
    converter.block(get_parser().parse(text))
    return converter.events
