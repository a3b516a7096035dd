"""Event stream to Markdown text.

Part of the `onedoc` framework.

The output conventions are fixed so that rendering the same events twice gives
the same bytes: three-backtick fences, `-` bullets, `***` rules and one blank
line between blocks. Reference links produced by the doc-link resolver are
written as `[text][identifier]`; their definitions are appended by the caller.

Streams cut in the middle of a container (the two halves of a summary split)
are accepted: unclosed elements are closed at the end and a leading `End`
without its `Start` is ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Sequence, Union

from onedoc.errors import MalformedStream
from onedoc.events import (
    INLINE_TAGS,
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
    List as ListTag,
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
    TaskListMarker,
    Text,
    same_family,
)

FENCE = "```"
BULLET = "-"
RULE = "***"
FENCE_RUN_PATTERN = re.compile(r"^ {0,3}(`{3,})", re.MULTILINE)
BACKTICK_RUN_PATTERN = re.compile(r"`+")
DESTINATION_NEEDS_BRACKETS_PATTERN = re.compile(r"[\s<>()]")
BLOCK_START_PATTERN = re.compile(r"^(?:#{1,6}(?=\s|$)|>|[-+*](?=\s|$)|=+\s*$|-+\s*$)")
ORDERED_START_PATTERN = re.compile(r"^(\d{1,9})([.)])(?=\s|$)")
UNDERSCORE_PATTERN = re.compile(r"(?<![A-Za-z0-9])_|_(?![A-Za-z0-9])")
ENTITY_PATTERN = re.compile(r"&(?=#?[A-Za-z0-9]+;)")
HTML_START_PATTERN = re.compile(r"<(?=[A-Za-z/!?])")
# Characters that would turn a literal `]` into link or definition syntax.
BRACKET_FOLLOWERS = "([:"
BRACKET_FOLLOWER_PATTERN = re.compile(r"\](?=[(\[:])")

ALIGNMENT_RULES = {
    Alignment.NONE: "---",
    Alignment.LEFT: ":--",
    Alignment.CENTER: ":-:",
    Alignment.RIGHT: "--:",
}


@dataclass
class Node:
    tag: Union[Tag, None]
    children: List[Union["Node", Event]] = field(default_factory=list)


def build_tree(events: Sequence[Event]) -> Node:
    root = Node(None)
    stack = [root]
    for event in events:
        if isinstance(event, Start):
            node = Node(event.tag)
            stack[-1].children.append(node)
            stack.append(node)
        elif isinstance(event, End):
            if len(stack) == 1:
                continue
            if not same_family(stack[-1].tag, event.tag):
                raise MalformedStream(f"{event!r} closes {stack[-1].tag!r}")
            stack.pop()
        else:
            stack[-1].children.append(event)
    return root


def escape_text(text: str, line_start: bool) -> str:
    """Escape text so it reads back as the same text and not as markup.

    Square brackets are left alone; a `(`, `[` or `:` right after a `]` is
    escaped instead. Underscores inside a word cannot open
    emphasis and are not escaped either.
    """
    escaped = text.replace("\\", "\\\\").replace("`", "\\`").replace("*", "\\*").replace("~", "\\~")
    escaped = UNDERSCORE_PATTERN.sub(r"\\_", escaped)
    escaped = ENTITY_PATTERN.sub(r"\\&", escaped)
    escaped = HTML_START_PATTERN.sub(r"\\<", escaped)
    escaped = BRACKET_FOLLOWER_PATTERN.sub(r"]\\", escaped)
    if line_start:
        if BLOCK_START_PATTERN.match(escaped):
            escaped = "\\" + escaped
        else:
            escaped = ORDERED_START_PATTERN.sub(r"\1\\\2", escaped)
    return escaped


def code_span(text: str) -> str:
    longest = max((len(run) for run in BACKTICK_RUN_PATTERN.findall(text)), default=0)
    ticks = "`" * (longest + 1)
    padding = " " if text.startswith("`") or text.endswith("`") else ""
    return f"{ticks}{padding}{text}{padding}{ticks}"


def link_destination(destination: str) -> str:
    if not destination or DESTINATION_NEEDS_BRACKETS_PATTERN.search(destination):
        return f"<{destination}>"
    return destination


def link_title(title: str) -> str:
    if not title:
        return ""
    escaped = title.replace("\\", "\\\\").replace('"', '\\"')
    return f' "{escaped}"'


def indent_lines(text: str, first: str, rest: str, blank: str = "") -> str:
    """Prefix the first line with `first`, later lines with `rest` and blank ones with `blank`."""
    result: List[str] = []
    for index, line in enumerate(text.split("\n")):
        if index == 0:
            result.append(first + line if line else first.rstrip())
        else:
            result.append(rest + line if line else blank)
    return "\n".join(result)


def _table_line(cells: Sequence[str]) -> str:
    return "| " + " | ".join(cells) + " |"


def _is_block(child: Union[Node, Event]) -> bool:
    if isinstance(child, Node):
        return not isinstance(child.tag, INLINE_TAGS)
    if isinstance(child, Html):
        return child.text.endswith("\n")
    return isinstance(child, Rule)


def _is_loose(node: Node) -> bool:
    for item in node.children:
        if isinstance(item, Node) and any(
            isinstance(child, Node) and isinstance(child.tag, Paragraph) for child in item.children
        ):
            return True
    return False


class MarkdownWriter:
    def __init__(self) -> None:
        self.line_start = True
        # The previous inline output was a literal `]`.
        self.after_bracket = False

    def blocks(self, children: Sequence[Union[Node, Event]], tight: bool = False) -> str:
        rendered: List[str] = []
        run: List[Union[Node, Event]] = []
        for child in children:
            if not _is_block(child):
                run.append(child)
                continue
            if run:
                rendered.append(self.inlines(run))
                run = []
            rendered.append(self.block(child))
        if run:
            rendered.append(self.inlines(run))
        return ("\n" if tight else "\n\n").join(rendered)

    def block(self, child: Union[Node, Event]) -> str:
        if isinstance(child, Html):
            return child.text.rstrip("\n")
        if isinstance(child, Rule):
            return RULE
        if not isinstance(child, Node):
            raise TypeError(f"unexpected block event {child!r}")

        tag = child.tag
        if isinstance(tag, Paragraph):
            return self.inlines(child.children)
        if isinstance(tag, Heading):
            return "#" * tag.level + " " + self.inlines(child.children)
        if isinstance(tag, BlockQuote):
            return indent_lines(self.blocks(child.children), "> ", "> ", ">")
        if isinstance(tag, CodeBlock):
            return self.code_block(tag, child.children)
        if isinstance(tag, ListTag):
            return self.list(tag, child)
        if isinstance(tag, Item):
            # An item cut off from its list by a split stream.
            return indent_lines(self.blocks(child.children), BULLET + " ", "  ")
        if isinstance(tag, FootnoteDefinition):
            return indent_lines(self.blocks(child.children), f"[^{tag.label}]: ", "    ")
        if isinstance(tag, Table):
            return self.table(tag, child)
        if isinstance(tag, (TableHead, TableRow, TableCell)):
            return self.table_row(child)
        raise TypeError(f"unexpected block tag {tag!r}")

    def code_block(self, tag: CodeBlock, children: Sequence[Union[Node, Event]]) -> str:
        body = "".join(child.text for child in children if isinstance(child, Text))
        if isinstance(tag.kind, Indented):
            return "\n".join("    " + line if line else "" for line in body.rstrip("\n").split("\n"))
        if not isinstance(tag.kind, Fenced):
            raise TypeError(f"unknown code block kind {tag.kind!r}")
        longest = max((len(run) for run in FENCE_RUN_PATTERN.findall(body)), default=0)
        fence = FENCE if longest < len(FENCE) else "`" * (longest + 1)
        if body and not body.endswith("\n"):
            body += "\n"
        return f"{fence}{tag.kind.info}\n{body}{fence}"

    def list(self, tag: ListTag, node: Node) -> str:
        tight = not _is_loose(node)
        number = tag.start
        items: List[str] = []
        for item in node.children:
            marker = BULLET if number is None else f"{number}."
            children = item.children if isinstance(item, Node) else [item]
            content = self.blocks(children, tight=tight)
            items.append(indent_lines(content, marker + " ", " " * (len(marker) + 1)))
            if number is not None:
                number += 1
        return ("\n" if tight else "\n\n").join(items)

    def table(self, tag: Table, node: Node) -> str:
        rows = [self.table_cells(child) for child in node.children if isinstance(child, Node)]
        columns = max([len(tag.alignments), *(len(cells) for cells in rows)])
        alignments = list(tag.alignments) + [Alignment.NONE] * (columns - len(tag.alignments))
        lines = [_table_line(cells) for cells in rows]
        lines.insert(1 if lines else 0, _table_line([ALIGNMENT_RULES[alignment] for alignment in alignments]))
        return "\n".join(lines)

    def table_row(self, node: Node) -> str:
        return _table_line(self.table_cells(node))

    def table_cells(self, node: Node) -> List[str]:
        cells = []
        for child in node.children:
            if isinstance(child, Node) and isinstance(child.tag, TableCell):
                cells.append(self.inlines(child.children).replace("|", "\\|"))
        return cells

    def inlines(self, children: Sequence[Union[Node, Event]]) -> str:
        self.line_start = True
        self.after_bracket = False
        return "".join(self.inline(child) for child in children)

    def inline(self, child: Union[Node, Event]) -> str:
        text = self._inline(child)
        if text:
            if self.after_bracket and isinstance(child, Text) and text[0] in BRACKET_FOLLOWERS:
                text = "\\" + text
            self.line_start = text.endswith("\n")
            self.after_bracket = isinstance(child, Text) and text.endswith("]")
        return text

    def _inline(self, child: Union[Node, Event]) -> str:
        if isinstance(child, Node):
            return self.inline_node(child)
        if isinstance(child, Text):
            return escape_text(child.text, self.line_start)
        if isinstance(child, Code):
            return code_span(child.text)
        if isinstance(child, Html):
            return child.text
        if isinstance(child, SoftBreak):
            return "\n"
        if isinstance(child, HardBreak):
            return "\\\n"
        if isinstance(child, FootnoteReference):
            return f"[^{child.label}]"
        if isinstance(child, TaskListMarker):
            return "[x] " if child.checked else "[ ] "
        if isinstance(child, Rule):
            return RULE
        raise TypeError(f"unexpected inline event {child!r}")

    def inline_node(self, node: Node) -> str:
        tag = node.tag
        if isinstance(tag, Link) and tag.link_type is LinkType.AUTOLINK:
            return "<" + "".join(child.text for child in node.children if isinstance(child, Text)) + ">"

        inner = "".join(self.inline(child) for child in node.children)
        if isinstance(tag, Emphasis):
            return f"*{inner}*"
        if isinstance(tag, Strong):
            return f"**{inner}**"
        if isinstance(tag, Strikethrough):
            return f"~~{inner}~~"
        if isinstance(tag, Link):
            if tag.link_type is LinkType.REFERENCE:
                return f"[{inner}][{tag.destination}]"
            return f"[{inner}]({link_destination(tag.destination)}{link_title(tag.title)})"
        if isinstance(tag, Image):
            return f"![{inner}]({link_destination(tag.destination)}{link_title(tag.title)})"
        raise TypeError(f"unexpected inline tag {tag!r}")


def to_markdown(events: Sequence[Event]) -> str:
    """Render events as Markdown text, without a trailing newline."""
    return MarkdownWriter().blocks(build_tree(events).children)
