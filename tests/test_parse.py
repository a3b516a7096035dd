from onedoc.events import (
    Alignment,
    BlockQuote,
    Code,
    CodeBlock,
    End,
    Fenced,
    FootnoteDefinition,
    FootnoteReference,
    Heading,
    Html,
    Image,
    Item,
    Link,
    LinkType,
    List,
    Paragraph,
    Rule,
    SoftBreak,
    Start,
    Table,
    TableCell,
    TableHead,
    TableRow,
    Text,
)
from onedoc.parse import parse, split_text


def test_split_text_isolates_brackets():
    assert split_text("a [b] c") == [Text("a "), Text("["), Text("b"), Text("]"), Text(" c")]
    assert split_text("][") == [Text("]"), Text("[")]
    assert split_text("") == []


def test_bracketed_code_is_left_as_text_and_code():
    assert parse("[`Foo`]") == [
        Start(Paragraph()),
        Text("["),
        Code("Foo"),
        Text("]"),
        End(Paragraph()),
    ]


def test_heading_and_paragraph():
    assert parse("## Title\n\nline one\nline two\n") == [
        Start(Heading(2)),
        Text("Title"),
        End(Heading(2)),
        Start(Paragraph()),
        Text("line one"),
        SoftBreak(),
        Text("line two"),
        End(Paragraph()),
    ]


def test_tight_list_items_have_no_paragraphs():
    assert parse("- a\n- b\n") == [
        Start(List()),
        Start(Item()),
        Text("a"),
        End(Item()),
        Start(Item()),
        Text("b"),
        End(Item()),
        End(List()),
    ]


def test_loose_ordered_list_keeps_paragraphs_and_start():
    events = parse("3. a\n\n4. b\n")
    assert events[0] == Start(List(3))
    assert events[1:4] == [Start(Item()), Start(Paragraph()), Text("a")]


def test_fenced_code_keeps_info_and_body():
    assert parse("```rust,ignore\nlet x = 1;\n```\n") == [
        Start(CodeBlock(Fenced("rust,ignore"))),
        Text("let x = 1;\n"),
        End(CodeBlock(Fenced("rust,ignore"))),
    ]


def test_links_and_images():
    events = parse('[a](https://x "T") ![alt](img.png) <https://auto.example>')
    assert Start(Link(LinkType.INLINE, "https://x", "T")) in events
    assert Start(Image(LinkType.INLINE, "img.png", "")) in events
    assert Text("alt") in events
    assert Start(Link(LinkType.AUTOLINK, "https://auto.example", "")) in events


def test_blockquote_rule_and_html():
    events = parse("> quote\n\n***\n\n<div>\nraw\n</div>\n")
    assert events[:5] == [Start(BlockQuote()), Start(Paragraph()), Text("quote"), End(Paragraph()), End(BlockQuote())]
    assert events[5] == Rule()
    assert events[6] == Html("<div>\nraw\n</div>\n")


def test_table_structure_and_alignment():
    events = parse("| a | b |\n| --- | :-: |\n| 1 | 2 |\n")
    assert events[0] == Start(Table((Alignment.NONE, Alignment.CENTER)))
    assert events[1:5] == [Start(TableHead()), Start(TableCell()), Text("a"), End(TableCell())]
    assert Start(TableRow()) in events
    assert events[-1] == End(Table((Alignment.NONE, Alignment.CENTER)))


def test_footnotes():
    events = parse("Text[^1].\n\n[^1]: The note.\n")
    assert FootnoteReference("1") in events
    assert Start(FootnoteDefinition("1")) in events
    assert Text("The note.") in events
