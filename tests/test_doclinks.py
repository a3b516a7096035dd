from onedoc.doclinks import resolve_doc_links
from onedoc.events import Code, Emphasis, End, Link, LinkType, Paragraph, Start, Text
from onedoc.links import LinkTable
from onedoc.parse import parse
from onedoc.serialize import to_markdown

from tests.conftest import output_of

LINKS = {
    "Foo": "https://x/a",
    "Bar": "https://x/a",
    "Vec<T>": "https://doc.rust-lang.org/std/vec/struct.Vec.html",
    "vec<u8>": "https://doc.rust-lang.org/std/primitive.u8.html",
}


def reference(identifier, text):
    tag = Link(LinkType.REFERENCE, identifier, "")
    return [Start(tag), Code(text), End(tag)]


def test_resolves_bracketed_code(diagnostics):
    table = LinkTable()
    events = resolve_doc_links(parse("See [`Foo`] and [`Bar`]."), LINKS, table, diagnostics)

    assert events == [
        Start(Paragraph()),
        Text("See "),
        *reference("foo", "Foo"),
        Text(" and "),
        *reference("bar", "Bar"),
        Text("."),
        End(Paragraph()),
    ]
    assert table.definitions() == [("bar", "https://x/a"), ("foo", "https://x/a")]
    assert diagnostics.warnings == []


def test_same_name_with_other_destination_is_numbered(diagnostics):
    table = LinkTable()
    events = resolve_doc_links(parse("[`Vec<T>`] of [`vec<u8>`]"), LINKS, table, diagnostics)

    assert to_markdown(events) == "[`Vec<T>`][vec] of [`vec<u8>`][vec-1]"
    assert table.destinations("vec") == (
        "https://doc.rust-lang.org/std/vec/struct.Vec.html",
        "https://doc.rust-lang.org/std/primitive.u8.html",
    )


def test_table_is_shared_between_documents(diagnostics):
    table = LinkTable()
    resolve_doc_links(parse("[`Vec<T>`]"), LINKS, table, diagnostics)
    second = resolve_doc_links(parse("[`vec<u8>`] and [`Vec<T>`]"), LINKS, table, diagnostics)

    assert to_markdown(second) == "[`vec<u8>`][vec-1] and [`Vec<T>`][vec]"


def test_unknown_link_is_left_literal_with_warning(diagnostics):
    events = resolve_doc_links(parse("Use [`Unknown`] here."), LINKS, LinkTable(), diagnostics)

    assert to_markdown(events) == "Use [`Unknown`] here."
    assert diagnostics.warnings == ["unprocessed link `Unknown`"]
    assert [record.target for record in diagnostics.unresolved] == ["Unknown"]
    assert "warn: unprocessed link `Unknown`" in output_of(diagnostics.err)


def test_bracketed_prose_is_not_a_link(diagnostics):
    source = parse("A [note] and [*emphasis*] and [`Foo` twice `Bar`].")
    events = resolve_doc_links(source, LINKS, LinkTable(), diagnostics)

    assert events == source
    assert diagnostics.warnings == []


def test_shortcut_reference_suffix_is_dropped(diagnostics):
    events = resolve_doc_links(parse("See [`Foo`][] now."), LINKS, LinkTable(), diagnostics)

    assert to_markdown(events) == "See [`Foo`][foo] now."


def test_suffix_must_follow_immediately(diagnostics):
    events = resolve_doc_links(parse("See [`Foo`] [x]."), LINKS, LinkTable(), diagnostics)

    assert to_markdown(events) == "See [`Foo`][foo] [x]."


def test_unclosed_group_passes_through(diagnostics):
    events = [Start(Paragraph()), Text("["), Code("Foo"), Start(Emphasis())]
    resolved = resolve_doc_links(events, LINKS, LinkTable(), diagnostics)

    assert resolved == events


def test_unclosed_suffix_passes_through(diagnostics):
    events = [Text("["), Code("Foo"), Text("]"), Text("["), Text("rest")]
    resolved = resolve_doc_links(events, LINKS, LinkTable(), diagnostics)

    assert resolved == [*reference("foo", "Foo"), Text("["), Text("rest")]


def test_suffix_holding_markup_is_kept(diagnostics):
    events = resolve_doc_links(parse("See [`Foo`][*b]* c"), LINKS, LinkTable(), diagnostics)

    assert events == [
        Start(Paragraph()),
        Text("See "),
        *reference("foo", "Foo"),
        Text("["),
        Start(Emphasis()),
        Text("b"),
        Text("]"),
        End(Emphasis()),
        Text(" c"),
        End(Paragraph()),
    ]
    assert to_markdown(events) == "See [`Foo`][foo][*b]* c"


def test_suffix_spanning_paragraphs_is_kept(diagnostics):
    events = resolve_doc_links(parse("See [`Foo`][x\n\nSecond ] para."), LINKS, LinkTable(), diagnostics)

    assert to_markdown(events) == "See [`Foo`][foo][x\n\nSecond ] para."


def test_identifier_collision_is_reported(diagnostics):
    links = {"Foo": "https://x/type", "foo": "https://x/fn", "Foo-1": "https://x/other"}
    events = resolve_doc_links(parse("[`Foo`], [`foo`] and [`Foo-1`]"), links, LinkTable(), diagnostics)

    assert to_markdown(events) == "[`Foo`][foo], [`foo`][foo-1] and [`Foo-1`][foo-1]"
    assert diagnostics.warnings == ["reference `foo-1` names more than one destination"]
