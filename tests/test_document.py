import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest

from linked_notes.core.document import (
    NOTE_LINK,
    BulletList,
    Document,
    DocumentSchemaError,
    HardBreak,
    Heading,
    ListItem,
    Mark,
    NoteFormatError,
    OrderedList,
    Paragraph,
    Text,
    canonical_marks,
    merge_adjacent,
    parse_document,
)


def _sample() -> Document:
    return Document((
        Heading(2, (Text("Plan"),)),
        Paragraph((
            Text("see "),
            Text("other", (Mark(NOTE_LINK, "id-1"), Mark("bold"))),
            HardBreak(),
            Text("next line", (Mark("italic"),)),
        )),
        BulletList((ListItem((Paragraph((Text("one"),)),)),)),
        OrderedList((ListItem((Paragraph((Text("first"),)),)),), start=3),
    ))


def test_empty_document_shape():
    assert Document.empty().to_dict() == {"type": "doc", "content": [{"type": "paragraph"}]}


def test_to_dict_then_parse_gives_same_tree():
    doc = _sample()
    assert parse_document(doc.to_dict()) == doc


def test_link_mark_json_shape():
    data = Text("x", (Mark(NOTE_LINK, "abc"),)).to_dict()
    assert data == {"type": "text", "text": "x", "marks": [{"type": "noteLink", "attrs": {"noteId": "abc"}}]}


def test_parse_accepts_missing_type_and_content():
    assert parse_document({}) == Document(())
    assert parse_document({"type": "doc", "content": [{"type": "paragraph"}]}) == Document.empty()


def test_marks_are_put_in_canonical_order():
    doc = parse_document({"type": "doc", "content": [{"type": "paragraph", "content": [
        {"type": "text", "text": "x", "marks": [
            {"type": "bold"},
            {"type": "noteLink", "attrs": {"noteId": "n"}},
        ]},
    ]}]})
    assert doc.content[0].content[0].marks == (Mark(NOTE_LINK, "n"), Mark("bold"))


@pytest.mark.parametrize("data", [
    [],
    {"type": "page"},
    {"type": "doc", "content": "text"},
    {"type": "doc", "content": [{"type": "table"}]},
    {"type": "doc", "content": [{"type": "heading", "attrs": {"level": 7}}]},
    {"type": "doc", "content": [{"type": "paragraph", "content": [{"type": "image"}]}]},
    {"type": "doc", "content": [{"type": "paragraph", "content": [{"type": "text"}]}]},
    {"type": "doc", "content": [{"type": "paragraph", "content": [
        {"type": "text", "text": "x", "marks": [{"type": "noteLink"}]},
    ]}]},
    {"type": "doc", "content": [{"type": "paragraph", "content": [
        {"type": "text", "text": "x", "marks": [{"type": "highlight"}]},
    ]}]},
    {"type": "doc", "content": [{"type": "bulletList", "content": [{"type": "paragraph"}]}]},
])
def test_schema_violations_raise(data):
    with pytest.raises(DocumentSchemaError):
        parse_document(data)


def test_schema_error_is_a_format_error():
    assert issubclass(DocumentSchemaError, NoteFormatError)
    assert issubclass(NoteFormatError, ValueError)


def test_plain_text_recovery_variant():
    doc = Document.plain_text("first\nsecond")
    assert doc.recovered
    assert doc.content == (Paragraph((Text("first"), HardBreak(), Text("second"))),)
    assert doc.to_plain_text() == "first\nsecond"


def test_recovered_flag_does_not_affect_equality():
    recovered = Document.plain_text("abc")
    assert recovered == Document((Paragraph((Text("abc"),)),))


def test_to_plain_text_joins_blocks():
    assert _sample().to_plain_text() == "Plan\nsee other\nnext line\none\nfirst"


def test_merge_adjacent():
    bold = (Mark("bold"),)
    merged = merge_adjacent([Text("a", bold), Text("b", bold), Text(""), Text("c")])
    assert merged == (Text("ab", bold), Text("c"))


def test_canonical_marks_keeps_last_of_a_type():
    marks = canonical_marks([Mark(NOTE_LINK, "a"), Mark("italic"), Mark(NOTE_LINK, "b")])
    assert marks == (Mark(NOTE_LINK, "b"), Mark("italic"))
