import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
from PySide6.QtGui import QTextCursor, QTextDocument
from PySide6.QtTest import QTest

from linked_notes.core.document import (
    NOTE_LINK,
    BulletList,
    Document,
    HardBreak,
    Heading,
    ListItem,
    Mark,
    OrderedList,
    Paragraph,
    Text,
)
from linked_notes.core.links import link_spans
from linked_notes.ui.editor import NoteEditor
from linked_notes.ui.qt_bridge import (
    char_format_for,
    document_from_qt,
    document_to_qt,
    marks_from_format,
    unlinked_format,
)


def _sample() -> Document:
    return Document((
        Heading(2, (Text("Title"),)),
        Paragraph((
            Text("plain "),
            Text("link", (Mark(NOTE_LINK, "3f1c-id"),)),
            Text(" bold", (Mark("bold"),)),
            HardBreak(),
            Text("under", (Mark("underline"),)),
        )),
        BulletList((
            ListItem((Paragraph((Text("one"),)),)),
            ListItem((Paragraph((Text("two"),)),)),
        )),
        Paragraph((Text("between"),)),
        OrderedList((ListItem((Paragraph((Text("first", (Mark("italic"),)),)),)),)),
    ))


def test_document_to_qt_and_back(qapp):
    qdoc = QTextDocument()
    document_to_qt(_sample(), qdoc)
    assert document_from_qt(qdoc) == _sample()


def test_empty_document(qapp):
    qdoc = QTextDocument()
    document_to_qt(Document.empty(), qdoc)
    assert document_from_qt(qdoc) == Document.empty()


def test_positions_match_qt_cursor(qapp):
    doc = _sample()
    qdoc = QTextDocument()
    document_to_qt(doc, qdoc)
    [(start, end, target)] = link_spans(doc)
    cursor = QTextCursor(qdoc)
    cursor.setPosition(start)
    cursor.setPosition(end, QTextCursor.MoveMode.KeepAnchor)
    assert cursor.selectedText() == "link"
    assert target == "3f1c-id"


@pytest.mark.parametrize("marks", [
    (),
    (Mark("bold"),),
    (Mark("italic"), Mark("strike")),
    (Mark(NOTE_LINK, "x"), Mark("underline")),
    (Mark("code"),),
])
def test_char_formats(qapp, marks):
    got = marks_from_format(char_format_for(marks))
    # a link is drawn underlined, so a separate underline mark cannot be told apart
    expected = tuple(m for m in marks if not (m.type == "underline" and any(x.type == NOTE_LINK for x in marks)))
    assert got == expected


def test_unlinked_format_keeps_other_styling(qapp):
    fmt = unlinked_format(char_format_for((Mark(NOTE_LINK, "x"), Mark("bold"))))
    assert not fmt.isAnchor()
    assert marks_from_format(fmt) == (Mark("bold"),)


def _select(editor, start, end):
    cursor = editor.textCursor()
    cursor.setPosition(start)
    cursor.setPosition(end, QTextCursor.MoveMode.KeepAnchor)
    editor.setTextCursor(cursor)


def test_editor_set_and_unset_link(qapp):
    editor = NoteEditor()
    changes = []
    editor.bodyChanged.connect(lambda: changes.append(1))
    editor.set_document(Document((Paragraph((Text("Hello world"),)),)))
    assert changes == []

    _select(editor, 0, 5)
    assert editor.set_note_link("target")
    assert link_spans(editor.current_document()) == [(0, 5, "target")]
    assert editor.selection_range() == (0, 5)
    assert len(changes) == 1

    _select(editor, 2, 2)
    assert editor.link_at_cursor() == "target"
    assert editor.unset_note_link()
    assert link_spans(editor.current_document()) == []
    assert not editor.unset_note_link()


def test_editor_link_needs_selection(qapp):
    editor = NoteEditor()
    editor.set_document(Document((Paragraph((Text("Hello"),)),)))
    _select(editor, 1, 1)
    assert not editor.set_note_link("target")


def test_typing_after_link_is_not_linked(qapp):
    editor = NoteEditor()
    editor.set_document(Document((Paragraph((Text("Hello", (Mark(NOTE_LINK, "t"),)),)),)))
    _select(editor, 5, 5)
    QTest.keyClicks(editor, "!")
    doc = editor.current_document()
    assert doc.to_plain_text() == "Hello!"
    assert link_spans(doc) == [(0, 5, "t")]


def test_link_at_cursor_inside_and_after_link(qapp):
    editor = NoteEditor()
    editor.set_document(Document((Paragraph((Text("Hello world"),)),)))
    _select(editor, 0, 5)
    editor.set_note_link("target")

    _select(editor, 5, 5)
    assert editor.link_at_cursor() == "target"
    _select(editor, 8, 8)
    assert editor.link_at_cursor() is None
