import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

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
from linked_notes.core.html import (
    note_href,
    note_id_from_href,
    parse_html,
    render_html,
    render_html_page,
    sanitize_html,
)


def _sample() -> Document:
    return Document((
        Heading(1, (Text("Title"),)),
        Paragraph((
            Text("go to "),
            Text("B", (Mark(NOTE_LINK, "note-b"), Mark("bold"))),
            HardBreak(),
            Text("a < b & c", (Mark("code"),)),
        )),
        BulletList((
            ListItem((Paragraph((Text("one"),)),)),
            ListItem((Paragraph((Text("two", (Mark("italic"),)),)),)),
        )),
        OrderedList((ListItem((Paragraph((Text("first"),)),)),), start=3),
    ))


def test_link_rendered_as_span():
    html = render_html(Document((Paragraph((Text("B", (Mark(NOTE_LINK, "note-b"),)),)),)))
    assert html == '<p><span class="note-link" data-note-link="note-b">B</span></p>'


def test_text_is_escaped():
    html = render_html(Document((Paragraph((Text("<script>"),)),)))
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_render_then_parse():
    doc = _sample()
    assert parse_html(render_html(doc)) == doc


def test_page_render_then_parse():
    doc = _sample()
    page = render_html_page(doc, title="My note")
    assert "<title>My note</title>" in page
    assert parse_html(page) == doc


def test_anchor_with_note_href_is_a_link():
    doc = parse_html('<p>see <a href="note://abc">there</a></p>')
    assert doc.content == (Paragraph((Text("see "), Text("there", (Mark(NOTE_LINK, "abc"),)))),)


def test_web_links_are_plain_text():
    doc = parse_html('<p><a href="https://example.com">web</a></p>')
    assert doc.content == (Paragraph((Text("web"),)),)


def test_scripts_and_unknown_tags_are_dropped():
    doc = parse_html('<p>ok</p><script>alert(1)</script><div><table><tr><td>cell</td></tr></table></div>')
    assert doc.to_plain_text().split("\n")[0] == "ok"
    assert "alert" not in doc.to_plain_text()
    assert "cell" in doc.to_plain_text()


def test_sanitize_removes_javascript_urls():
    cleaned = sanitize_html('<a href="javascript:alert(1)">x</a>')
    assert "javascript" not in cleaned


def test_empty_markup_gives_empty_document():
    assert parse_html("") == Document.empty()


def test_href_helpers():
    assert note_href("a b") == "note://a%20b"
    assert note_id_from_href(note_href("a b")) == "a b"
    assert note_id_from_href("https://example.com") is None
    assert note_id_from_href("note://") is None
