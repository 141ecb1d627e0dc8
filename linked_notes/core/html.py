from __future__ import annotations

import html
import re
from html.parser import HTMLParser
from urllib.parse import quote, unquote

import bleach

from .document import (
    NOTE_LINK,
    BulletList,
    Document,
    HardBreak,
    Heading,
    Inline,
    ListItem,
    Mark,
    OrderedList,
    Paragraph,
    Text,
    canonical_marks,
    merge_adjacent,
)

NOTE_SCHEME = "note"
LINK_CLASS = "note-link"
LINK_DATA_ATTR = "data-note-link"

ALLOWED_TAGS = [
    "p", "br",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "ul", "ol", "li",
    "strong", "b", "em", "i", "u", "s", "strike", "del", "code",
    "span", "a",
]
ALLOWED_ATTRS = {
    "span": ["class", LINK_DATA_ATTR],
    "a": ["href"],
    "ol": ["start"],
}
ALLOWED_PROTOCOLS = ["http", "https", "mailto", NOTE_SCHEME]

_SIMPLE_MARK_TAGS = {
    "bold": "strong",
    "italic": "em",
    "underline": "u",
    "strike": "s",
    "code": "code",
}
_TAG_TO_MARK = {
    "strong": "bold", "b": "bold",
    "em": "italic", "i": "italic",
    "u": "underline",
    "s": "strike", "strike": "strike", "del": "strike",
    "code": "code",
}
_HEADINGS = {f"h{i}": i for i in range(1, 7)}
_CONTAINERS = ("ul", "ol", "li")

# doctype and elements whose text is not note content; bleach keeps that text when stripping tags
_NON_CONTENT_RE = re.compile(r"<!doctype[^>]*>|<(head|title|style|script)\b.*?</\1\s*>", re.IGNORECASE | re.DOTALL)


def note_href(note_id: str) -> str:
    return f"{NOTE_SCHEME}://{quote(note_id, safe='')}"


def note_id_from_href(href: str) -> str | None:
    prefix = f"{NOTE_SCHEME}://"
    if not href or not href.startswith(prefix):
        return None
    note_id = unquote(href[len(prefix):]).strip().strip("/")
    return note_id or None


# ───────────────────────── render ─────────────────────────

def _render_text(node: Text) -> str:
    out = html.escape(node.text, quote=False)
    link = None
    for mark in reversed(node.marks):
        if mark.type == NOTE_LINK:
            link = mark
            continue
        tag = _SIMPLE_MARK_TAGS[mark.type]
        out = f"<{tag}>{out}</{tag}>"
    if link is not None:
        attr = html.escape(link.target_id or "", quote=True)
        out = f'<span class="{LINK_CLASS}" {LINK_DATA_ATTR}="{attr}">{out}</span>'
    return out


def _render_inlines(inlines) -> str:
    return "".join("<br>" if isinstance(n, HardBreak) else _render_text(n) for n in inlines)


def _render_block(block) -> str:
    if isinstance(block, Paragraph):
        return f"<p>{_render_inlines(block.content)}</p>"
    if isinstance(block, Heading):
        return f"<h{block.level}>{_render_inlines(block.content)}</h{block.level}>"
    if isinstance(block, BulletList):
        return "<ul>" + "".join(_render_block(i) for i in block.content) + "</ul>"
    if isinstance(block, OrderedList):
        start = f' start="{block.start}"' if block.start != 1 else ""
        return f"<ol{start}>" + "".join(_render_block(i) for i in block.content) + "</ol>"
    if isinstance(block, ListItem):
        return "<li>" + "".join(_render_block(c) for c in block.content) + "</li>"
    raise TypeError(f"cannot render {block!r}")


def render_html(doc: Document) -> str:
    """
    HTML fragment for a note body. Note links become
    <span class="note-link" data-note-link="ID">...</span>.
    """
    return "".join(_render_block(b) for b in doc.content)


def render_html_page(doc: Document, *, title: str) -> str:
    return (
        "<!DOCTYPE html>\n<html><head><meta charset=\"utf-8\">"
        f"<title>{html.escape(title)}</title>"
        "<style>.note-link{color:#2a6fdb;text-decoration:underline;cursor:pointer}</style>"
        f"</head><body>{render_html(doc)}</body></html>\n"
    )


# ───────────────────────── parse ─────────────────────────

class _DocumentBuilder(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._root: list = []
        self._containers: list[tuple[str, list, dict]] = []
        self._inline: list[Inline] | None = None
        self._heading_level = 0
        self._marks: list[tuple[str, Mark | None]] = []

    # ── blocks ──

    def _children(self) -> list:
        return self._containers[-1][1] if self._containers else self._root

    def _open_textblock(self, heading_level: int = 0) -> None:
        self._close_textblock()
        self._inline = []
        self._heading_level = heading_level

    def _ensure_textblock(self) -> None:
        if self._inline is None:
            self._open_textblock()

    def _close_textblock(self) -> None:
        if self._inline is None:
            return
        content = merge_adjacent(self._inline)
        if self._heading_level:
            node = Heading(self._heading_level, content)
        else:
            node = Paragraph(content)
        self._children().append(node)
        self._inline = None
        self._heading_level = 0

    @staticmethod
    def _as_items(children: list) -> tuple[ListItem, ...]:
        return tuple(c if isinstance(c, ListItem) else ListItem((c,)) for c in children)

    def _close_container(self, kind: str, children: list, attrs: dict) -> None:
        if kind == "li":
            node = ListItem(tuple(children) or (Paragraph(),))
        elif kind == "ul":
            node = BulletList(self._as_items(children))
        else:
            try:
                start = int(attrs.get("start") or 1)
            except ValueError:
                start = 1
            node = OrderedList(self._as_items(children), start=start)
        self._children().append(node)

    # ── parser callbacks ──

    def handle_starttag(self, tag, attrs):
        attrs = dict(attrs)
        if tag == "p":
            self._open_textblock()
        elif tag in _HEADINGS:
            self._open_textblock(_HEADINGS[tag])
        elif tag in _CONTAINERS:
            self._close_textblock()
            self._containers.append((tag, [], attrs))
        elif tag == "br":
            self._ensure_textblock()
            self._inline.append(HardBreak())
        else:
            self._marks.append((tag, _mark_for(tag, attrs)))

    def handle_endtag(self, tag):
        if tag == "p" or tag in _HEADINGS:
            self._close_textblock()
        elif tag in _CONTAINERS:
            if not any(kind == tag for kind, _, _ in self._containers):
                return
            self._close_textblock()
            while self._containers:
                kind, children, attrs = self._containers.pop()
                self._close_container(kind, children, attrs)
                if kind == tag:
                    break
        else:
            for i in range(len(self._marks) - 1, -1, -1):
                if self._marks[i][0] == tag:
                    del self._marks[i]
                    break

    def handle_data(self, data):
        data = data.replace("\r", "").replace("\n", " ")
        if self._inline is None:
            if not data.strip():
                return
            self._ensure_textblock()
        marks = canonical_marks(m for _, m in self._marks if m is not None)
        self._inline.append(Text(data, marks))

    def result(self) -> Document:
        self._close_textblock()
        while self._containers:
            kind, children, attrs = self._containers.pop()
            self._close_container(kind, children, attrs)
        return Document(tuple(self._root)) if self._root else Document.empty()


def _mark_for(tag: str, attrs: dict) -> Mark | None:
    if tag == "span":
        target = (attrs.get(LINK_DATA_ATTR) or "").strip()
        return Mark(NOTE_LINK, target) if target else None
    if tag == "a":
        target = note_id_from_href(attrs.get("href") or "")
        return Mark(NOTE_LINK, target) if target else None
    mark_type = _TAG_TO_MARK.get(tag)
    return Mark(mark_type) if mark_type else None


def sanitize_html(markup: str) -> str:
    return bleach.clean(
        _NON_CONTENT_RE.sub("", markup or ""),
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRS,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
        strip_comments=True,
    )


def parse_html(markup: str) -> Document:
    """
    Build a document from (untrusted) HTML.

    Accepts both span[data-note-link] and a[href^="note://"] for note links;
    everything outside the schema is stripped to its text.
    """
    builder = _DocumentBuilder()
    builder.feed(sanitize_html(markup))
    builder.close()
    return builder.result()
