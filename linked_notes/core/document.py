# linked_notes/core/document.py

"""
Typed rich-text tree stored in note files.

On disk the tree uses the editor's JSON shape:

    {"type": "doc", "content": [{"type": "paragraph", "content": [...]}, ...]}

Loading validates every node against the schema below and raises
DocumentSchemaError on anything unknown, so callers can switch to the
explicit plain-text recovery variant instead of editing a half-parsed tree.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Callable, Union


NOTE_LINK = "noteLink"
NOTE_LINK_ATTR = "noteId"

# canonical order; the link mark is outermost when rendered
MARK_TYPES = (NOTE_LINK, "bold", "italic", "underline", "strike", "code")

HEADING_LEVELS = range(1, 7)


class NoteFormatError(ValueError):
    """Note file content is not a valid note (bad JSON or bad tree)."""


class DocumentSchemaError(NoteFormatError):
    """Parsed JSON does not match the document schema."""


# ───────────────────────── nodes ─────────────────────────

@dataclass(frozen=True)
class Mark:
    type: str
    target_id: str | None = None

    def to_dict(self) -> dict:
        if self.type == NOTE_LINK:
            return {"type": NOTE_LINK, "attrs": {NOTE_LINK_ATTR: self.target_id}}
        return {"type": self.type}


@dataclass(frozen=True)
class Text:
    text: str
    marks: tuple[Mark, ...] = ()

    def to_dict(self) -> dict:
        out: dict = {"type": "text", "text": self.text}
        if self.marks:
            out["marks"] = [m.to_dict() for m in self.marks]
        return out

    @property
    def link_target(self) -> str | None:
        for m in self.marks:
            if m.type == NOTE_LINK:
                return m.target_id
        return None


@dataclass(frozen=True)
class HardBreak:
    def to_dict(self) -> dict:
        return {"type": "hardBreak"}


Inline = Union[Text, HardBreak]


@dataclass(frozen=True)
class Paragraph:
    content: tuple[Inline, ...] = ()

    def to_dict(self) -> dict:
        out: dict = {"type": "paragraph"}
        if self.content:
            out["content"] = [n.to_dict() for n in self.content]
        return out


@dataclass(frozen=True)
class Heading:
    level: int = 1
    content: tuple[Inline, ...] = ()

    def to_dict(self) -> dict:
        out: dict = {"type": "heading", "attrs": {"level": self.level}}
        if self.content:
            out["content"] = [n.to_dict() for n in self.content]
        return out


TextBlock = Union[Paragraph, Heading]


@dataclass(frozen=True)
class ListItem:
    content: tuple["Block", ...] = ()

    def to_dict(self) -> dict:
        return {"type": "listItem", "content": [n.to_dict() for n in self.content]}


@dataclass(frozen=True)
class BulletList:
    content: tuple[ListItem, ...] = ()

    def to_dict(self) -> dict:
        return {"type": "bulletList", "content": [n.to_dict() for n in self.content]}


@dataclass(frozen=True)
class OrderedList:
    content: tuple[ListItem, ...] = ()
    start: int = 1

    def to_dict(self) -> dict:
        return {
            "type": "orderedList",
            "attrs": {"start": self.start},
            "content": [n.to_dict() for n in self.content],
        }


Block = Union[Paragraph, Heading, BulletList, OrderedList]


@dataclass(frozen=True)
class Document:
    content: tuple[Block, ...] = ()
    # set only on the plain-text recovery variant; not part of equality
    recovered: bool = field(default=False, compare=False)

    @classmethod
    def empty(cls) -> "Document":
        return cls((Paragraph(),))

    @classmethod
    def plain_text(cls, text: str) -> "Document":
        """Recovery variant: raw text in one paragraph, lines split by hard breaks."""
        inlines: list[Inline] = []
        for i, line in enumerate((text or "").split("\n")):
            if i:
                inlines.append(HardBreak())
            if line:
                inlines.append(Text(line))
        return cls((Paragraph(tuple(inlines)),), recovered=True)

    def to_dict(self) -> dict:
        return {"type": "doc", "content": [n.to_dict() for n in self.content]}

    def to_plain_text(self) -> str:
        lines = []
        for block in iter_textblocks(self):
            lines.append("".join("\n" if isinstance(n, HardBreak) else n.text for n in block.content))
        return "\n".join(lines)


# ───────────────────────── traversal ─────────────────────────

def iter_textblocks(doc: Document) -> Iterator[TextBlock]:
    """Text blocks in document order (list items are flattened)."""
    def walk(blocks: Iterable) -> Iterator[TextBlock]:
        for b in blocks:
            if isinstance(b, (Paragraph, Heading)):
                yield b
            else:
                # lists and list items
                yield from walk(b.content)

    yield from walk(doc.content)


def map_textblocks(doc: Document, fn: Callable[[TextBlock], TextBlock]) -> Document:
    """Rebuild `doc` with every text block replaced by fn(block), in document order."""
    def rebuild(node):
        if isinstance(node, (Paragraph, Heading)):
            return fn(node)
        if isinstance(node, ListItem):
            return ListItem(tuple(rebuild(c) for c in node.content))
        if isinstance(node, BulletList):
            return BulletList(tuple(rebuild(c) for c in node.content))
        if isinstance(node, OrderedList):
            return OrderedList(tuple(rebuild(c) for c in node.content), start=node.start)
        raise TypeError(f"unexpected node {node!r}")

    return Document(tuple(rebuild(b) for b in doc.content), recovered=doc.recovered)


def inline_length(node: Inline) -> int:
    return len(node.text) if isinstance(node, Text) else 1


def canonical_marks(marks: Iterable[Mark]) -> tuple[Mark, ...]:
    """One mark per type, in MARK_TYPES order (last one of a type wins)."""
    by_type: dict[str, Mark] = {}
    for m in marks:
        by_type[m.type] = m
    return tuple(by_type[t] for t in MARK_TYPES if t in by_type)


def merge_adjacent(inlines: Iterable[Inline]) -> tuple[Inline, ...]:
    """Drop empty text nodes and merge neighbours that carry identical marks."""
    out: list[Inline] = []
    for node in inlines:
        if isinstance(node, Text):
            if not node.text:
                continue
            prev = out[-1] if out else None
            if isinstance(prev, Text) and prev.marks == node.marks:
                out[-1] = Text(prev.text + node.text, prev.marks)
                continue
        out.append(node)
    return tuple(out)


# ───────────────────────── parsing ─────────────────────────

def _fail(where: str, msg: str) -> DocumentSchemaError:
    return DocumentSchemaError(f"{where}: {msg}")


def _attrs(node: Mapping, where: str) -> Mapping:
    attrs = node.get("attrs", {})
    if attrs is None:
        return {}
    if not isinstance(attrs, Mapping):
        raise _fail(where, "attrs must be an object")
    return attrs


def _children(node: Mapping, where: str) -> list:
    content = node.get("content", [])
    if content is None:
        return []
    if not isinstance(content, list):
        raise _fail(where, "content must be a list")
    return content


def _parse_mark(raw: object, where: str) -> Mark:
    if not isinstance(raw, Mapping):
        raise _fail(where, "mark must be an object")
    mtype = raw.get("type")
    if mtype not in MARK_TYPES:
        raise _fail(where, f"unknown mark type {mtype!r}")
    if mtype == NOTE_LINK:
        target = _attrs(raw, where).get(NOTE_LINK_ATTR)
        if not isinstance(target, str) or not target.strip():
            raise _fail(where, "noteLink mark without noteId")
        return Mark(NOTE_LINK, target)
    return Mark(mtype)


def _parse_inline(raw: object, where: str) -> Inline:
    if not isinstance(raw, Mapping):
        raise _fail(where, "node must be an object")
    ntype = raw.get("type")
    if ntype == "hardBreak":
        return HardBreak()
    if ntype == "text":
        text = raw.get("text")
        if not isinstance(text, str):
            raise _fail(where, "text node without text")
        marks = raw.get("marks", []) or []
        if not isinstance(marks, list):
            raise _fail(where, "marks must be a list")
        parsed = [_parse_mark(m, f"{where}.marks[{i}]") for i, m in enumerate(marks)]
        return Text(text, canonical_marks(parsed))
    raise _fail(where, f"unexpected inline node {ntype!r}")


def _parse_inlines(node: Mapping, where: str) -> tuple[Inline, ...]:
    return tuple(
        _parse_inline(c, f"{where}.content[{i}]")
        for i, c in enumerate(_children(node, where))
    )


def _parse_list_item(raw: object, where: str) -> ListItem:
    if not isinstance(raw, Mapping) or raw.get("type") != "listItem":
        raise _fail(where, "list content must be listItem nodes")
    blocks = tuple(
        _parse_block(c, f"{where}.content[{i}]")
        for i, c in enumerate(_children(raw, where))
    )
    return ListItem(blocks or (Paragraph(),))


def _parse_block(raw: object, where: str) -> Block:
    if not isinstance(raw, Mapping):
        raise _fail(where, "node must be an object")
    ntype = raw.get("type")

    if ntype == "paragraph":
        return Paragraph(_parse_inlines(raw, where))

    if ntype == "heading":
        level = _attrs(raw, where).get("level", 1)
        if not isinstance(level, int) or isinstance(level, bool) or level not in HEADING_LEVELS:
            raise _fail(where, f"bad heading level {level!r}")
        return Heading(level, _parse_inlines(raw, where))

    if ntype in ("bulletList", "orderedList"):
        items = tuple(
            _parse_list_item(c, f"{where}.content[{i}]")
            for i, c in enumerate(_children(raw, where))
        )
        if ntype == "bulletList":
            return BulletList(items)
        start = _attrs(raw, where).get("start", 1)
        if not isinstance(start, int) or isinstance(start, bool):
            raise _fail(where, f"bad list start {start!r}")
        return OrderedList(items, start=start)

    raise _fail(where, f"unknown block type {ntype!r}")


def parse_document(data: object) -> Document:
    """Validate a decoded JSON object and build the typed tree."""
    if not isinstance(data, Mapping):
        raise DocumentSchemaError("document must be a JSON object")
    if data.get("type", "doc") != "doc":
        raise DocumentSchemaError(f"unexpected root type {data.get('type')!r}")
    return Document(tuple(
        _parse_block(c, f"content[{i}]")
        for i, c in enumerate(_children(data, "doc"))
    ))
