from __future__ import annotations

from dataclasses import replace
from typing import Callable

from .document import (
    NOTE_LINK,
    Document,
    Mark,
    Text,
    TextBlock,
    canonical_marks,
    inline_length,
    iter_textblocks,
    map_textblocks,
    merge_adjacent,
)

# Positions: every character and hard break is one position, and every text
# block is followed by one separator position (same as QTextCursor positions).

MarksFn = Callable[[tuple[Mark, ...]], tuple[Mark, ...]]


def _split_and_mark(node: Text, node_start: int, start: int, end: int, fn: MarksFn) -> list[Text]:
    lo = max(node_start, start)
    hi = min(node_start + len(node.text), end)
    if lo >= hi:
        return [node]
    a, b = lo - node_start, hi - node_start
    return [
        Text(node.text[:a], node.marks),
        Text(node.text[a:b], fn(node.marks)),
        Text(node.text[b:], node.marks),
    ]


def _apply_marks(doc: Document, start: int, end: int, fn: MarksFn) -> Document:
    pos = 0

    def rewrite(block: TextBlock) -> TextBlock:
        nonlocal pos
        out = []
        for node in block.content:
            if isinstance(node, Text):
                out.extend(_split_and_mark(node, pos, start, end, fn))
            else:
                out.append(node)
            pos += inline_length(node)
        pos += 1
        return replace(block, content=merge_adjacent(out))

    return map_textblocks(doc, rewrite)


def set_note_link(doc: Document, start: int, end: int, target_id: str) -> Document:
    """
    Link the text in [start, end) to `target_id`.

    Replaces any link already there; neighbours with identical marks merge,
    so the span grows over an adjoining link to the same note.
    An empty selection leaves the document as it is.
    """
    if not target_id or not str(target_id).strip():
        raise ValueError("set_note_link(): target_id is empty")
    if end <= start:
        return doc
    link = Mark(NOTE_LINK, target_id)

    def add(marks: tuple[Mark, ...]) -> tuple[Mark, ...]:
        return canonical_marks([m for m in marks if m.type != NOTE_LINK] + [link])

    return _apply_marks(doc, start, end, add)


def unset_note_link(doc: Document, start: int, end: int) -> Document:
    """
    Remove note links from [start, end).
    With an empty selection the whole link under the caret is removed.
    """
    if end < start:
        start, end = end, start
    if start == end:
        span = _span_at(doc, start)
        if span is None:
            return doc
        start, end = span[0], span[1]

    def drop(marks: tuple[Mark, ...]) -> tuple[Mark, ...]:
        return tuple(m for m in marks if m.type != NOTE_LINK)

    return _apply_marks(doc, start, end, drop)


def link_spans(doc: Document) -> list[tuple[int, int, str]]:
    """(start, end, target_id) for every contiguous link run."""
    spans: list[tuple[int, int, str]] = []
    pos = 0
    for block in iter_textblocks(doc):
        run: list | None = None
        for node in block.content:
            target = node.link_target if isinstance(node, Text) else None
            n = inline_length(node)
            if target is not None and run is not None and run[2] == target and run[1] == pos:
                run[1] = pos + n
            else:
                if run is not None:
                    spans.append(tuple(run))
                run = [pos, pos + n, target] if target is not None else None
            pos += n
        if run is not None:
            spans.append(tuple(run))
        pos += 1
    return spans


def _span_at(doc: Document, pos: int) -> tuple[int, int, str] | None:
    inside = None
    touching = None
    for span in link_spans(doc):
        if span[0] <= pos < span[1]:
            inside = span
            break
        if span[1] == pos and touching is None:
            touching = span
    return inside or touching


def link_at(doc: Document, pos: int) -> str | None:
    """Target id of the link covering the character at `pos`, if any."""
    for start, end, target in link_spans(doc):
        if start <= pos < end:
            return target
    return None

