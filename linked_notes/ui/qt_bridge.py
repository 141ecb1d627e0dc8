from __future__ import annotations

from PySide6.QtGui import (
    QColor,
    QTextBlockFormat,
    QTextCharFormat,
    QTextCursor,
    QTextDocument,
    QTextFormat,
    QTextListFormat,
)

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
    canonical_marks,
    merge_adjacent,
)
from linked_notes.core.html import note_href, note_id_from_href

LINK_COLOR = QColor("#2a6fdb")
LINE_SEPARATOR = "\u2028"
BOLD_WEIGHT = 700
MONOSPACE_FAMILIES = ["monospace", "Consolas", "Courier New"]

# same size steps Qt's own HTML importer uses for <h1>..<h6>
_HEADING_SIZE_ADJUSTMENT = {1: 3, 2: 2, 3: 1, 4: 0, 5: -1, 6: -2}

_ORDERED_STYLES = {
    QTextListFormat.Style.ListDecimal,
    QTextListFormat.Style.ListLowerAlpha,
    QTextListFormat.Style.ListUpperAlpha,
    QTextListFormat.Style.ListLowerRoman,
    QTextListFormat.Style.ListUpperRoman,
}


# ───────────────────────── char formats ─────────────────────────

def char_format_for(marks: tuple[Mark, ...]) -> QTextCharFormat:
    fmt = QTextCharFormat()
    for mark in marks:
        if mark.type == "bold":
            fmt.setFontWeight(BOLD_WEIGHT)
        elif mark.type == "italic":
            fmt.setFontItalic(True)
        elif mark.type == "underline":
            fmt.setFontUnderline(True)
        elif mark.type == "strike":
            fmt.setFontStrikeOut(True)
        elif mark.type == "code":
            fmt.setFontFixedPitch(True)
            fmt.setFontFamilies(MONOSPACE_FAMILIES)
        elif mark.type == NOTE_LINK:
            fmt.setAnchor(True)
            fmt.setAnchorHref(note_href(mark.target_id))
            fmt.setForeground(LINK_COLOR)
            fmt.setFontUnderline(True)
    return fmt


def marks_from_format(fmt: QTextCharFormat) -> tuple[Mark, ...]:
    marks: list[Mark] = []
    target = note_id_from_href(fmt.anchorHref()) if fmt.isAnchor() else None
    if target:
        marks.append(Mark(NOTE_LINK, target))
    if fmt.fontWeight() >= BOLD_WEIGHT:
        marks.append(Mark("bold"))
    if fmt.fontItalic():
        marks.append(Mark("italic"))
    # links are drawn underlined; that underline is not a mark of its own
    if fmt.fontUnderline() and not target:
        marks.append(Mark("underline"))
    if fmt.fontStrikeOut():
        marks.append(Mark("strike"))
    if fmt.fontFixedPitch():
        marks.append(Mark("code"))
    return canonical_marks(marks)


def unlinked_format(base: QTextCharFormat) -> QTextCharFormat:
    """`base` without the anchor and the link styling (for typing after a link)."""
    fmt = QTextCharFormat(base)
    fmt.setAnchor(False)
    fmt.setAnchorHref("")
    fmt.setFontUnderline(False)
    fmt.clearForeground()
    return fmt


# ───────────────────────── Document -> Qt ─────────────────────────

def _flatten(blocks, list_node=None):
    """(text_block, owning list node or None), in document order."""
    for b in blocks:
        if isinstance(b, (Paragraph, Heading)):
            yield b, list_node
        elif isinstance(b, (BulletList, OrderedList)):
            for item in b.content:
                yield from _flatten(item.content, b)
        elif isinstance(b, ListItem):
            yield from _flatten(b.content, list_node)


def _list_format(node) -> QTextListFormat:
    fmt = QTextListFormat()
    if isinstance(node, OrderedList):
        fmt.setStyle(QTextListFormat.Style.ListDecimal)
        if node.start != 1 and hasattr(fmt, "setStart"):
            fmt.setStart(node.start)
    else:
        fmt.setStyle(QTextListFormat.Style.ListDisc)
    return fmt


def document_to_qt(doc: Document, qdoc: QTextDocument) -> None:
    """Replace the contents of `qdoc` with `doc`."""
    qdoc.clear()
    cursor = QTextCursor(qdoc)
    cursor.beginEditBlock()

    first = True
    current_node = None
    current_list = None
    for block, list_node in _flatten(doc.content):
        block_fmt = QTextBlockFormat()
        size_adjustment = None
        if isinstance(block, Heading):
            block_fmt.setHeadingLevel(block.level)
            size_adjustment = _HEADING_SIZE_ADJUSTMENT[block.level]

        if first:
            cursor.setBlockFormat(block_fmt)
            first = False
        else:
            cursor.insertBlock(block_fmt, QTextCharFormat())

        if list_node is None:
            current_node = current_list = None
        elif list_node is current_node and current_list is not None:
            current_list.add(cursor.block())
        else:
            current_list = cursor.createList(_list_format(list_node))
            current_node = list_node

        for node in block.content:
            fmt = char_format_for(node.marks) if isinstance(node, Text) else QTextCharFormat()
            if size_adjustment is not None:
                fmt.setProperty(QTextFormat.Property.FontSizeAdjustment, size_adjustment)
            if isinstance(node, HardBreak):
                cursor.insertText(LINE_SEPARATOR, fmt)
            else:
                cursor.insertText(node.text, fmt)

    cursor.endEditBlock()


# ───────────────────────── Qt -> Document ─────────────────────────

def _block_inlines(block) -> tuple:
    out = []
    it = block.begin()
    while not it.atEnd():
        fragment = it.fragment()
        if fragment.isValid():
            marks = marks_from_format(fragment.charFormat())
            for i, part in enumerate(fragment.text().split(LINE_SEPARATOR)):
                if i:
                    out.append(HardBreak())
                if part:
                    out.append(Text(part, marks))
        it += 1
    return merge_adjacent(out)


def document_from_qt(qdoc: QTextDocument) -> Document:
    blocks = []
    pending: list[ListItem] = []
    pending_key = None
    pending_fmt = None

    def flush_list() -> None:
        nonlocal pending, pending_key, pending_fmt
        if pending:
            if pending_fmt.style() in _ORDERED_STYLES:
                start = pending_fmt.start() if hasattr(pending_fmt, "start") else 1
                blocks.append(OrderedList(tuple(pending), start=start or 1))
            else:
                blocks.append(BulletList(tuple(pending)))
        pending, pending_key, pending_fmt = [], None, None

    block = qdoc.begin()
    while block.isValid():
        inlines = _block_inlines(block)
        level = block.blockFormat().headingLevel()
        text_block = Heading(level, inlines) if 1 <= level <= 6 else Paragraph(inlines)

        text_list = block.textList()
        if text_list is None:
            flush_list()
            blocks.append(text_block)
        else:
            key = text_list.objectIndex()
            if key != pending_key:
                flush_list()
                pending_key = key
                pending_fmt = text_list.format()
            pending.append(ListItem((text_block,)))
        block = block.next()

    flush_list()
    return Document(tuple(blocks)) if blocks else Document.empty()
