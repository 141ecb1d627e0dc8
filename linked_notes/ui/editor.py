from __future__ import annotations

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QTextCursor
from PySide6.QtWidgets import QTextEdit

from linked_notes.core.document import Document
from linked_notes.core.html import note_id_from_href
from linked_notes.core.links import link_at, set_note_link, unset_note_link
from linked_notes.ui.qt_bridge import document_from_qt, document_to_qt, unlinked_format
from linked_notes.ui.qt_utils import blocked_signals

__all__ = ["NoteEditor"]


class NoteEditor(QTextEdit):
    """
    Rich-text editing surface for one note.

    - bodyChanged: the user changed the content
    - linkActivated(note_id): a note link was clicked
    """

    bodyChanged = Signal()
    linkActivated = Signal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setAcceptRichText(False)
        self.setMouseTracking(True)
        self._press_pos = None
        self.textChanged.connect(self.bodyChanged.emit)

    # ───────────────────────── content ─────────────────────────

    def set_document(self, doc: Document) -> None:
        """Load a body without emitting bodyChanged."""
        with blocked_signals(self):
            document_to_qt(doc, self.document())
        self.moveCursor(QTextCursor.MoveOperation.Start)

    def current_document(self) -> Document:
        return document_from_qt(self.document())

    def selection_range(self) -> tuple[int, int]:
        cursor = self.textCursor()
        return cursor.selectionStart(), cursor.selectionEnd()

    def _replace_document(self, doc: Document, start: int, end: int) -> None:
        with blocked_signals(self):
            document_to_qt(doc, self.document())
            cursor = self.textCursor()
            cursor.setPosition(start)
            cursor.setPosition(end, QTextCursor.MoveMode.KeepAnchor)
            self.setTextCursor(cursor)
        self.bodyChanged.emit()

    # ───────────────────────── link commands ─────────────────────────

    def set_note_link(self, target_id: str) -> bool:
        """Link the selection to a note. No selection: nothing happens."""
        start, end = self.selection_range()
        if start == end:
            return False
        doc = set_note_link(self.current_document(), start, end, target_id)
        self._replace_document(doc, start, end)
        return True

    def unset_note_link(self) -> bool:
        start, end = self.selection_range()
        before = self.current_document()
        doc = unset_note_link(before, start, end)
        if doc == before:
            return False
        self._replace_document(doc, start, end)
        return True

    def link_at_cursor(self) -> str | None:
        """Target of the link under the caret, or of the link the caret just left."""
        doc = self.current_document()
        pos = self.textCursor().position()
        return link_at(doc, pos) or (link_at(doc, pos - 1) if pos > 0 else None)

    # ───────────────────────── events ─────────────────────────

    def keyPressEvent(self, event):  # type: ignore[override]
        # typing at the end of a link must not extend the link
        cursor = self.textCursor()
        if (
            event.text()
            and not cursor.hasSelection()
            and cursor.charFormat().isAnchor()
            and (cursor.atBlockEnd() or not self._is_anchor_after(cursor))
        ):
            self.setCurrentCharFormat(unlinked_format(cursor.charFormat()))
        super().keyPressEvent(event)

    def _is_anchor_after(self, cursor: QTextCursor) -> bool:
        probe = QTextCursor(cursor)
        probe.movePosition(QTextCursor.MoveOperation.NextCharacter)
        return probe.charFormat().isAnchor()

    def mousePressEvent(self, event):  # type: ignore[override]
        self._press_pos = event.position().toPoint()
        super().mousePressEvent(event)

    def mouseReleaseEvent(self, event):  # type: ignore[override]
        super().mouseReleaseEvent(event)
        pos = event.position().toPoint()
        if event.button() != Qt.MouseButton.LeftButton or self.textCursor().hasSelection():
            return
        if self._press_pos is not None and (pos - self._press_pos).manhattanLength() > 4:
            return
        note_id = note_id_from_href(self.anchorAt(pos))
        if note_id:
            self.linkActivated.emit(note_id)

    def mouseMoveEvent(self, event):  # type: ignore[override]
        super().mouseMoveEvent(event)
        over_link = bool(note_id_from_href(self.anchorAt(event.position().toPoint())))
        shape = Qt.CursorShape.PointingHandCursor if over_link else Qt.CursorShape.IBeamCursor
        self.viewport().setCursor(shape)
