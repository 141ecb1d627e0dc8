from __future__ import annotations

from typing import Callable, Iterable

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QDialog, QLabel, QLineEdit, QListWidget, QListWidgetItem, QVBoxLayout

from linked_notes.vault.index import NoteRef

MAX_IDLE_RESULTS = 40
MAX_RESULTS = 80


def rank_refs(query: str, refs: Iterable[NoteRef], *, limit: int = MAX_RESULTS) -> list[NoteRef]:
    """
    Titles containing the query, prefix matches first.
    Empty query: the first `MAX_IDLE_RESULTS` titles.
    """
    ordered = sorted(refs, key=lambda r: (r.title.lower(), r.title))
    q = (query or "").strip().lower()
    if not q:
        return ordered[:min(limit, MAX_IDLE_RESULTS)]

    contains = [r for r in ordered if q in r.title.lower()]
    starts = [r for r in contains if r.title.lower().startswith(q)]
    rest = [r for r in contains if not r.title.lower().startswith(q)]
    return (starts + rest)[:limit]


class LinkPickerDialog(QDialog):
    """Search-filtered picker for a link target in the current folder."""

    def __init__(
        self,
        parent,
        *,
        get_refs: Callable[[], list[NoteRef]],
        on_pick: Callable[[NoteRef], None],
        exclude_id: str | None = None,
    ):
        super().__init__(parent)
        self.setWindowTitle("Link to note")
        self.setModal(True)
        self.resize(520, 420)

        self._get_refs = get_refs
        self._on_pick = on_pick
        self._exclude_id = exclude_id
        self._all: list[NoteRef] = []

        self.input = QLineEdit()
        self.input.setPlaceholderText("Type to search notes… (Enter to link)")
        self.hint = QLabel()
        self.listw = QListWidget()

        layout = QVBoxLayout(self)
        layout.addWidget(self.input)
        layout.addWidget(self.listw)
        layout.addWidget(self.hint)

        self._reload()

        self.input.textChanged.connect(self._filter)
        self.input.returnPressed.connect(self._pick_current)
        self.listw.itemActivated.connect(self._pick_item)

        self.input.setFocus()

    def _reload(self) -> None:
        self._all = [r for r in self._get_refs() if r.note_id != self._exclude_id]
        self._filter(self.input.text())

    def _filter(self, text: str) -> None:
        self.listw.clear()
        for ref in rank_refs(text, self._all):
            item = QListWidgetItem(ref.title)
            item.setData(Qt.ItemDataRole.UserRole, ref)
            self.listw.addItem(item)
        if self.listw.count():
            self.listw.setCurrentRow(0)
            self.hint.setText("")
        else:
            self.hint.setText("No matching notes in this folder.")

    def _pick_current(self) -> None:
        item = self.listw.currentItem()
        if item is not None:
            self._pick_item(item)

    def _pick_item(self, item: QListWidgetItem) -> None:
        ref = item.data(Qt.ItemDataRole.UserRole)
        if ref is None:
            return
        self._on_pick(ref)
        self.accept()
