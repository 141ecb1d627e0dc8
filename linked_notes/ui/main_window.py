from __future__ import annotations

import logging
from pathlib import Path

from PySide6.QtCore import QSettings, Qt, QUrl
from PySide6.QtGui import QAction, QDesktopServices, QFont
from PySide6.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from linked_notes.services.session import SessionState
from linked_notes.services.workspace import NO_FOLDER, SAVE_NOTICE_TITLE, Workspace
from linked_notes.settings import APP_NAME, SettingsKeys, get_str
from linked_notes.ui.dialogs import ask_name, confirm_delete, show_notice
from linked_notes.ui.editor import NoteEditor
from linked_notes.ui.link_picker import LinkPickerDialog
from linked_notes.ui.qt_bridge import BOLD_WEIGHT
from linked_notes.ui.qt_utils import blocked_signals, safe_set_setting
from linked_notes.ui.ui_state import UiStateStore
from linked_notes.vault.index import NoteIndex, NoteRef
from linked_notes.vault.note_io import NoteFile, read_note_text
from linked_notes.vault.store import NotesStore

log = logging.getLogger(__name__)

STATUS_TEXT = {
    SessionState.UNLOADED: "",
    SessionState.CLEAN: "Saved",
    SessionState.DIRTY: "Unsaved",
}
SAVE_FAILED_TEXT = "Save failed"
NORMAL_WEIGHT = 400


class NotesWindow(QMainWindow):
    def __init__(self, store: NotesStore, settings: QSettings | None = None):
        super().__init__()
        self.setWindowTitle(APP_NAME)
        self._settings = settings if settings is not None else QSettings(APP_NAME, APP_NAME)
        self._ui_state = UiStateStore(owner=self, settings=self._settings)

        self.workspace = Workspace(
            store,
            on_notice=self._show_notice,
            on_index_changed=self._on_index_changed,
            on_note_opened=self._on_note_opened,
            on_note_closed=self._on_note_closed,
            on_state_changed=self._on_state_changed,
        )

        # UI

        self.folders = QListWidget()
        self.folders.setToolTip("Folders")
        self.search = QLineEdit()
        self.search.setPlaceholderText("Filter notes…")
        self.notes = QListWidget()

        self.title = QLineEdit()
        self.title.setPlaceholderText("Title")
        title_font = QFont(self.title.font())
        title_font.setPointSizeF(title_font.pointSizeF() * 1.4)
        self.title.setFont(title_font)
        self.editor = NoteEditor()

        self.status = QLabel()
        self.statusBar().addPermanentWidget(self.status)

        left = QWidget()
        left_layout = QVBoxLayout(left)
        left_layout.setContentsMargins(8, 8, 8, 8)
        left_layout.addWidget(self.folders, 1)
        left_layout.addWidget(self.search)
        left_layout.addWidget(self.notes, 3)

        right = QWidget()
        right_layout = QVBoxLayout(right)
        right_layout.setContentsMargins(8, 8, 8, 8)
        right_layout.addWidget(self.title)
        right_layout.addWidget(self.editor, 1)

        self.splitter = QSplitter(Qt.Orientation.Horizontal)
        self.splitter.addWidget(left)
        self.splitter.addWidget(right)
        self.splitter.setStretchFactor(0, 1)
        self.splitter.setStretchFactor(1, 3)

        root = QWidget()
        root_layout = QHBoxLayout(root)
        root_layout.setContentsMargins(0, 0, 0, 0)
        root_layout.addWidget(self.splitter)
        self.setCentralWidget(root)

        self._ui_state.restore(splitter=self.splitter)
        self.splitter.splitterMoved.connect(lambda *_: self._ui_state.schedule_save())

        # Signals
        self.folders.itemSelectionChanged.connect(self._on_select_folder)
        self.search.textChanged.connect(self.refresh_notes)
        self.notes.itemSelectionChanged.connect(self._on_select_note)
        self.title.textEdited.connect(self.workspace.session.edit_title)
        self.title.editingFinished.connect(self._on_title_finished)
        self.editor.bodyChanged.connect(self._on_body_changed)
        self.editor.linkActivated.connect(self.workspace.activate_link)
        self.editor.cursorPositionChanged.connect(self._show_link_hint)

        self._build_menu()
        self._set_note_widgets_enabled(False)

        self._startup_open()

    # ───────────────────────── startup / shutdown ─────────────────────────

    def _startup_open(self) -> None:
        self.workspace.store.ensure()
        self.refresh_folders()

        last_folder = get_str(self._settings, SettingsKeys.LAST_FOLDER, "")
        if not last_folder or last_folder not in self.workspace.list_folders():
            return
        self._select_folder_row(last_folder)
        if not self._open_folder(last_folder):
            return

        last_note = get_str(self._settings, SettingsKeys.LAST_NOTE_ID, "")
        if last_note and last_note in self.workspace.index:
            self.workspace.open_note(last_note)

    def closeEvent(self, event):  # type: ignore[override]
        """Flush the open note before the window goes away."""
        if not self.workspace.shutdown():
            log.error("Closed with unsaved changes (recovery copy attempted)")
        self._ui_state.save()
        super().closeEvent(event)

    def resizeEvent(self, event):  # type: ignore[override]
        self._ui_state.schedule_save()
        super().resizeEvent(event)

    def moveEvent(self, event):  # type: ignore[override]
        self._ui_state.schedule_save()
        super().moveEvent(event)

    # ───────────────────────── menu ─────────────────────────

    def _action(self, text: str, slot, shortcut: str | None = None) -> QAction:
        act = QAction(text, self)
        if shortcut:
            act.setShortcut(shortcut)
        act.triggered.connect(lambda *_: slot())
        return act

    def _build_menu(self) -> None:
        menubar = self.menuBar()

        filem = menubar.addMenu("&File")
        filem.addAction(self._action("New folder…", self.create_folder_dialog, "Ctrl+Shift+N"))
        filem.addAction(self._action("New note…", self.create_note_dialog, "Ctrl+N"))
        filem.addAction(self._action("Delete note", self.delete_current_note))
        filem.addSeparator()
        filem.addAction(self._action("Open file…", self.open_file_dialog, "Ctrl+O"))
        filem.addAction(self._action("Import HTML…", self.import_html_dialog))
        filem.addAction(self._action("Export HTML…", self.export_html_dialog))
        filem.addSeparator()
        filem.addAction(self._action("Save", self.save_now, "Ctrl+S"))
        filem.addAction(self._action("Open notes folder", self.reveal_notes_folder))

        editm = menubar.addMenu("&Edit")
        editm.addAction(self._action("Link to note…", self.link_selection, "Ctrl+K"))
        editm.addAction(self._action("Remove link", self.unlink_selection, "Ctrl+Shift+K"))
        editm.addSeparator()
        editm.addAction(self._action("Bold", self._toggle_bold, "Ctrl+B"))
        editm.addAction(self._action("Italic", self._toggle_italic, "Ctrl+I"))

        navm = menubar.addMenu("&Navigate")
        navm.addAction(self._action("Back", self.workspace.back, "Alt+Left"))
        navm.addAction(self._action("Forward", self.workspace.forward, "Alt+Right"))

    # ───────────────────────── workspace callbacks ─────────────────────────

    def _show_notice(self, title: str, message: str) -> None:
        if title == SAVE_NOTICE_TITLE:
            self.status.setText(SAVE_FAILED_TEXT)
        show_notice(self, title, message)

    def _on_index_changed(self, index: NoteIndex) -> None:
        self.refresh_notes()
        session = self.workspace.session
        if session.is_loaded and not self.title.hasFocus():
            with blocked_signals(self.title):
                self.title.setText(session.title or "")
            self.setWindowTitle(f"{session.title} - {APP_NAME}")

    def _on_note_opened(self, ref: NoteRef, note: NoteFile) -> None:
        with blocked_signals(self.title):
            self.title.setText(ref.title)
        self.editor.set_document(note.body)
        self._set_note_widgets_enabled(True)
        self._select_note_row(ref.note_id)
        self.setWindowTitle(f"{ref.title} - {APP_NAME}")
        if note.recovered:
            self.statusBar().showMessage(
                "This file was not a valid note; it opened as plain text and is rewritten on save.", 8000,
            )
        if ref.note_id in self.workspace.index:
            safe_set_setting(self._settings, SettingsKeys.LAST_NOTE_ID, ref.note_id)

    def _on_note_closed(self) -> None:
        with blocked_signals(self.title):
            self.title.clear()
        with blocked_signals(self.editor):
            self.editor.clear()
        self._set_note_widgets_enabled(False)
        self.setWindowTitle(APP_NAME)

    def _on_state_changed(self, state: SessionState) -> None:
        self.status.setText(STATUS_TEXT[state])

    def _set_note_widgets_enabled(self, enabled: bool) -> None:
        self.title.setEnabled(enabled)
        self.editor.setEnabled(enabled)

    # ───────────────────────── lists ─────────────────────────

    def refresh_folders(self) -> None:
        current = self.workspace.folder
        with blocked_signals(self.folders):
            self.folders.clear()
            for name in self.workspace.list_folders():
                self.folders.addItem(name)
        if current:
            self._select_folder_row(current)

    def refresh_notes(self) -> None:
        q = self.search.text().strip().lower()
        with blocked_signals(self.notes):
            self.notes.clear()
            for ref in self.workspace.index.refs():
                if q and q not in ref.title.lower():
                    continue
                item = QListWidgetItem(ref.title)
                item.setData(Qt.ItemDataRole.UserRole, ref.note_id)
                self.notes.addItem(item)
        if self.workspace.session.note_id:
            self._select_note_row(self.workspace.session.note_id)

    def _select_folder_row(self, folder: str) -> None:
        with blocked_signals(self.folders):
            matches = self.folders.findItems(folder, Qt.MatchFlag.MatchExactly)
            if matches:
                self.folders.setCurrentItem(matches[0])

    def _select_note_row(self, note_id: str) -> None:
        with blocked_signals(self.notes):
            for row in range(self.notes.count()):
                if self.notes.item(row).data(Qt.ItemDataRole.UserRole) == note_id:
                    self.notes.setCurrentRow(row)
                    return
            self.notes.clearSelection()

    def _on_select_folder(self) -> None:
        items = self.folders.selectedItems()
        if not items:
            return
        if not self._open_folder(items[0].text()) and self.workspace.folder:
            # the open note could not be flushed: stay where we are
            self._select_folder_row(self.workspace.folder)

    def _open_folder(self, folder: str) -> bool:
        if not self.workspace.select_folder(folder):
            return False
        safe_set_setting(self._settings, SettingsKeys.LAST_FOLDER, folder)
        return True

    def _on_select_note(self) -> None:
        items = self.notes.selectedItems()
        if not items:
            return
        note_id = items[0].data(Qt.ItemDataRole.UserRole)
        if note_id == self.workspace.session.note_id:
            return
        if not self.workspace.open_note(note_id) and self.workspace.session.note_id:
            self._select_note_row(self.workspace.session.note_id)

    # ───────────────────────── editing ─────────────────────────

    def _on_title_finished(self) -> None:
        # a blank title is never applied; show the file name again
        session = self.workspace.session
        if session.is_loaded and not self.title.text().strip():
            with blocked_signals(self.title):
                self.title.setText(session.title or "")

    def _show_link_hint(self) -> None:
        target = self.editor.link_at_cursor()
        if target is None:
            return
        ref = self.workspace.index.get(target)
        self.statusBar().showMessage(f"Link to {ref.title}" if ref else "Link to a missing note", 3000)

    def _on_body_changed(self) -> None:
        self.workspace.session.edit_body(self.editor.current_document())

    def save_now(self) -> None:
        self.workspace.session.flush()

    def link_selection(self) -> None:
        if not self.workspace.session.is_loaded:
            return
        start, end = self.editor.selection_range()
        if start == end:
            self.statusBar().showMessage("Select some text to link.", 4000)
            return
        dlg = LinkPickerDialog(
            self,
            get_refs=self.workspace.index.refs,
            on_pick=lambda ref: self.editor.set_note_link(ref.note_id),
            exclude_id=self.workspace.session.note_id,
        )
        dlg.exec()

    def unlink_selection(self) -> None:
        if self.workspace.session.is_loaded:
            self.editor.unset_note_link()

    def _toggle_bold(self) -> None:
        bold = self.editor.fontWeight() >= BOLD_WEIGHT
        self.editor.setFontWeight(NORMAL_WEIGHT if bold else BOLD_WEIGHT)

    def _toggle_italic(self) -> None:
        self.editor.setFontItalic(not self.editor.fontItalic())

    # ───────────────────────── dialogs ─────────────────────────

    def create_folder_dialog(self) -> None:
        name = ask_name(self, title="New folder", label="Folder name:")
        if name is None:
            return
        result = self.workspace.create_folder(name)
        if result.success:
            self.refresh_folders()
            self._select_folder_row(result.value)
            self._open_folder(result.value)

    def create_note_dialog(self) -> None:
        title = ask_name(self, title="New note", label="Title:")
        if title is not None:
            self.workspace.create_note(title)

    def delete_current_note(self) -> None:
        ref = self.workspace.current_ref()
        if ref is None:
            return
        if confirm_delete(self, title=ref.title):
            self.workspace.delete_note(ref.note_id)

    def open_file_dialog(self) -> None:
        start = str(self.workspace.store.root)
        path, _ = QFileDialog.getOpenFileName(self, "Open note file", start, "Notes (*.json);;All files (*)")
        if path:
            self.workspace.open_file(Path(path))

    def import_html_dialog(self) -> None:
        if self.workspace.folder is None:
            self._show_notice("Import HTML", NO_FOLDER)
            return
        path, _ = QFileDialog.getOpenFileName(self, "Import HTML", str(Path.home()), "HTML (*.html *.htm)")
        if not path:
            return
        try:
            markup = read_note_text(Path(path))
        except OSError as exc:
            log.exception("Failed to read %s", path)
            self._show_notice("Import HTML", str(exc))
            return
        self.workspace.import_html(Path(path).stem, markup)

    def export_html_dialog(self) -> None:
        session = self.workspace.session
        if not session.is_loaded:
            return
        default = str(Path.home() / f"{session.title}.html")
        path, _ = QFileDialog.getSaveFileName(self, "Export HTML", default, "HTML (*.html)")
        if path:
            result = self.workspace.export_html(Path(path))
            if result.success:
                self.statusBar().showMessage(f"Exported to {path}", 4000)

    def reveal_notes_folder(self) -> None:
        store = self.workspace.store
        target = store.folder_path(self.workspace.folder) if self.workspace.folder else Path(store.root)
        if not QDesktopServices.openUrl(QUrl.fromLocalFile(str(target))):
            self._show_notice("Open notes folder", f"Could not open:\n{target}")
