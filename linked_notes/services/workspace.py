from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from linked_notes.core.document import Document
from linked_notes.core.html import parse_html, render_html_page
from linked_notes.core.results import OpResult
from linked_notes.services.navigation import NavigationController
from linked_notes.services.resolution import LinkNotFound, resolve_link
from linked_notes.services.session import NoteSession, SessionState
from linked_notes.settings import AUTOSAVE_DEBOUNCE_MS, RENAME_DEBOUNCE_MS
from linked_notes.vault.filesystem import atomic_write_text
from linked_notes.vault.index import EMPTY_INDEX, NoteIndex, NoteRef
from linked_notes.vault.note_io import NoteFile
from linked_notes.vault.store import INVALID_TITLE, NOT_FOUND, NotesStore

log = logging.getLogger(__name__)

NoticeCallback = Callable[[str, str], None]

LINK_NOTICE_TITLE = "Broken link"
SAVE_NOTICE_TITLE = "Save failed"
OPEN_NOTICE_TITLE = "Open note"
HISTORY_NOTICE_TITLE = "History"
SKIPPED_IN_HISTORY = "A note in the history no longer exists and was skipped."
NO_FOLDER = "Select a folder first."
UNSAVED_CHANGES = (
    "The current note could not be saved, so it stays open. "
    "Your edits are kept; try saving again."
)


class Workspace:
    """
    Orchestrates the store, the open-note session and the folder index.

    The index is an explicit value: it is rebuilt by scanning the folder
    after selection and after every create/rename/delete, and handed to
    whoever needs lookups. Nothing updates it in place.
    """

    def __init__(
        self,
        store: NotesStore,
        *,
        on_notice: NoticeCallback | None = None,
        on_index_changed: Callable[[NoteIndex], None] | None = None,
        on_note_opened: Callable[[NoteRef, NoteFile], None] | None = None,
        on_note_closed: Callable[[], None] | None = None,
        on_state_changed: Callable[[SessionState], None] | None = None,
        save_delay_ms: int = AUTOSAVE_DEBOUNCE_MS,
        rename_delay_ms: int = RENAME_DEBOUNCE_MS,
    ) -> None:
        self.store = store
        self.folder: str | None = None
        self.index: NoteIndex = EMPTY_INDEX

        self._on_notice = on_notice
        self._on_index_changed = on_index_changed
        self._on_note_opened = on_note_opened
        self._on_note_closed = on_note_closed

        self.session = NoteSession(
            store,
            save_delay_ms=save_delay_ms,
            rename_delay_ms=rename_delay_ms,
            on_state_changed=on_state_changed,
            on_save_failed=self._handle_save_failed,
            on_renamed=self._handle_renamed,
            on_rename_failed=lambda err: self._notice("Rename", err),
        )
        self.nav = NavigationController(
            self._open_no_history,
            exists=lambda note_id: note_id in self.index,
            on_skipped=lambda _note_id: self._notice(HISTORY_NOTICE_TITLE, SKIPPED_IN_HISTORY),
        )

    # ───────────────────────── helpers ─────────────────────────

    def _notice(self, title: str, message: str) -> None:
        log.info("Notice: %s | %s", title, message)
        if self._on_notice is not None:
            self._on_notice(title, message)

    def rebuild_index(self) -> NoteIndex:
        if self.folder is None:
            self.index = EMPTY_INDEX
        else:
            self.index = self.store.build_index(self.folder)
        if self._on_index_changed is not None:
            self._on_index_changed(self.index)
        return self.index

    def _handle_save_failed(self, error: str, recovery_path: Path | None) -> None:
        msg = f"Could not save the note:\n{self.session.path}\n\n{error}"
        if recovery_path is not None:
            msg += f"\n\nA recovery copy was written to:\n{recovery_path}"
        self._notice(SAVE_NOTICE_TITLE, msg)

    def _handle_renamed(self, old_path: Path, new_path: Path) -> None:
        log.info("Renamed open note: %s -> %s", old_path.name, new_path.name)
        self.rebuild_index()

    def current_ref(self) -> NoteRef | None:
        note_id = self.session.note_id
        return self.index.get(note_id) if note_id else None

    # ───────────────────────── folders ─────────────────────────

    def list_folders(self) -> list[str]:
        return self.store.list_folders()

    def create_folder(self, name: str) -> OpResult:
        result = self.store.create_folder(name)
        if not result.success:
            self._notice("New folder", result.error)
        return result

    def select_folder(self, folder: str) -> bool:
        # the open note stays open (and dirty) if its pending work cannot be written
        if not self.session.flush():
            self._notice(SAVE_NOTICE_TITLE, UNSAVED_CHANGES)
            return False
        self.session.close(flush=False)
        if self._on_note_closed is not None:
            self._on_note_closed()
        self.folder = folder
        self.nav.clear()
        self.rebuild_index()
        log.info("Folder selected: %s (%d notes)", folder, len(self.index))
        return True

    # ───────────────────────── notes ─────────────────────────

    def create_note(self, title: str, body: Document | None = None) -> OpResult:
        if self.folder is None:
            self._notice("New note", NO_FOLDER)
            return OpResult.fail(NO_FOLDER)
        result = self.store.create_note(self.folder, title)
        if not result.success:
            self._notice("New note", result.error)
            return result
        ref = result.value
        if body is not None:
            saved = self.store.save_note(ref.path, NoteFile(ref.note_id, body))
            if not saved.success:
                self._notice(SAVE_NOTICE_TITLE, saved.error)
        self.rebuild_index()
        if not self.open_note(ref.note_id):
            log.warning("Created %s but could not open it", ref.path)
            return OpResult.fail(f"Note \"{ref.title}\" was created but could not be opened.")
        return result

    def open_note(self, note_id: str) -> bool:
        """Open a note of the current folder, recording it in history."""
        return self.nav.open(note_id)

    def _open_no_history(self, note_id: str) -> bool:
        if note_id not in self.index:
            self._notice(OPEN_NOTICE_TITLE, NOT_FOUND)
            return False

        # pending work of the current note goes first; a rename there rebuilds the index
        if note_id != self.session.note_id and not self.session.flush():
            self._notice(SAVE_NOTICE_TITLE, UNSAVED_CHANGES)
            return False

        ref = self.index.get(note_id)
        if ref is None:
            self._notice(OPEN_NOTICE_TITLE, NOT_FOUND)
            return False

        result = self.store.open_note(ref.path)
        if not result.success:
            self._notice(OPEN_NOTICE_TITLE, result.error)
            self.rebuild_index()
            return False

        self.session.load(ref.path, result.value)
        if self._on_note_opened is not None:
            self._on_note_opened(ref, result.value)
        return True

    def open_file(self, path: Path) -> bool:
        """
        Open a note file by path. A file of the current folder opens like a
        note picked from the list; any other file opens outside history.
        Files that are not valid notes open as plain text and become proper
        notes on first save.
        """
        path = Path(path)
        in_folder = next((ref for ref in self.index.values() if ref.path == path), None)
        if in_folder is not None:
            return self.open_note(in_folder.note_id)
        if not self.session.flush():
            self._notice(SAVE_NOTICE_TITLE, UNSAVED_CHANGES)
            return False
        result = self.store.open_note(path)
        if not result.success:
            self._notice(OPEN_NOTICE_TITLE, result.error)
            return False
        note: NoteFile = result.value
        self.session.load(path, note)
        self.nav.detach()
        ref = NoteRef(note.note_id, path.stem, path, path.parent.name)
        if self._on_note_opened is not None:
            self._on_note_opened(ref, note)
        return True

    def activate_link(self, target_id: str) -> NoteRef | LinkNotFound:
        """Follow a note link: open the target, or report it as not found."""
        outcome = resolve_link(target_id, self.index)
        if isinstance(outcome, LinkNotFound):
            self._notice(LINK_NOTICE_TITLE, outcome.message)
            return outcome
        if outcome.note_id != self.session.note_id:
            self.open_note(outcome.note_id)
        return outcome

    def rename_current(self, title: str) -> OpResult:
        """Rename the open note right away (bypasses the title debounce)."""
        if not (title or "").strip():
            self._notice("Rename", INVALID_TITLE)
            return OpResult.fail(INVALID_TITLE)
        self.session.edit_title(title)
        return self.session.rename_now()

    def delete_note(self, note_id: str) -> OpResult:
        ref = self.index.get(note_id)
        if ref is None:
            self._notice("Delete note", NOT_FOUND)
            return OpResult.fail(NOT_FOUND)

        if self.session.note_id == note_id:
            # no point writing a file that is about to go
            self.session.close(flush=False)
            self.nav.detach()
            if self._on_note_closed is not None:
                self._on_note_closed()

        result = self.store.delete_note(ref.path)
        if not result.success:
            self._notice("Delete note", result.error)
        self.rebuild_index()
        return result

    def import_html(self, title: str, markup: str) -> OpResult:
        """New note in the current folder from an HTML fragment or page (sanitized)."""
        return self.create_note(title, parse_html(markup))

    def export_html(self, target: Path) -> OpResult:
        """Write the open note as a standalone HTML page."""
        if not self.session.is_loaded:
            return OpResult.fail("No note is open.")
        target = Path(target)
        page = render_html_page(self.session.body, title=self.session.title)
        try:
            atomic_write_text(target, page)
        except OSError as exc:
            log.exception("HTML export failed: %s", target)
            self._notice("Export HTML", str(exc))
            return OpResult.fail(str(exc))
        log.info("Exported %s -> %s", self.session.path.name, target)
        return OpResult.ok(target)

    def back(self) -> bool:
        return self.nav.back()

    def forward(self) -> bool:
        return self.nav.forward()

    def shutdown(self) -> bool:
        """Flush and close the open note (application exit)."""
        return self.session.close(flush=True)
