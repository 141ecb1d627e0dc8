from __future__ import annotations

import enum
import logging
import uuid
from pathlib import Path
from typing import Callable

from linked_notes.core.document import Document
from linked_notes.core.results import OpResult
from linked_notes.services.scheduler import DebouncedTask
from linked_notes.settings import AUTOSAVE_DEBOUNCE_MS, RENAME_DEBOUNCE_MS
from linked_notes.vault.filesystem import write_recovery_copy
from linked_notes.vault.note_io import NoteFile, note_to_json
from linked_notes.vault.store import NotesStore

log = logging.getLogger(__name__)


class SessionState(enum.Enum):
    UNLOADED = "unloaded"
    CLEAN = "clean"
    DIRTY = "dirty"


class NoteSession:
    """
    The single open note and its pending work.

    UNLOADED -> CLEAN -> DIRTY -> CLEAN (after a confirmed write);
    close() returns to UNLOADED from any state.

    Body edits and title edits are debounced independently. Both timers
    are keyed by a token that changes every time a note is loaded, so a
    timer left over from the previous note never writes into this one.
    """

    def __init__(
        self,
        store: NotesStore,
        *,
        save_delay_ms: int = AUTOSAVE_DEBOUNCE_MS,
        rename_delay_ms: int = RENAME_DEBOUNCE_MS,
        on_state_changed: Callable[[SessionState], None] | None = None,
        on_save_failed: Callable[[str, Path | None], None] | None = None,
        on_renamed: Callable[[Path, Path], None] | None = None,
        on_rename_failed: Callable[[str], None] | None = None,
    ) -> None:
        self._store = store
        self._on_state_changed = on_state_changed
        self._on_save_failed = on_save_failed
        self._on_renamed = on_renamed
        self._on_rename_failed = on_rename_failed

        self._path: Path | None = None
        self._note_id: str | None = None
        self._body: Document | None = None
        self._pending_title: str | None = None
        self._body_dirty = False
        self._title_dirty = False
        self._token = uuid.uuid4().hex

        self._save_task = DebouncedTask(
            interval_ms=save_delay_ms, callback=self._on_save_due, name="autosave",
        )
        self._rename_task = DebouncedTask(
            interval_ms=rename_delay_ms, callback=self._on_rename_due, name="rename",
        )

    # ───────────────────────── state ─────────────────────────

    @property
    def state(self) -> SessionState:
        if self._path is None:
            return SessionState.UNLOADED
        if self._body_dirty or self._title_dirty:
            return SessionState.DIRTY
        return SessionState.CLEAN

    @property
    def is_loaded(self) -> bool:
        return self._path is not None

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def title(self) -> str | None:
        return self._path.stem if self._path is not None else None

    @property
    def note_id(self) -> str | None:
        return self._note_id

    @property
    def body(self) -> Document | None:
        return self._body

    @property
    def token(self) -> str:
        return self._token

    @property
    def save_task(self) -> DebouncedTask:
        return self._save_task

    @property
    def rename_task(self) -> DebouncedTask:
        return self._rename_task

    def _emit_state(self, before: SessionState) -> None:
        after = self.state
        if after is not before and self._on_state_changed is not None:
            self._on_state_changed(after)

    # ───────────────────────── lifecycle ─────────────────────────

    def load(self, path: Path, note: NoteFile) -> None:
        """Make `note` (stored at `path`) the open note. The caller closes the previous one first."""
        before = self.state
        self._cancel_tasks()
        self._token = uuid.uuid4().hex
        self._path = Path(path)
        self._note_id = note.note_id
        self._body = note.body
        self._pending_title = None
        self._body_dirty = False
        self._title_dirty = False
        log.info("Note loaded: path=%s id=%s recovered=%s", self._path, note.note_id, note.recovered)
        self._emit_state(before)

    def close(self, *, flush: bool = True) -> bool:
        """
        Unload the open note. With flush=True pending rename/save run first;
        the return value tells whether that left nothing unsaved.
        Pending timers for this note are canceled either way.
        """
        if not self.is_loaded:
            return True
        ok = self.flush() if flush else True
        if not ok:
            log.warning("Closing note with unsaved changes: %s", self._path)
        before = self.state
        self._cancel_tasks()
        self._token = uuid.uuid4().hex
        self._path = None
        self._note_id = None
        self._body = None
        self._pending_title = None
        self._body_dirty = False
        self._title_dirty = False
        self._emit_state(before)
        return ok

    def _cancel_tasks(self) -> None:
        self._save_task.cancel()
        self._rename_task.cancel()

    # ───────────────────────── edits ─────────────────────────

    def edit_body(self, body: Document) -> None:
        if not self.is_loaded:
            log.debug("Body edit ignored: no note loaded")
            return
        before = self.state
        self._body = body
        self._body_dirty = True
        self._save_task.schedule(self._token)
        self._emit_state(before)

    def edit_title(self, title: str) -> None:
        if not self.is_loaded:
            log.debug("Title edit ignored: no note loaded")
            return
        before = self.state
        title = (title or "").strip()
        if not title:
            # a cleared title field is not a rename; the file keeps its name
            log.debug("Blank title ignored: %s", self._path)
            title = self.title
        self._pending_title = title
        self._title_dirty = title != self.title
        if self._title_dirty:
            self._rename_task.schedule(self._token)
        else:
            self._rename_task.cancel()
        self._emit_state(before)

    def _on_save_due(self, key: str) -> None:
        if key != self._token:
            log.info("Autosave skipped: note switched before timer fired")
            return
        self.save_now()

    def _on_rename_due(self, key: str) -> None:
        if key != self._token:
            log.info("Rename skipped: note switched before timer fired")
            return
        self.rename_now()

    # ───────────────────────── writes ─────────────────────────

    def save_now(self) -> OpResult:
        """
        Write the body to the note's *current* path (a rename that already
        landed is honoured). On failure the edits stay in memory, the state
        stays DIRTY, and a recovery copy is attempted.
        """
        if not self.is_loaded:
            return OpResult.fail("No note is open.")
        self._save_task.cancel()
        before = self.state
        note = NoteFile(self._note_id, self._body)
        path = self._path
        result = self._store.save_note(path, note)
        if result.success:
            self._body_dirty = False
            log.info("Note saved: %s", path)
            self._emit_state(before)
            return result

        recovery_path = None
        try:
            recovery_path = write_recovery_copy(path, note_to_json(note))
            log.critical("Recovery copy written: %s", recovery_path)
        except OSError:
            log.exception("Failed to write recovery copy for %s", path)
        if self._on_save_failed is not None:
            self._on_save_failed(result.error, recovery_path)
        return result

    def rename_now(self) -> OpResult:
        """Apply the pending title as a file rename. The note id never changes."""
        if not self.is_loaded:
            return OpResult.fail("No note is open.")
        self._rename_task.cancel()
        if not self._title_dirty:
            return OpResult.ok(self._path)

        before = self.state
        old_path = self._path
        result = self._store.rename_note(old_path, self._pending_title)
        if not result.success:
            log.warning("Rename failed: %s -> %r (%s)", old_path, self._pending_title, result.error)
            if self._on_rename_failed is not None:
                self._on_rename_failed(result.error)
            return result

        self._path = result.value
        self._title_dirty = False
        self._pending_title = None
        self._emit_state(before)
        if self._path != old_path and self._on_renamed is not None:
            self._on_renamed(old_path, self._path)
        return result

    def flush(self) -> bool:
        """Run pending rename, then pending save, right now. True if nothing is left unsaved."""
        if not self.is_loaded:
            return True
        self._cancel_tasks()
        ok = True
        if self._title_dirty:
            ok = self.rename_now().success and ok
        if self._body_dirty:
            ok = self.save_now().success and ok
        return ok
