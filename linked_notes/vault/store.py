from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from linked_notes.core.filenames import is_blank, sanitize_title, unique_path
from linked_notes.core.results import OpResult
from linked_notes.settings import NOTE_SUFFIX
from linked_notes.vault.index import NoteIndex, NoteRef, build_index
from linked_notes.vault.note_io import NoteFile, new_note, read_note_for_edit, save_note

log = logging.getLogger(__name__)

NOT_FOUND = "Note not found."
INVALID_TITLE = "Invalid title provided."
INVALID_FOLDER = "Invalid folder name."


@dataclass(frozen=True)
class NotesStore:
    """
    Folder/note CRUD over the notes root:

        <root>/<folder>/<title>.json

    Every operation returns an OpResult; filesystem errors are logged
    and reported, never raised.
    """
    root: Path

    def ensure(self) -> None:
        Path(self.root).mkdir(parents=True, exist_ok=True)

    def folder_path(self, folder: str) -> Path:
        return Path(self.root) / folder

    def note_path(self, folder: str, title: str) -> Path:
        return self.folder_path(folder) / f"{title}{NOTE_SUFFIX}"

    # ───────────────────────── folders ─────────────────────────

    def list_folders(self) -> list[str]:
        try:
            return sorted(
                (p.name for p in Path(self.root).iterdir() if p.is_dir() and not p.name.startswith(".")),
                key=str.lower,
            )
        except OSError:
            log.exception("Failed to list folders in %s", self.root)
            return []

    def create_folder(self, name: str) -> OpResult:
        if is_blank(name):
            return OpResult.fail(INVALID_FOLDER)
        target = unique_path(Path(self.root), sanitize_title(name))
        try:
            target.mkdir(parents=True)
        except OSError as exc:
            log.exception("Failed to create folder %s", target)
            return OpResult.fail(str(exc))
        log.info("Folder created: %s", target)
        return OpResult.ok(target.name)

    # ───────────────────────── notes ─────────────────────────

    def build_index(self, folder: str) -> NoteIndex:
        return build_index(self.folder_path(folder), folder=folder)

    def list_notes(self, folder: str) -> list[NoteRef]:
        return self.build_index(folder).refs()

    def create_note(self, folder: str, title: str) -> OpResult:
        if is_blank(title):
            return OpResult.fail(INVALID_TITLE)
        folder_dir = self.folder_path(folder)
        path = unique_path(folder_dir, sanitize_title(title), NOTE_SUFFIX)
        note = new_note()
        try:
            save_note(path, note)
        except OSError as exc:
            log.exception("Failed to create note %s", path)
            return OpResult.fail(str(exc))
        log.info("Note created: path=%s id=%s", path, note.note_id)
        return OpResult.ok(NoteRef(note.note_id, path.stem, path, folder))

    def open_note(self, path: Path) -> OpResult:
        path = Path(path)
        if not path.is_file():
            return OpResult.fail(NOT_FOUND)
        try:
            return OpResult.ok(read_note_for_edit(path))
        except OSError as exc:
            log.exception("Failed to read note %s", path)
            return OpResult.fail(str(exc))

    def save_note(self, path: Path, note: NoteFile) -> OpResult:
        try:
            save_note(path, note)
        except OSError as exc:
            log.exception("Failed to save note %s", path)
            return OpResult.fail(str(exc))
        log.debug("Note saved: %s", path)
        return OpResult.ok()

    def rename_note(self, path: Path, new_title: str) -> OpResult:
        """
        Rename the file behind a note. The id lives inside the file
        and is not touched. Result value: the path after the rename.
        """
        path = Path(path)
        if is_blank(new_title):
            return OpResult.fail(INVALID_TITLE)
        if not path.is_file():
            return OpResult.fail(NOT_FOUND)

        target = unique_path(path.parent, sanitize_title(new_title), NOTE_SUFFIX, ignore=path)
        if target == path:
            return OpResult.ok(path)

        try:
            path.replace(target)
        except OSError as exc:
            log.exception("Rename failed: %s -> %s", path, target)
            return OpResult.fail(str(exc))
        log.info("Note renamed: %s -> %s", path.name, target.name)
        return OpResult.ok(target)

    def delete_note(self, path: Path) -> OpResult:
        path = Path(path)
        if not path.is_file():
            return OpResult.fail(NOT_FOUND)
        try:
            path.unlink()
        except OSError as exc:
            log.exception("Failed to delete note %s", path)
            return OpResult.fail(str(exc))
        log.info("Note deleted: %s", path)
        return OpResult.ok()
