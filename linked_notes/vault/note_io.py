from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from linked_notes.core.document import (
    Document,
    DocumentSchemaError,
    NoteFormatError,
    parse_document,
)
from linked_notes.core.ids import allocate_note_id, is_note_id
from linked_notes.vault.filesystem import atomic_write_text

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class NoteFile:
    """What a note file holds: the stable id and the rich-text body."""
    note_id: str
    body: Document

    @property
    def recovered(self) -> bool:
        return self.body.recovered


def new_note() -> NoteFile:
    return NoteFile(allocate_note_id(), Document.empty())


def note_to_json(note: NoteFile) -> str:
    data = {"id": note.note_id}
    data.update(note.body.to_dict())
    return json.dumps(data, indent=2, ensure_ascii=False)


def read_note_text(path: Path) -> str:
    """Single place notes are read from disk."""
    return Path(path).read_text(encoding="utf-8")


def _decode(text: str, path: Path) -> dict:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise NoteFormatError(f"{Path(path).name}: invalid JSON ({exc.msg} at line {exc.lineno})") from exc
    if not isinstance(data, dict):
        raise NoteFormatError(f"{Path(path).name}: top level is not an object")
    return data


def _migrate_id(path: Path, data: dict) -> str:
    """Mint an id for a file that has none and write it back before use."""
    note_id = allocate_note_id()
    migrated = {"id": note_id}
    migrated.update((k, v) for k, v in data.items() if k != "id")
    atomic_write_text(path, json.dumps(migrated, indent=2, ensure_ascii=False), encoding="utf-8")
    log.info("Note id migrated: path=%s id=%s", path, note_id)
    return note_id


def load_note(path: Path) -> NoteFile:
    """
    Read and validate a note file.

    A file without an id gets one minted and persisted (self-healing
    migration) before this returns, so later loads see the same id.

    Raises:
        OSError: file cannot be read (or the migration cannot be written)
        NoteFormatError: invalid JSON or invalid document tree
    """
    path = Path(path)
    data = _decode(read_note_text(path), path)
    try:
        body = parse_document(data)
    except DocumentSchemaError as exc:
        raise DocumentSchemaError(f"{path.name}: {exc}") from exc

    note_id = data.get("id")
    if not is_note_id(note_id):
        note_id = _migrate_id(path, data)
    return NoteFile(note_id, body)


def _collect_text(node: object) -> list[str]:
    # best-effort text salvage from a tree that failed validation
    out: list[str] = []
    if isinstance(node, dict):
        if isinstance(node.get("text"), str):
            out.append(node["text"])
        for child in node.get("content") or []:
            out.extend(_collect_text(child))
    elif isinstance(node, list):
        for child in node:
            out.extend(_collect_text(child))
    return out


def read_note_for_edit(path: Path) -> NoteFile:
    """
    Like load_note(), but malformed content comes back as the plain-text
    recovery variant instead of raising. Nothing is written for a recovered
    note until the user saves it.

    Raises OSError if the file cannot be read.
    """
    path = Path(path)
    try:
        return load_note(path)
    except DocumentSchemaError as exc:
        log.warning("Note has an invalid document tree, opened as plain text: %s", exc)
        data = _decode(read_note_text(path), path)
        note_id = data.get("id") if is_note_id(data.get("id")) else allocate_note_id()
        return NoteFile(note_id, Document.plain_text("\n".join(_collect_text(data))))
    except NoteFormatError as exc:
        log.warning("Note is not valid JSON, opened as plain text: %s", exc)
        return NoteFile(allocate_note_id(), Document.plain_text(read_note_text(path)))


def save_note(path: Path, note: NoteFile) -> None:
    """
    Serialize {id, type, content} as one atomic write.
    The id is written verbatim. Raises OSError on failure.
    """
    atomic_write_text(Path(path), note_to_json(note), encoding="utf-8")
