from __future__ import annotations

import logging
import time
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from linked_notes.core.document import NoteFormatError
from linked_notes.settings import NOTE_SUFFIX
from linked_notes.vault.note_io import load_note

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class NoteRef:
    note_id: str
    title: str
    path: Path
    folder: str


class NoteIndex(Mapping[str, NoteRef]):
    """
    Point-in-time snapshot of one folder:
      note_id -> NoteRef(title, path)

    Never updated in place; build a new one with build_index() after
    any create/rename/delete.
    """

    def __init__(self, refs: Mapping[str, NoteRef] | None = None, *, folder: str | None = None) -> None:
        self._by_id: Mapping[str, NoteRef] = MappingProxyType(dict(refs or {}))
        self.folder = folder

    def __getitem__(self, note_id: str) -> NoteRef:
        return self._by_id[note_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_id)

    def __len__(self) -> int:
        return len(self._by_id)

    def __repr__(self) -> str:
        return f"NoteIndex(folder={self.folder!r}, notes={len(self)})"

    def refs(self) -> list[NoteRef]:
        """All notes, sorted by title (case-insensitive)."""
        return sorted(self._by_id.values(), key=lambda r: (r.title.lower(), r.title))


EMPTY_INDEX = NoteIndex()


def build_index(folder_dir: Path, *, folder: str | None = None) -> NoteIndex:
    """
    Scan every note file in `folder_dir` and map id -> NoteRef.

    Files without an id are migrated on the way (see load_note).
    Unreadable or malformed files are logged and skipped.
    """
    folder_dir = Path(folder_dir)
    folder_name = folder if folder is not None else folder_dir.name
    if not folder_dir.is_dir():
        log.info("Index: folder does not exist: %s", folder_dir)
        return NoteIndex(folder=folder_name)

    t0 = time.perf_counter()
    refs: dict[str, NoteRef] = {}
    skipped = 0

    for path in sorted(folder_dir.glob(f"*{NOTE_SUFFIX}"), key=lambda p: p.name.lower()):
        if not path.is_file():
            continue
        try:
            note = load_note(path)
        except NoteFormatError as exc:
            skipped += 1
            log.warning("Index: skipping malformed note %s (%s)", path, exc)
            continue
        except OSError:
            skipped += 1
            log.exception("Index: skipping unreadable note %s", path)
            continue

        if note.note_id in refs:
            log.warning(
                "Index: duplicate note id %s in %s (already used by %s), skipped",
                note.note_id, path.name, refs[note.note_id].path.name,
            )
            continue
        refs[note.note_id] = NoteRef(
            note_id=note.note_id,
            title=path.stem,
            path=path,
            folder=folder_name,
        )

    dt_ms = (time.perf_counter() - t0) * 1000.0
    log.info(
        "Index rebuilt: folder=%s notes=%d skipped=%d time_ms=%.1f",
        folder_name, len(refs), skipped, dt_ms,
    )
    return NoteIndex(refs, folder=folder_name)
