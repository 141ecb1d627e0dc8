# linked_notes/vault/filesystem.py

from __future__ import annotations

import logging
import os
import uuid
from datetime import datetime
from pathlib import Path

from linked_notes.core.filenames import sanitize_title
from linked_notes.settings import RECOVERY_DIR, NOTE_SUFFIX

log = logging.getLogger(__name__)


# ───────────────────────── public API ─────────────────────────

def atomic_write_text(
    path: Path,
    text: str,
    *,
    encoding: str = "utf-8",
) -> None:
    """
    Atomic-ish file write:
    - write to temp file in same directory
    - fsync
    - replace()

    Prevents partial writes on crash/power loss.
    """
    path = Path(path)
    parent = path.parent
    parent.mkdir(parents=True, exist_ok=True)

    tmp_path = parent / f".{path.name}.tmp-{uuid.uuid4().hex}"

    try:
        with open(tmp_path, "w", encoding=encoding, newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        tmp_path.replace(path)
    finally:
        try:
            if tmp_path.exists():
                tmp_path.unlink()
        except OSError:
            log.warning("Failed to remove temp file: %s", tmp_path)


def write_recovery_copy(note_path: Path, text: str, *, recovery_dir: Path | None = None) -> Path:
    """
    Best-effort emergency save when normal save fails.

    Writes timestamped copy into:
      ~/.linked-notes/recovery/
    """
    note_path = Path(note_path)
    target_dir = Path(recovery_dir) if recovery_dir is not None else RECOVERY_DIR

    stem = sanitize_title(note_path.stem or "Untitled")
    ts = datetime.now().strftime("%Y%m%d-%H%M%S")

    recovery_path = target_dir / f"{stem}.recovery.{ts}{NOTE_SUFFIX}"
    atomic_write_text(recovery_path, text, encoding="utf-8")

    return recovery_path
