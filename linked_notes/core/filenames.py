# linked_notes/core/filenames.py

from __future__ import annotations

import re
import unicodedata
from pathlib import Path


WINDOWS_RESERVED_NAMES = {
    "con", "prn", "aux", "nul",
    *(f"com{i}" for i in range(1, 10)),
    *(f"lpt{i}" for i in range(1, 10)),
}

ILLEGAL_CHARS_RE = re.compile(r'[\\/:*?"<>|]')
WHITESPACE_RE = re.compile(r"\s+")

MAX_FILENAME_LENGTH = 120
FALLBACK_NAME = "Untitled"


def is_blank(name: str | None) -> bool:
    return name is None or not str(name).strip()


def sanitize_title(title: str) -> str:
    """
    Turn a note/folder title into a filesystem-safe name.

    Lossy and one-way: illegal characters are dropped, not escaped,
    so the displayed title and the stored filename may differ.
    """
    if title is None:
        raise ValueError("sanitize_title(): title is None")

    # 1. Unicode normalization (visual equality -> binary equality)
    name = unicodedata.normalize("NFKC", str(title))

    # 2. Remove control characters
    name = "".join(ch for ch in name if unicodedata.category(ch)[0] != "C")

    # 3. Strip characters illegal on common filesystems
    name = ILLEGAL_CHARS_RE.sub("", name)

    # 4. Trim and normalize whitespace
    name = WHITESPACE_RE.sub(" ", name).strip()

    # 5. Windows: no trailing dot or space
    name = name.rstrip(" .")

    if not name:
        return FALLBACK_NAME

    # 6. Windows reserved device names
    base = name.split(".", 1)[0].strip().lower()
    if base in WINDOWS_RESERVED_NAMES:
        name = f"_{name}"

    # 7. Length limit
    if len(name) > MAX_FILENAME_LENGTH:
        name = name[:MAX_FILENAME_LENGTH].rstrip(" .")

    return name


def unique_path(
    directory: Path,
    name: str,
    suffix: str = "",
    *,
    ignore: Path | None = None,
) -> Path:
    """
    First free path among `name`, `name (1)`, `name (2)`, ...

    `ignore` is treated as free, so renaming a file onto its own name
    does not bump the counter.
    """
    directory = Path(directory)
    ignored = Path(ignore) if ignore is not None else None

    def free(p: Path) -> bool:
        return p == ignored or not p.exists()

    candidate = directory / f"{name}{suffix}"
    counter = 1
    while not free(candidate):
        candidate = directory / f"{name} ({counter}){suffix}"
        counter += 1
    return candidate
