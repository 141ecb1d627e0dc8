from __future__ import annotations

import logging
from collections.abc import Callable

from linked_notes.settings import HISTORY_LIMIT

log = logging.getLogger(__name__)


class NavigationController:
    """
    Back/forward history of the notes opened in one folder, by note id.

    The history is a list with a cursor on the open note. Opening a note
    commits it only after `open_note` reported success. Stepping back or
    forward skips ids that `exists` no longer knows (deleted notes) and
    drops them, reporting each one through `on_skipped`.

    A note opened outside history (a file picked by path) detaches the
    cursor: nothing is current, but back returns to the note that was
    current before.
    """

    def __init__(
        self,
        open_note: Callable[[str], bool],
        *,
        exists: Callable[[str], bool] | None = None,
        on_skipped: Callable[[str], None] | None = None,
        limit: int = HISTORY_LIMIT,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        self._open_note = open_note
        self._exists = exists or (lambda _note_id: True)
        self._on_skipped = on_skipped
        self._limit = limit
        self._entries: list[str] = []
        self._pos = -1
        self._detached = False

    @property
    def current(self) -> str | None:
        if self._detached or self._pos < 0:
            return None
        return self._entries[self._pos]

    @property
    def entries(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def open(self, note_id: str) -> bool:
        note_id = (note_id or "").strip()
        if not note_id:
            return False
        if note_id == self.current:
            return True
        if not self._open_note(note_id):
            return False

        if self._detached and self._pos >= 0 and self._entries[self._pos] == note_id:
            self._detached = False
            return True
        del self._entries[self._pos + 1:]
        self._entries.append(note_id)
        overflow = len(self._entries) - self._limit
        if overflow > 0:
            del self._entries[:overflow]
        self._pos = len(self._entries) - 1
        self._detached = False
        return True

    def back(self) -> bool:
        # detached: the entry under the cursor is the note to go back to
        start = self._pos if self._detached else self._pos - 1
        return self._step(start, -1)

    def forward(self) -> bool:
        return self._step(self._pos + 1, 1)

    def _step(self, target: int, direction: int) -> bool:
        while 0 <= target < len(self._entries):
            note_id = self._entries[target]
            if self._exists(note_id):
                if not self._open_note(note_id):
                    return False
                self._pos = target
                self._detached = False
                return True

            log.info("History entry skipped, note is gone: %s", note_id)
            del self._entries[target]
            if target <= self._pos:
                self._pos -= 1
            if direction < 0:
                target -= 1
            if self._on_skipped is not None:
                self._on_skipped(note_id)
        return False

    def detach(self) -> None:
        if self._pos >= 0:
            self._detached = True

    def clear(self) -> None:
        self._entries.clear()
        self._pos = -1
        self._detached = False
