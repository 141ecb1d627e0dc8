from __future__ import annotations

import logging
from typing import Callable

from PySide6.QtCore import QObject, QTimer

log = logging.getLogger(__name__)


class DebouncedTask(QObject):
    """
    Single-shot task that runs `callback(key)` after `interval_ms` of quiet.

    The key names the note the work belongs to. Rescheduling with the same
    key restarts the window (bursts coalesce into one run); scheduling with
    a different key drops the pending run for the old key.
    """

    def __init__(
        self,
        *,
        interval_ms: int,
        callback: Callable[[str], None],
        name: str = "task",
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._callback = callback
        self._name = name
        self._pending_key: str | None = None

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(int(interval_ms))
        self._timer.timeout.connect(self._fire)

    @property
    def interval_ms(self) -> int:
        return self._timer.interval()

    @property
    def pending_key(self) -> str | None:
        return self._pending_key

    @property
    def is_pending(self) -> bool:
        return self._pending_key is not None

    def schedule(self, key: str) -> None:
        if self._pending_key is not None and self._pending_key != key:
            log.debug("%s: pending run for %s replaced by %s", self._name, self._pending_key, key)
        self._pending_key = key
        self._timer.start()

    def cancel(self) -> None:
        if self._pending_key is not None:
            log.debug("%s: canceled pending run for %s", self._name, self._pending_key)
        self._timer.stop()
        self._pending_key = None

    def flush(self) -> bool:
        """Run the pending task now. Returns False if nothing was pending."""
        if self._pending_key is None:
            return False
        self._timer.stop()
        self._fire()
        return True

    def _fire(self) -> None:
        key = self._pending_key
        self._pending_key = None
        if key is None:
            return
        self._callback(key)
