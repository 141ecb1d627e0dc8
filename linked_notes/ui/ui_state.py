from __future__ import annotations

import logging

from PySide6.QtCore import QSettings, QTimer
from PySide6.QtWidgets import QMainWindow, QSplitter

from linked_notes.settings import UI_STATE_DEBOUNCE_MS, SettingsKeys
from linked_notes.ui.qt_utils import safe_set_setting

log = logging.getLogger(__name__)

DEFAULT_WINDOW_SIZE = (1100, 700)


def coerce_sizes(value) -> list[int] | None:
    """Splitter sizes as stored by QSettings: a list, or "200,800" on some backends."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.replace(",", " ").split()
    if not isinstance(value, (list, tuple)):
        return None
    out: list[int] = []
    for x in value:
        try:
            out.append(int(x))
        except (TypeError, ValueError):
            continue
    return out or None


class UiStateStore:
    """Window geometry and splitter sizes, saved to QSettings with a debounce."""

    def __init__(self, *, owner: QMainWindow, settings: QSettings, debounce_ms: int = UI_STATE_DEBOUNCE_MS):
        self._owner = owner
        self._settings = settings
        self._splitter: QSplitter | None = None
        self._restoring = False
        self._timer = QTimer(owner)
        self._timer.setSingleShot(True)
        self._timer.setInterval(int(debounce_ms))
        self._timer.timeout.connect(self.save)

    def schedule_save(self) -> None:
        if not self._restoring:
            self._timer.start()

    def restore(self, *, splitter: QSplitter) -> None:
        self._splitter = splitter
        self._restoring = True
        try:
            geo = self._settings.value(SettingsKeys.UI_GEOMETRY)
            if geo:
                self._owner.restoreGeometry(geo)
            else:
                self._owner.resize(*DEFAULT_WINDOW_SIZE)

            sizes = coerce_sizes(self._settings.value(SettingsKeys.UI_SPLITTER))
            if sizes:
                splitter.setSizes(sizes)
        except Exception:
            log.exception("Failed to restore UI state from QSettings")
        finally:
            self._restoring = False

    def save(self) -> None:
        self._timer.stop()
        safe_set_setting(self._settings, SettingsKeys.UI_GEOMETRY, self._owner.saveGeometry())
        if self._splitter is not None:
            safe_set_setting(self._settings, SettingsKeys.UI_SPLITTER, self._splitter.sizes())
