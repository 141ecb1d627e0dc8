from __future__ import annotations

import logging
from contextlib import contextmanager

from PySide6.QtCore import QSettings

log = logging.getLogger(__name__)


@contextmanager
def blocked_signals(obj):
    """Temporarily silence Qt signals of `obj`; always re-enables them."""
    if obj is None:
        yield
        return
    previous = obj.blockSignals(True)
    try:
        yield
    finally:
        try:
            obj.blockSignals(previous)
        except RuntimeError:
            # the C++ object may already be gone
            pass


def safe_set_setting(settings: QSettings, key: str, value) -> None:
    """Best-effort QSettings write; the UI never fails because of it."""
    try:
        settings.setValue(key, value)
    except Exception:
        log.warning("Failed to persist setting %s", key)
