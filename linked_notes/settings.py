from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from PySide6.QtCore import QSettings

APP_NAME = "linked-notes"
APP_DIR = Path.home() / f".{APP_NAME}"
LOG_DIR = APP_DIR / "logs"
LOG_PATH = LOG_DIR / f"{APP_NAME}.log"
RECOVERY_DIR = APP_DIR / "recovery"
DEFAULT_NOTES_ROOT = APP_DIR / "notes"

NOTE_SUFFIX = ".json"

AUTOSAVE_DEBOUNCE_MS = 400
RENAME_DEBOUNCE_MS = 500
UI_STATE_DEBOUNCE_MS = 400
HISTORY_LIMIT = 200


@dataclass(frozen=True)
class SettingsKeys:
    UI_GEOMETRY: str = "ui/geometry"
    UI_SPLITTER: str = "ui/splitter_sizes"
    NOTES_ROOT: str = "notes/root"
    LAST_FOLDER: str = "nav/last_folder"
    LAST_NOTE_ID: str = "nav/last_note_id"


def get_str(settings: QSettings, key: str, default: str) -> str:
    try:
        val = settings.value(key, default)
        return str(val) if val is not None else default
    except Exception:
        return default


def resolve_notes_root(cli_value: Path | None, settings: QSettings) -> Path:
    """CLI flag beats QSettings, which beats the default location."""
    if cli_value is not None:
        return Path(cli_value).expanduser()
    stored = get_str(settings, SettingsKeys.NOTES_ROOT, "")
    if stored:
        return Path(stored).expanduser()
    return DEFAULT_NOTES_ROOT
