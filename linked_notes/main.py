from __future__ import annotations

import argparse
import sys
from pathlib import Path

from PySide6.QtCore import QSettings
from PySide6.QtWidgets import QApplication

from linked_notes.logging_setup import SESSION_ID, install_global_exception_hooks, setup_logging
from linked_notes.settings import APP_NAME, SettingsKeys, resolve_notes_root
from linked_notes.ui.main_window import NotesWindow
from linked_notes.ui.qt_utils import safe_set_setting
from linked_notes.vault.store import NotesStore


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog=APP_NAME, description="Rich-text notes with links between notes")
    p.add_argument(
        "--notes-root",
        type=Path,
        default=None,
        help="Folder that holds the note folders (remembered for later runs)",
    )
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    log = setup_logging()
    install_global_exception_hooks(log)

    app = QApplication(sys.argv[:1])
    app.setApplicationName(APP_NAME)
    app.setOrganizationName(APP_NAME)

    settings = QSettings(APP_NAME, APP_NAME)
    root = resolve_notes_root(args.notes_root, settings)
    safe_set_setting(settings, SettingsKeys.NOTES_ROOT, str(root))
    log.info("Starting %s: notes_root=%s session=%s", APP_NAME, root, SESSION_ID)

    win = NotesWindow(NotesStore(root), settings)
    win.show()
    code = app.exec()
    log.info("Exiting with code %s", code)
    return code


if __name__ == "__main__":
    raise SystemExit(main())
