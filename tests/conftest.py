import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture(autouse=True)
def recovery_dir(tmp_path, monkeypatch):
    """Recovery copies go under tmp_path instead of the user's home."""
    target = tmp_path / "recovery"
    monkeypatch.setattr("linked_notes.vault.filesystem.RECOVERY_DIR", target)
    return target


@pytest.fixture
def notes_root(tmp_path):
    root = tmp_path / "notes"
    root.mkdir()
    return root
