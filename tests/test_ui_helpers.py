import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pathlib import Path

from PySide6.QtCore import QSettings

from linked_notes.settings import DEFAULT_NOTES_ROOT, SettingsKeys, get_str, resolve_notes_root
from linked_notes.ui.link_picker import MAX_IDLE_RESULTS, rank_refs
from linked_notes.ui.ui_state import coerce_sizes
from linked_notes.vault.index import NoteRef


def _refs(*titles):
    return [NoteRef(f"id-{t}", t, Path(f"{t}.json"), "f") for t in titles]


def test_rank_prefix_matches_first():
    ranked = rank_refs("note", _refs("My note", "Notebook", "Other", "note"))
    assert [r.title for r in ranked] == ["note", "Notebook", "My note"]


def test_rank_empty_query_lists_titles():
    ranked = rank_refs("  ", _refs("b", "A", "c"))
    assert [r.title for r in ranked] == ["A", "b", "c"]


def test_rank_limits():
    many = _refs(*(f"n{i:03d}" for i in range(100)))
    assert len(rank_refs("", many)) == MAX_IDLE_RESULTS
    assert len(rank_refs("n", many, limit=5)) == 5


def test_coerce_sizes():
    assert coerce_sizes([200, "800"]) == [200, 800]
    assert coerce_sizes("200,800") == [200, 800]
    assert coerce_sizes(["x"]) is None
    assert coerce_sizes(None) is None
    assert coerce_sizes(3) is None


def _settings(tmp_path) -> QSettings:
    return QSettings(str(tmp_path / "settings.ini"), QSettings.Format.IniFormat)


def test_notes_root_precedence(qapp, tmp_path):
    settings = _settings(tmp_path)
    assert resolve_notes_root(None, settings) == DEFAULT_NOTES_ROOT

    settings.setValue(SettingsKeys.NOTES_ROOT, str(tmp_path / "stored"))
    assert resolve_notes_root(None, settings) == tmp_path / "stored"
    assert resolve_notes_root(tmp_path / "cli", settings) == tmp_path / "cli"


def test_get_str_is_tolerant(qapp, tmp_path):
    settings = _settings(tmp_path)
    settings.setValue("n", 5)
    assert get_str(settings, "n", "") == "5"
    assert get_str(settings, "missing", "dflt") == "dflt"
