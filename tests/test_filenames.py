import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import uuid

from linked_notes.core.filenames import is_blank, sanitize_title, unique_path
from linked_notes.core.ids import allocate_note_id, is_note_id


def test_allocated_ids_are_uuids_and_distinct():
    ids = {allocate_note_id() for _ in range(200)}
    assert len(ids) == 200
    for note_id in ids:
        assert str(uuid.UUID(note_id)) == note_id


def test_is_note_id():
    assert is_note_id(allocate_note_id())
    assert is_note_id("legacy-id")
    assert not is_note_id("")
    assert not is_note_id("   ")
    assert not is_note_id(None)
    assert not is_note_id(42)


def test_illegal_chars_are_stripped():
    assert sanitize_title('a/b\\c:d*e?f"g<h>i|j') == "abcdefghij"


def test_whitespace_is_collapsed_and_trimmed():
    assert sanitize_title("  Hello   \t world  ") == "Hello world"


def test_control_chars_removed():
    assert sanitize_title("Hello\x00World\n") == "HelloWorld"


def test_trailing_dots_and_spaces_removed():
    assert sanitize_title("Note. . ") == "Note"


def test_empty_after_sanitizing_falls_back():
    assert sanitize_title("///") == "Untitled"
    assert sanitize_title("") == "Untitled"


def test_windows_reserved_names():
    assert sanitize_title("CON") == "_CON"
    assert sanitize_title("lpt1.txt") == "_lpt1.txt"


def test_length_limit():
    assert len(sanitize_title("x" * 500)) == 120


def test_is_blank():
    assert is_blank(None)
    assert is_blank("  \t")
    assert not is_blank(" a ")


def test_unique_path_appends_counter(tmp_path):
    assert unique_path(tmp_path, "Idea", ".json") == tmp_path / "Idea.json"
    (tmp_path / "Idea.json").write_text("{}", encoding="utf-8")
    assert unique_path(tmp_path, "Idea", ".json") == tmp_path / "Idea (1).json"
    (tmp_path / "Idea (1).json").write_text("{}", encoding="utf-8")
    assert unique_path(tmp_path, "Idea", ".json") == tmp_path / "Idea (2).json"


def test_unique_path_ignores_own_file(tmp_path):
    own = tmp_path / "Idea.json"
    own.write_text("{}", encoding="utf-8")
    assert unique_path(tmp_path, "Idea", ".json", ignore=own) == own
