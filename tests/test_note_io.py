import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import json

import pytest

from linked_notes.core.document import (
    NOTE_LINK,
    Document,
    DocumentSchemaError,
    Mark,
    NoteFormatError,
    Paragraph,
    Text,
)
from linked_notes.vault.filesystem import atomic_write_text, write_recovery_copy
from linked_notes.vault.note_io import (
    NoteFile,
    load_note,
    new_note,
    note_to_json,
    read_note_for_edit,
    save_note,
)


def _body() -> Document:
    return Document((Paragraph((Text("see "), Text("B", (Mark(NOTE_LINK, "id-b"),)))),))


def test_save_then_load_preserves_id_and_body(tmp_path):
    path = tmp_path / "A.json"
    note = NoteFile("id-a", _body())
    save_note(path, note)
    assert load_note(path) == note


def test_file_layout(tmp_path):
    path = tmp_path / "A.json"
    save_note(path, new_note())
    text = path.read_text(encoding="utf-8")
    data = json.loads(text)
    assert list(data) == ["id", "type", "content"]
    assert data["type"] == "doc"
    assert data["content"] == [{"type": "paragraph"}]
    assert text.startswith('{\n  "id": ')


def test_new_notes_get_distinct_ids():
    assert new_note().note_id != new_note().note_id


def test_missing_id_is_minted_once_and_persisted(tmp_path):
    path = tmp_path / "Old.json"
    path.write_text(json.dumps({"type": "doc", "content": [{"type": "paragraph"}]}), encoding="utf-8")

    first = load_note(path)
    on_disk = json.loads(path.read_text(encoding="utf-8"))
    assert on_disk["id"] == first.note_id
    assert list(on_disk)[0] == "id"

    assert load_note(path).note_id == first.note_id
    assert load_note(path).note_id == first.note_id


def test_existing_id_is_kept_verbatim(tmp_path):
    path = tmp_path / "Legacy.json"
    path.write_text(json.dumps({"id": "not-a-uuid", "type": "doc", "content": []}), encoding="utf-8")
    assert load_note(path).note_id == "not-a-uuid"


def test_invalid_json_raises_format_error(tmp_path):
    path = tmp_path / "Bad.json"
    path.write_text("{nope", encoding="utf-8")
    with pytest.raises(NoteFormatError):
        load_note(path)


def test_bad_tree_raises_schema_error(tmp_path):
    path = tmp_path / "Bad.json"
    path.write_text(json.dumps({"id": "x", "type": "doc", "content": [{"type": "table"}]}), encoding="utf-8")
    with pytest.raises(DocumentSchemaError):
        load_note(path)


def test_plain_text_file_opens_as_recovered_text(tmp_path):
    path = tmp_path / "Plain.json"
    path.write_text("first line\nsecond line", encoding="utf-8")

    note = read_note_for_edit(path)
    assert note.recovered
    assert note.body.to_plain_text() == "first line\nsecond line"
    # nothing is written until the user saves
    assert path.read_text(encoding="utf-8") == "first line\nsecond line"


def test_bad_tree_keeps_id_and_salvages_text(tmp_path):
    path = tmp_path / "Table.json"
    data = {"id": "keep-me", "type": "doc", "content": [
        {"type": "table", "content": [{"type": "text", "text": "cell"}]},
    ]}
    path.write_text(json.dumps(data), encoding="utf-8")

    note = read_note_for_edit(path)
    assert note.note_id == "keep-me"
    assert note.recovered
    assert note.body.to_plain_text() == "cell"


def test_valid_note_is_not_recovered(tmp_path):
    path = tmp_path / "A.json"
    save_note(path, NoteFile("id-a", _body()))
    assert not read_note_for_edit(path).recovered


def test_note_to_json_keeps_unicode(tmp_path):
    note = NoteFile("id", Document((Paragraph((Text("Привет"),)),)))
    assert "Привет" in note_to_json(note)


def test_atomic_write_leaves_no_temp_files(tmp_path):
    target = tmp_path / "sub" / "file.json"
    atomic_write_text(target, "one")
    atomic_write_text(target, "two")
    assert target.read_text(encoding="utf-8") == "two"
    assert [p.name for p in target.parent.iterdir()] == ["file.json"]


def test_failed_atomic_write_keeps_directory_clean(tmp_path):
    target = tmp_path / "taken.json"
    target.mkdir()
    with pytest.raises(OSError):
        atomic_write_text(target, "x")
    assert [p.name for p in tmp_path.iterdir()] == ["taken.json"]


def test_recovery_copy(tmp_path):
    out = write_recovery_copy(tmp_path / "My note.json", "{}", recovery_dir=tmp_path / "rec")
    assert out.parent == tmp_path / "rec"
    assert out.name.startswith("My note.recovery.")
    assert out.suffix == ".json"
    assert out.read_text(encoding="utf-8") == "{}"
