from .filesystem import atomic_write_text, write_recovery_copy
from .note_io import NoteFile, load_note, read_note_for_edit, save_note, new_note
from .index import NoteIndex, NoteRef, build_index
from .store import NotesStore

__all__ = ["atomic_write_text",
           "write_recovery_copy",
           "NoteFile",
           "load_note",
           "read_note_for_edit",
           "save_note",
           "new_note",
           "NoteIndex",
           "NoteRef",
           "build_index",
           "NotesStore",
           ]
