from .ids import allocate_note_id, is_note_id
from .filenames import sanitize_title, unique_path
from .results import OpResult
from .document import Document, DocumentSchemaError, NoteFormatError
from .links import set_note_link, unset_note_link, link_spans, link_at

__all__ = ["allocate_note_id",
           "is_note_id",
           "sanitize_title",
           "unique_path",
           "OpResult",
           "Document",
           "DocumentSchemaError",
           "NoteFormatError",
           "set_note_link",
           "unset_note_link",
           "link_spans",
           "link_at",
           ]
