from __future__ import annotations

import uuid


def allocate_note_id() -> str:
    """Fresh random 128-bit id in canonical UUID form."""
    return str(uuid.uuid4())


def is_note_id(value: object) -> bool:
    # ids written by older builds may not be UUIDs; any non-blank string is accepted
    return isinstance(value, str) and bool(value.strip())
