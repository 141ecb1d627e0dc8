from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from linked_notes.vault.index import NoteRef

log = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "The linked note could not be found. It may have been deleted."


@dataclass(frozen=True)
class LinkNotFound:
    """Outcome of resolving a dangling link. A value, not an error."""
    target_id: str
    message: str = NOT_FOUND_MESSAGE

    def __bool__(self) -> bool:
        return False


def resolve_link(target_id: str | None, index: Mapping[str, NoteRef]) -> NoteRef | LinkNotFound:
    """Look a link target up in the current folder index."""
    target = (target_id or "").strip()
    ref = index.get(target) if target else None
    if ref is None:
        log.info("Dangling link: target_id=%s", target or "<empty>")
        return LinkNotFound(target)
    return ref
