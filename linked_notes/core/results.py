from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class OpResult:
    """
    Outcome of a store operation.

    Filesystem and validation failures are converted to `success=False`
    with a human-readable `error`, never raised to the UI.
    """
    success: bool
    error: str | None = None
    value: Any = None

    @classmethod
    def ok(cls, value: Any = None) -> "OpResult":
        return cls(True, None, value)

    @classmethod
    def fail(cls, error: str) -> "OpResult":
        return cls(False, error or "Unknown error.", None)

    def __bool__(self) -> bool:
        return self.success
