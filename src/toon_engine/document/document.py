"""Document state: authoritative text plus its parsed value."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from .values import UNPARSED


@dataclass(frozen=True, slots=True)
class DocumentErrorEntry:
    line: int
    column: int
    message: str
    severity: str = "error"


@dataclass(slots=True)
class Document:
    """Mutable aggregate owned by :class:`~toon_engine.document.DocumentEngine`.

    ``value`` is ``UNPARSED`` whenever the text is blank or invalid; a stale
    tree is never kept next to text it does not describe.
    """

    raw_text: str = ""
    value: Any = UNPARSED
    is_valid: bool = True
    errors: List[DocumentErrorEntry] = field(default_factory=list)
    is_dirty: bool = False
    file_name: str = ""
    version: int = 0

    @property
    def has_value(self) -> bool:
        return self.value is not UNPARSED

    @property
    def first_error(self) -> Optional[DocumentErrorEntry]:
        return self.errors[0] if self.errors else None

    def reset(self) -> None:
        self.raw_text = ""
        self.value = UNPARSED
        self.is_valid = True
        self.errors = []
        self.is_dirty = False
        self.file_name = ""
        self.version += 1


__all__ = ["Document", "DocumentErrorEntry"]
