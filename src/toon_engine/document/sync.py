"""Adapter boundary types for syncing documents with host widgets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol, Tuple, runtime_checkable

from .document import DocumentErrorEntry
from .values import Path


@dataclass(slots=True)
class DocumentMirror:
    """Host-friendly snapshot describing the current document state."""

    text: str
    version: int
    is_valid: bool
    is_dirty: bool
    errors: Tuple[DocumentErrorEntry, ...] = ()
    selected_path: Optional[Path] = None
    attributes: dict[str, str] = field(default_factory=dict)


@runtime_checkable
class DocumentSync(Protocol):
    """How adapters exchange data with the document layer."""

    def pull_document(self) -> DocumentMirror:
        """Return the latest document snapshot the host should render."""
        ...

    def push_host_edit(self, text: str) -> None:
        """Submit raw text typed or pasted into the host widget."""
        ...


__all__ = ["DocumentMirror", "DocumentSync"]
