"""Per-session view state: expansion, selection, and the active search."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from toon_engine.document.values import Path

from . import search
from .tree import ExpansionState, TreeNode, project


@dataclass(slots=True)
class ViewState:
    """UI-side state kept next to a document but never written into it.

    Search results are re-derived from the current value on every read, so
    they cannot go stale across edits. ``compare_text`` is the reference text
    for side-by-side comparison and survives :meth:`reset`.
    """

    expansion: ExpansionState = field(default_factory=ExpansionState)
    selected_path: Optional[Path] = None
    search_query: str = ""
    compare_text: str = ""

    def tree(self, value: Any) -> Tuple[TreeNode, ...]:
        return project(value, self.expansion.ids)

    def select(self, path: Optional[Sequence[str]]) -> None:
        self.selected_path = None if path is None else tuple(path)

    def search_results(self, value: Any) -> List[Path]:
        return search.find(value, self.search_query)

    def reset(self) -> None:
        self.selected_path = None
        self.search_query = ""


__all__ = ["ViewState"]
