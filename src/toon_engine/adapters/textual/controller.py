"""Host-agnostic controller wiring a DocumentEngine into editor callbacks."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from toon_engine.diagnostics import Diagnostic, build_markers
from toon_engine.document import DocumentEngine, DocumentMirror, EditResult, Path
from toon_engine.projection import TreeNode
from toon_engine.runtime import telemetry


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class EditorUIHooks:
    """Callbacks invoked by the adapter to update host widgets."""

    update_text: Callable[[DocumentMirror], None]
    update_markers: Callable[[Sequence[Diagnostic]], None] = _noop
    update_tree: Callable[[Tuple[TreeNode, ...]], None] = _noop
    update_status: Callable[[str], None] = _noop
    log: Callable[[str], None] = _noop


@dataclass
class PendingValidation:
    deadline: float
    text: str
    generation: int


class DocumentEditorAdapter:
    """Debounces raw text edits and keeps host widgets in sync.

    Implements :class:`~toon_engine.document.DocumentSync`: hosts read
    snapshots with :meth:`pull_document` and submit typing through
    :meth:`push_host_edit`.

    Each text change cancels the pending validation and arms a new one; the
    host polls :meth:`process_timeouts` and only the latest generation ever
    reaches the engine.
    """

    def __init__(
        self,
        engine: DocumentEngine,
        hooks: EditorUIHooks,
        *,
        delay_ms: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.engine = engine
        self.hooks = hooks
        self.delay_ms = (
            engine.settings.validation_delay_ms if delay_ms is None else delay_ms
        )
        self._clock = clock
        self._pending: Optional[PendingValidation] = None
        self._generation = 0
        self._refresh_text()
        self._refresh_document()

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def pull_document(self) -> DocumentMirror:
        return self.engine.mirror()

    def push_host_edit(self, text: str) -> None:
        self.handle_text_change(text)

    def handle_text_change(self, text: str) -> None:
        self._generation += 1
        self._pending = PendingValidation(
            deadline=self._clock() + (self.delay_ms / 1000.0),
            text=text,
            generation=self._generation,
        )
        self._log_state("change ->", chars=len(text), generation=self._generation)

    def process_timeouts(self) -> bool:
        """Commit the pending text once its quiet period has elapsed."""

        pending = self._pending
        if pending is None or pending.deadline > self._clock():
            return False
        return self._commit(pending.generation)

    def flush(self) -> bool:
        if self._pending is None:
            return False
        return self._commit(self._pending.generation)

    def cancel(self) -> None:
        self._pending = None

    def dispose(self) -> None:
        self.cancel()
        self._log_state("dispose")

    def run(self, action: Callable[[DocumentEngine], EditResult]) -> EditResult:
        """Apply a structural edit after committing any pending typing."""

        self.flush()
        result = action(self.engine)
        self._log_state(
            "edit <-", label=result.label, status=result.status, message=result.message
        )
        if result.applied:
            self._refresh_text()
            self._refresh_document()
        else:
            self.hooks.update_status(f"{result.label}: {result.message or result.status}")
        return result

    def undo(self) -> bool:
        self.flush()
        return self._after_history(self.engine.undo())

    def redo(self) -> bool:
        self.flush()
        return self._after_history(self.engine.redo())

    def format(self) -> EditResult:
        return self.run(lambda engine: engine.format())

    def minify(self) -> EditResult:
        return self.run(lambda engine: engine.minify())

    def replace_all(
        self, find: str, replace: str, *, use_regex: bool = False, match_case: bool = False
    ) -> int:
        self.flush()
        count = self.engine.batch_replace(find, replace, use_regex, match_case)
        if count:
            self._refresh_text()
            self._refresh_document()
        self.hooks.update_status(f"{count} replacement(s)")
        return count

    def search(self, query: str) -> List[Path]:
        results = self.engine.set_search_query(query)
        self.hooks.update_status(f"{len(results)} match(es)" if query else "")
        return results

    def toggle_node(self, path: Sequence[str]) -> bool:
        expanded = self.engine.toggle_node(path)
        self.hooks.update_tree(self.engine.tree())
        return expanded

    def _commit(self, generation: int) -> bool:
        pending = self._pending
        if pending is None or pending.generation != generation:
            return False
        self._pending = None
        with telemetry.span(
            name="editor::validate",
            component=True,
            metadata={"document": self.engine.name, "generation": generation},
        ):
            self.engine.set_content(pending.text)
        self._refresh_document()
        return True

    def _after_history(self, moved: bool) -> bool:
        if moved:
            self._refresh_text()
            self._refresh_document()
        return moved

    def _refresh_text(self) -> None:
        self.hooks.update_text(self.pull_document())

    def _refresh_document(self) -> None:
        markers = build_markers(
            self.engine.document,
            indent_size=self.engine.settings.lint_indent_size,
            layout_checks=self.engine.codec.name == "toon",
        )
        self.hooks.update_markers(markers)
        self.hooks.update_tree(self.engine.tree())
        self.hooks.update_status(self._status_text())

    def _status_text(self) -> str:
        error = self.engine.document.first_error
        if error is not None:
            return f"Ln {error.line}, Col {error.column}: {error.message}"
        dirty = " (modified)" if self.engine.is_dirty else ""
        return f"{self.engine.codec.name} ok{dirty}"

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))

    def _state_metadata(self) -> Dict[str, object]:
        document = self.engine.document
        return {
            "document": self.engine.name,
            "version": document.version,
            "valid": document.is_valid,
            "pending": self.has_pending,
        }


__all__ = ["DocumentEditorAdapter", "EditorUIHooks", "PendingValidation"]
