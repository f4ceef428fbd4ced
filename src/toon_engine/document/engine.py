"""Document state engine: authoritative text, parsed value, edits, history."""

from __future__ import annotations

import re
from contextlib import AbstractContextManager
from dataclasses import dataclass
from enum import Enum
from re import Pattern
from typing import Any, Callable, ContextManager, Dict, List, Optional, Sequence, Tuple

from toon_engine.codec import Codec, ToonCodec
from toon_engine.config import EngineSettings
from toon_engine.errors import (
    EncodeFailure,
    FormatError,
    PathResolutionFailure,
    PatternError,
    ToonEngineError,
)
from toon_engine.projection.tree import TreeNode
from toon_engine.projection.view import ViewState
from toon_engine.runtime import telemetry

from . import paths
from .document import Document, DocumentErrorEntry
from .history import History
from .sync import DocumentMirror
from .values import MISSING, UNPARSED, NodeType, Path, classify, clone

LINE_RE = re.compile(r"\bline\s+(\d+)", re.IGNORECASE)
COLUMN_RE = re.compile(r"\bcol(?:umn)?\s+(\d+)", re.IGNORECASE)

EditFn = Callable[[Any], Tuple[Any, Path]]


class MovePosition(str, Enum):
    INSIDE = "inside"
    BEFORE = "before"
    AFTER = "after"


@dataclass(slots=True)
class EditResult:
    """Outcome of a structural edit.

    ``path`` is where the edited node lives after the edit (or the path that
    failed to resolve).
    """

    applied: bool
    label: str
    status: str = "ok"
    message: Optional[str] = None
    path: Optional[Path] = None

    def __bool__(self) -> bool:
        return self.applied


class _EditRejected(ToonEngineError):
    def __init__(self, status: str, message: str) -> None:
        super().__init__(message)
        self.status = status


def error_position(error: FormatError) -> Tuple[int, int]:
    """Best-effort 1-based (line, column) for a decode failure."""

    line = error.line or _first_int(LINE_RE, error.message) or 1
    column = error.column or _first_int(COLUMN_RE, error.message) or 1
    return line, column


def _first_int(pattern: Pattern[str], text: str) -> Optional[int]:
    match = pattern.search(text)
    return int(match.group(1)) if match else None


def unique_copy_key(container: Dict[str, Any], key: str) -> str:
    candidate = f"{key}_copy"
    counter = 1
    while candidate in container:
        candidate = f"{key}_copy_{counter}"
        counter += 1
    return candidate


def _rebuild(
    container: Dict[str, Any],
    entries: Sequence[Tuple[str, Any]],
) -> None:
    container.clear()
    container.update(entries)


def _rename_key(container: Dict[str, Any], old: str, new: str, value: Any) -> None:
    _rebuild(
        container,
        [(new, value) if key == old else (key, item) for key, item in container.items()],
    )


def _insert_key(
    container: Dict[str, Any], anchor: str, key: str, value: Any, *, after: bool
) -> None:
    entries: List[Tuple[str, Any]] = []
    for existing, item in container.items():
        if existing == anchor and not after:
            entries.append((key, value))
        entries.append((existing, item))
        if existing == anchor and after:
            entries.append((key, value))
    _rebuild(container, entries)


class Transaction(AbstractContextManager["Transaction"]):
    """Telemetry span around one engine operation."""

    def __init__(
        self,
        engine: "DocumentEngine",
        label: str,
        *,
        metadata: Optional[Dict[str, object]] = None,
    ) -> None:
        self.engine = engine
        self.label = label
        self.metadata = dict(metadata or {})
        self._span_cm: Optional[ContextManager[telemetry.SpanHandle]] = None
        self._handle: Optional[telemetry.SpanHandle] = None

    def __enter__(self) -> "Transaction":
        self._span_cm = telemetry.span(
            name=f"document::{self.label}",
            component=True,
            metadata={"document": self.engine.name, **self.metadata},
        )
        self._handle = self._span_cm.__enter__()
        return self

    def note(self, key: str, value: object) -> None:
        if self._handle is not None:
            self._handle.add_metadata(key, value)

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False


class DocumentEngine:
    """Owns a :class:`Document` and every operation that changes it.

    Text and value are only ever replaced together: raw edits decode the new
    text, structural edits encode a modified copy of the value and decode the
    result before committing. Failed edits leave the document untouched and
    report through :class:`EditResult` instead of raising.
    """

    def __init__(
        self,
        *,
        name: str = "default",
        codec: Optional[Codec] = None,
        history: Optional[History] = None,
        settings: Optional[EngineSettings] = None,
        view: Optional[ViewState] = None,
    ) -> None:
        self.name = name
        self.settings = settings or EngineSettings.from_env()
        self.codec: Codec = codec or ToonCodec(indent=self.settings.indent)
        self.history = history or History(self.settings.history_limit)
        self.view = view or ViewState()
        self.document = Document()

    @classmethod
    def from_text(cls, text: str, **kwargs: Any) -> "DocumentEngine":
        engine = cls(**kwargs)
        engine.set_content(text)
        return engine

    # -- read side -----------------------------------------------------

    @property
    def text(self) -> str:
        return self.document.raw_text

    @property
    def value(self) -> Any:
        return self.document.value

    @property
    def is_valid(self) -> bool:
        return self.document.is_valid

    @property
    def errors(self) -> Tuple[DocumentErrorEntry, ...]:
        return tuple(self.document.errors)

    @property
    def is_dirty(self) -> bool:
        return self.document.is_dirty

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo()

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo()

    @property
    def formatted_content(self) -> str:
        if not self.document.has_value:
            return self.document.raw_text
        try:
            return self.codec.encode(self.document.value, indent=self.settings.indent)
        except EncodeFailure:
            return self.document.raw_text

    @property
    def minified_content(self) -> str:
        if not self.document.has_value:
            return self.document.raw_text
        try:
            return self.codec.encode_compact(self.document.value)
        except EncodeFailure:
            return self.document.raw_text

    @property
    def compare_content(self) -> str:
        return self.view.compare_text

    @property
    def search_results(self) -> List[Path]:
        return self.view.search_results(self.document.value)

    def get(self, path: Sequence[str]) -> Any:
        if not self.document.has_value:
            return MISSING
        return paths.get(self.document.value, tuple(path))

    def tree(self) -> Tuple[TreeNode, ...]:
        return self.view.tree(self.document.value)

    def mirror(self, *, attributes: Optional[dict[str, str]] = None) -> DocumentMirror:
        merged = {"codec": self.codec.name, "file_name": self.document.file_name}
        merged.update(attributes or {})
        return DocumentMirror(
            text=self.document.raw_text,
            version=self.document.version,
            is_valid=self.document.is_valid,
            is_dirty=self.document.is_dirty,
            errors=tuple(self.document.errors),
            selected_path=self.view.selected_path,
            attributes=merged,
        )

    # -- raw text ------------------------------------------------------

    def set_content(self, text: str, record_history: bool = True) -> Document:
        with Transaction(self, "set_content", metadata={"chars": len(text)}):
            self._load(text)
            self.document.is_dirty = True
            if record_history:
                self._record(text)
        return self.document

    def validate_and_parse(self) -> bool:
        document = self.document
        document.errors = []
        if not document.raw_text.strip():
            document.value = UNPARSED
            document.is_valid = True
            return True
        try:
            value = self.codec.decode(document.raw_text, strict=self.settings.strict)
        except FormatError as exc:
            line, column = error_position(exc)
            document.value = UNPARSED
            document.is_valid = False
            document.errors = [
                DocumentErrorEntry(line=line, column=column, message=exc.message)
            ]
            telemetry.record_event(
                "document.format_error",
                level="debug",
                data={"document": self.name, "line": line, "column": column},
            )
            return False
        document.value = value
        document.is_valid = True
        return True

    def format(self) -> EditResult:
        return self._rewrite(
            "format",
            lambda value: self.codec.encode(value, indent=self.settings.indent),
        )

    def minify(self) -> EditResult:
        return self._rewrite("minify", self.codec.encode_compact)

    def set_compare_content(self, text: str) -> None:
        self.view.compare_text = text

    def clear(self) -> None:
        with Transaction(self, "clear"):
            self.document.reset()
            self.view.reset()

    def mark_clean(self) -> None:
        self.document.is_dirty = False

    def set_file_name(self, name: str) -> None:
        self.document.file_name = name

    # -- history -------------------------------------------------------

    def undo(self) -> bool:
        with Transaction(self, "undo"):
            snapshot = self.history.undo()
            if snapshot is None:
                return False
            self._load(snapshot.content)
            return True

    def redo(self) -> bool:
        with Transaction(self, "redo"):
            snapshot = self.history.redo()
            if snapshot is None:
                return False
            self._load(snapshot.content)
            return True

    # -- find / replace ------------------------------------------------

    def count_matches(
        self, find: str, use_regex: bool = False, match_case: bool = False
    ) -> int:
        if not find or not self.document.raw_text:
            return 0
        try:
            pattern = self._compile(find, use_regex, match_case)
        except PatternError as exc:
            self._pattern_failed(exc)
            return 0
        return sum(1 for _ in pattern.finditer(self.document.raw_text))

    def batch_replace(
        self,
        find: str,
        replace: str,
        use_regex: bool = False,
        match_case: bool = False,
    ) -> int:
        """Replace every match of ``find`` and return the match count.

        The count is returned even when the replacement itself cannot be
        applied, so callers can preview before committing.
        """

        with Transaction(
            self, "batch_replace", metadata={"regex": use_regex, "match_case": match_case}
        ) as tx:
            if not find or not self.document.raw_text:
                return 0
            try:
                pattern = self._compile(find, use_regex, match_case)
            except PatternError as exc:
                self._pattern_failed(exc)
                return 0
            raw = self.document.raw_text
            count = sum(1 for _ in pattern.finditer(raw))
            tx.note("matches", count)
            if count == 0:
                return 0
            replacement: Any = replace if use_regex else (lambda _match: replace)
            try:
                updated = pattern.sub(replacement, raw)
            except (re.error, IndexError) as exc:
                self._pattern_failed(PatternError(str(exc), pattern=find))
                return count
            self.set_content(updated)
            return count

    # -- structural edits ----------------------------------------------

    def add_node(
        self, path: Sequence[str], value: Any, key: Optional[str] = None
    ) -> EditResult:
        target_path = paths.to_path(path)

        def seed(_root: Any) -> Tuple[Any, Path]:
            if key is not None:
                return {key: clone(value)}, (key,)
            return clone(value), ()

        def add(root: Any) -> Tuple[Any, Path]:
            target = self._resolve(root, target_path)
            kind = classify(target)
            if kind is NodeType.OBJECT:
                if key is None:
                    raise _EditRejected("key_required", "objects need a key for new entries")
                if key in target:
                    raise _EditRejected("key_exists", f"key '{key}' already exists")
                target[key] = clone(value)
                return root, target_path + (key,)
            if kind is NodeType.ARRAY:
                target.append(clone(value))
                return root, target_path + (str(len(target) - 1),)
            raise _EditRejected("not_container", f"{kind.value} cannot hold children")

        edit = add if self.document.has_value else seed
        return self._apply("add_node", edit, path=target_path)

    def edit_node(
        self, path: Sequence[str], new_value: Any, new_key: Optional[str] = None
    ) -> EditResult:
        target_path = paths.to_path(path)

        def edit(root: Any) -> Tuple[Any, Path]:
            if not target_path:
                if new_key is not None:
                    raise _EditRejected("invalid_rename", "the root has no key")
                return clone(new_value), ()
            self._resolve(root, target_path)
            parent = paths.parent_of(root, target_path)
            old_key = target_path[-1]
            if (
                new_key is not None
                and new_key != old_key
                and classify(parent) is NodeType.OBJECT
            ):
                if new_key in parent:
                    raise _EditRejected("key_exists", f"key '{new_key}' already exists")
                _rename_key(parent, old_key, new_key, clone(new_value))
                return root, target_path[:-1] + (new_key,)
            paths.set(root, target_path, clone(new_value))
            return root, target_path

        return self._apply("edit_node", edit, path=target_path, require_value=True)

    def delete_node(self, path: Sequence[str]) -> EditResult:
        target_path = paths.to_path(path)

        def delete(root: Any) -> Tuple[Any, Path]:
            if not target_path:
                raise _EditRejected("root_path", "the document root cannot be deleted")
            if not paths.delete(root, target_path):
                raise PathResolutionFailure(
                    f"nothing at '{paths.join_path(target_path)}'", path=target_path
                )
            return root, target_path[:-1]

        return self._apply("delete_node", delete, path=target_path, require_value=True)

    def duplicate_node(self, path: Sequence[str]) -> EditResult:
        target_path = paths.to_path(path)

        def duplicate(root: Any) -> Tuple[Any, Path]:
            if not target_path:
                raise _EditRejected("root_path", "the document root cannot be duplicated")
            source = self._resolve(root, target_path)
            parent = paths.parent_of(root, target_path)
            anchor = target_path[-1]
            if classify(parent) is NodeType.ARRAY:
                index = int(anchor) + 1
                parent.insert(index, clone(source))
                return root, target_path[:-1] + (str(index),)
            copy_key = unique_copy_key(parent, anchor)
            _insert_key(parent, anchor, copy_key, clone(source), after=True)
            return root, target_path[:-1] + (copy_key,)

        return self._apply(
            "duplicate_node", duplicate, path=target_path, require_value=True
        )

    def move_node(
        self,
        from_path: Sequence[str],
        to_path: Sequence[str],
        position: MovePosition | str = MovePosition.INSIDE,
    ) -> EditResult:
        """Detach the node at ``from_path`` and re-insert it relative to ``to_path``.

        ``to_path`` is resolved against the tree after the source has been
        removed, so indices after the source in the same array shift down.
        """

        source_path = paths.to_path(from_path)
        target_path = paths.to_path(to_path)
        where = MovePosition(position)

        def move(root: Any) -> Tuple[Any, Path]:
            if not source_path:
                raise _EditRejected("root_path", "the document root cannot be moved")
            if paths.is_ancestor(source_path, target_path):
                raise _EditRejected(
                    "invalid_move", "a node cannot be moved into itself or a descendant"
                )
            moving = self._resolve(root, source_path)
            source_key = source_path[-1]
            paths.delete(root, source_path)
            target = self._resolve(root, target_path)

            if where is MovePosition.INSIDE:
                kind = classify(target)
                if kind is NodeType.ARRAY:
                    target.append(moving)
                    return root, target_path + (str(len(target) - 1),)
                if kind is NodeType.OBJECT:
                    if source_key in target:
                        raise _EditRejected(
                            "key_exists", f"key '{source_key}' already exists"
                        )
                    target[source_key] = moving
                    return root, target_path + (source_key,)
                raise _EditRejected("not_container", f"{kind.value} cannot hold children")

            if not target_path:
                raise _EditRejected("root_path", "nothing can be placed beside the root")
            parent = paths.parent_of(root, target_path)
            anchor = target_path[-1]
            after = where is MovePosition.AFTER
            if classify(parent) is NodeType.ARRAY:
                index = int(anchor) + (1 if after else 0)
                parent.insert(index, moving)
                return root, target_path[:-1] + (str(index),)
            if source_key in parent:
                raise _EditRejected("key_exists", f"key '{source_key}' already exists")
            _insert_key(parent, anchor, source_key, moving, after=after)
            return root, target_path[:-1] + (source_key,)

        return self._apply(
            "move_node",
            move,
            path=source_path,
            require_value=True,
            metadata={"to": paths.join_path(target_path), "position": where.value},
        )

    def sync_content_from_data(
        self, value: Any, *, label: str = "sync", path: Optional[Path] = None
    ) -> EditResult:
        """Adopt ``value`` as the document, re-deriving text through the codec.

        The encoded text is decoded again before anything is committed; on any
        codec failure the document keeps its previous text and value.
        """

        try:
            text = self.codec.encode(value, indent=self.settings.indent)
            decoded = (
                self.codec.decode(text, strict=self.settings.strict)
                if text.strip()
                else UNPARSED
            )
        except (EncodeFailure, FormatError) as exc:
            return self._encode_failed(label, exc)

        document = self.document
        document.raw_text = text
        document.value = decoded
        document.is_valid = True
        document.errors = []
        document.is_dirty = True
        document.version += 1
        self._record(text)
        return EditResult(True, label, path=path)

    # -- view state ----------------------------------------------------

    def toggle_node(self, path: Sequence[str]) -> bool:
        return self.view.expansion.toggle(tuple(path))

    def expand_all(self) -> None:
        if self.document.has_value:
            self.view.expansion.expand_all(self.document.value)

    def collapse_all(self) -> None:
        self.view.expansion.collapse_all()

    def select_node(self, path: Optional[Sequence[str]]) -> None:
        self.view.select(path)

    def set_search_query(self, query: str) -> List[Path]:
        self.view.search_query = query
        return self.search_results

    # -- internals -----------------------------------------------------

    def _load(self, text: str) -> None:
        self.document.raw_text = text
        self.document.version += 1
        self.validate_and_parse()

    def _rewrite(self, label: str, encode: Callable[[Any], str]) -> EditResult:
        with Transaction(self, label):
            if not (self.document.is_valid and self.document.has_value):
                return EditResult(False, label, status="no_value")
            try:
                text = encode(self.document.value)
            except EncodeFailure as exc:
                return self._encode_failed(label, exc)
            self.set_content(text)
            return EditResult(True, label, path=())

    def _record(self, text: str) -> None:
        current = self.history.current
        if current is None or current.content != text:
            self.history.record(text)

    def _resolve(self, root: Any, path: Path) -> Any:
        found = paths.get(root, path)
        if found is MISSING:
            raise PathResolutionFailure(
                f"nothing at '{paths.join_path(path)}'", path=path
            )
        return found

    def _apply(
        self,
        label: str,
        edit: EditFn,
        *,
        path: Path,
        require_value: bool = False,
        metadata: Optional[Dict[str, object]] = None,
    ) -> EditResult:
        meta = {"path": paths.join_path(path), **(metadata or {})}
        with Transaction(self, label, metadata=meta) as tx:
            if not self.document.is_valid:
                tx.note("status", "invalid_document")
                return EditResult(
                    False,
                    label,
                    status="invalid_document",
                    message="fix the text before editing the tree",
                    path=path,
                )
            if require_value and not self.document.has_value:
                return self._path_failed(
                    label, PathResolutionFailure("the document is empty", path=path)
                )
            working = clone(self.document.value)
            try:
                updated, result_path = edit(working)
            except PathResolutionFailure as exc:
                return self._path_failed(label, exc)
            except _EditRejected as exc:
                tx.note("status", exc.status)
                return EditResult(False, label, status=exc.status, message=str(exc), path=path)
            result = self.sync_content_from_data(updated, label=label, path=result_path)
            tx.note("status", result.status)
            return result

    def _compile(self, find: str, use_regex: bool, match_case: bool) -> Pattern[str]:
        flags = 0 if match_case else re.IGNORECASE
        source = find if use_regex else re.escape(find)
        try:
            return re.compile(source, flags)
        except re.error as exc:
            raise PatternError(str(exc), pattern=find) from exc

    def _pattern_failed(self, exc: PatternError) -> None:
        telemetry.record_event(
            "document.pattern_error",
            level="warning",
            data={"document": self.name, "pattern": exc.pattern, "reason": str(exc)},
        )

    def _path_failed(self, label: str, exc: PathResolutionFailure) -> EditResult:
        telemetry.record_event(
            "document.path_resolution",
            level="warning",
            data={"operation": label, "path": paths.join_path(exc.path)},
        )
        return EditResult(
            False, label, status="path_not_found", message=str(exc), path=exc.path
        )

    def _encode_failed(self, label: str, exc: ToonEngineError) -> EditResult:
        telemetry.record_event(
            "document.encode_failure",
            level="warning",
            data={"operation": label, "reason": str(exc)},
        )
        return EditResult(False, label, status="encode_failed", message=str(exc))


__all__ = [
    "DocumentEngine",
    "EditResult",
    "MovePosition",
    "Transaction",
    "error_position",
    "unique_copy_key",
]
