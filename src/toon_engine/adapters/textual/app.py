"""Executable Textual app that hosts the document engine."""

from __future__ import annotations

import argparse
import os
from pathlib import Path as FilePath
from typing import Optional, Sequence, Tuple

try:  # pragma: no cover - imported only when the app is run
    from textual.app import App, ComposeResult
    from textual.containers import Horizontal
    from textual.widgets import Footer, Header, Static, TextArea, Tree
    from textual.widgets.tree import TreeNode as WidgetNode
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' extra to use toon_engine.adapters.textual.app"
    ) from exc

from toon_engine.codec import Codec, JsonCodec, ToonCodec
from toon_engine.config import EngineSettings
from toon_engine.diagnostics import Diagnostic, Severity
from toon_engine.document import DocumentEngine, DocumentMirror
from toon_engine.document.values import leaf_text
from toon_engine.projection import TreeNode
from toon_engine.runtime import telemetry

from .controller import DocumentEditorAdapter, EditorUIHooks


def create_engine(
    *, codec: Optional[Codec] = None, settings: Optional[EngineSettings] = None
) -> DocumentEngine:
    resolved = settings or EngineSettings.from_env()
    return DocumentEngine(
        name="tui",
        codec=codec or ToonCodec(indent=resolved.indent),
        settings=resolved,
    )


class ToonEditorApp(App[None]):
    """Source pane, outline tree, and a status line."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#panes {
		height: 1fr;
	}

	#source {
		width: 3fr;
		border: round $accent;
	}

	#outline {
		width: 2fr;
		border: round $accent;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("f2", "save", "Save"),
        ("f5", "undo_document", "Undo"),
        ("f6", "redo_document", "Redo"),
        ("f7", "format_document", "Format"),
        ("f4", "minify_document", "Minify"),
        ("f8", "expand_all", "Expand"),
        ("f9", "collapse_all", "Collapse"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        *,
        engine: Optional[DocumentEngine] = None,
        file_path: Optional[FilePath] = None,
        poll_interval: float = 0.05,
    ) -> None:
        super().__init__()
        self.engine = engine or create_engine()
        self.adapter: DocumentEditorAdapter | None = None
        self._file_path = file_path
        self._poll_interval = poll_interval
        self._source: TextArea | None = None
        self._outline: Tree[Tuple[str, ...]] | None = None
        self._status: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Horizontal(id="panes"):
            self._source = TextArea("", id="source")
            yield self._source
            self._outline = Tree("document", id="outline")
            yield self._outline
        self._status = Static("", id="status-line")
        yield self._status
        yield Footer()

    def on_mount(self) -> None:
        if self._file_path is not None and self._file_path.exists():
            self.engine.set_content(self._file_path.read_text(encoding="utf-8"))
            self.engine.set_file_name(self._file_path.name)
            self.engine.mark_clean()
        hooks = EditorUIHooks(
            update_text=self._update_text,
            update_markers=self._update_markers,
            update_tree=self._update_tree,
            update_status=self._update_status,
        )
        self.adapter = DocumentEditorAdapter(self.engine, hooks)
        self.set_interval(self._poll_interval, self._process_timeouts)

    def on_unmount(self) -> None:
        if self.adapter:
            self.adapter.dispose()

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        if not self.adapter:
            return
        text = event.text_area.text
        if text == self.engine.text and not self.adapter.has_pending:
            return
        self.adapter.push_host_edit(text)

    def on_tree_node_expanded(self, event: Tree.NodeExpanded) -> None:
        path = event.node.data
        if path is not None and path not in self.engine.view.expansion:
            self.engine.toggle_node(path)

    def on_tree_node_collapsed(self, event: Tree.NodeCollapsed) -> None:
        path = event.node.data
        if path is not None and path in self.engine.view.expansion:
            self.engine.toggle_node(path)

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        self.engine.select_node(event.node.data)

    def action_save(self) -> None:
        if self.adapter:
            self.adapter.flush()
        if self._file_path is None:
            self._update_status("No file to save to")
            return
        self._file_path.write_text(self.engine.text, encoding="utf-8")
        self.engine.mark_clean()
        self._update_status(f"Saved {self._file_path.name}")

    def action_undo_document(self) -> None:
        if self.adapter:
            self.adapter.undo()

    def action_redo_document(self) -> None:
        if self.adapter:
            self.adapter.redo()

    def action_format_document(self) -> None:
        if self.adapter:
            self.adapter.format()

    def action_minify_document(self) -> None:
        if self.adapter:
            self.adapter.minify()

    def action_expand_all(self) -> None:
        self.engine.expand_all()
        self._update_tree(self.engine.tree())

    def action_collapse_all(self) -> None:
        self.engine.collapse_all()
        self._update_tree(self.engine.tree())

    def _process_timeouts(self) -> None:
        if self.adapter:
            self.adapter.process_timeouts()

    def _update_text(self, mirror: DocumentMirror) -> None:
        if self._source and self._source.text != mirror.text:
            self._source.load_text(mirror.text)

    def _update_markers(self, markers: Sequence[Diagnostic]) -> None:
        errors = sum(1 for marker in markers if marker.severity is Severity.ERROR)
        warnings = len(markers) - errors
        if self._source:
            self._source.border_subtitle = f"{errors} error(s), {warnings} warning(s)"

    def _update_tree(self, nodes: Tuple[TreeNode, ...]) -> None:
        if not self._outline:
            return
        self._outline.clear()
        _populate(self._outline.root, nodes)
        self._outline.root.expand()

    def _update_status(self, status: str) -> None:
        if self._status:
            self._status.update(status)


def _populate(parent: WidgetNode, nodes: Sequence[TreeNode]) -> None:
    for node in nodes:
        if node.is_leaf:
            parent.add_leaf(f"{node.label}: {leaf_text(node.value)}", data=node.path)
            continue
        branch = parent.add(
            f"{node.label} ({node.type.value})", data=node.path, expand=node.expanded
        )
        _populate(branch, node.children or ())


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Edit a TOON document.")
    parser.add_argument("file", nargs="?", help="Document to open (optional)")
    parser.add_argument(
        "--codec",
        choices=("toon", "json"),
        default=None,
        help="Format of the document (default: from the file suffix, else toon)",
    )
    parser.add_argument(
        "--log-preset",
        default=os.environ.get("TOON_ENGINE_LOG_PRESET", "quiet"),
        help="telelog preset while the UI owns the terminal (default: quiet)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    telemetry.configure(preset=args.log_preset)
    file_path = FilePath(args.file) if args.file else None
    codec_name = args.codec or (
        "json" if file_path is not None and file_path.suffix == ".json" else "toon"
    )
    settings = EngineSettings.from_env()
    codec: Codec = (
        JsonCodec() if codec_name == "json" else ToonCodec(indent=settings.indent)
    )
    app = ToonEditorApp(
        engine=create_engine(codec=codec, settings=settings), file_path=file_path
    )
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
