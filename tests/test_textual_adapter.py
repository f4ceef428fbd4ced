from __future__ import annotations

from typing import Any, Dict, List, Optional

from toon_engine.adapters.textual import DocumentEditorAdapter, EditorUIHooks
from toon_engine.codec import JsonCodec
from toon_engine.config import EngineSettings
from toon_engine.diagnostics import Diagnostic
from toon_engine.document import DocumentEngine, DocumentMirror, DocumentSync


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_engine(text: Optional[str] = None) -> DocumentEngine:
    engine = DocumentEngine(
        name="test", codec=JsonCodec(), settings=EngineSettings(validation_delay_ms=300)
    )
    if text is not None:
        engine.set_content(text)
    return engine


def make_adapter(
    engine: DocumentEngine, clock: FakeClock
) -> tuple[DocumentEditorAdapter, Dict[str, List[Any]]]:
    captured: Dict[str, List[Any]] = {
        "text": [],
        "markers": [],
        "tree": [],
        "status": [],
        "log": [],
    }

    def update_text(mirror: DocumentMirror) -> None:
        captured["text"].append(mirror.text)

    def update_markers(markers: List[Diagnostic]) -> None:
        captured["markers"].append(list(markers))

    hooks = EditorUIHooks(
        update_text=update_text,
        update_markers=update_markers,
        update_tree=lambda nodes: captured["tree"].append(nodes),
        update_status=lambda status: captured["status"].append(status),
        log=lambda line: captured["log"].append(line),
    )
    return DocumentEditorAdapter(engine, hooks, clock=clock), captured


def test_adapter_publishes_initial_state() -> None:
    adapter, captured = make_adapter(make_engine('{"a": 1}'), FakeClock())

    assert captured["text"] == ['{"a": 1}']
    assert captured["markers"] == [[]]
    assert [node.id for node in captured["tree"][-1]] == ["a"]
    assert captured["status"][-1] == "json ok (modified)"
    assert adapter.has_pending is False


def test_adapter_debounces_text_changes() -> None:
    clock = FakeClock()
    engine = make_engine()
    adapter, captured = make_adapter(engine, clock)

    adapter.handle_text_change('{"a"')
    clock.advance(0.2)
    adapter.handle_text_change('{"a": 1}')
    clock.advance(0.2)

    assert adapter.process_timeouts() is False
    assert engine.text == ""

    clock.advance(0.2)
    assert adapter.process_timeouts() is True
    assert engine.text == '{"a": 1}'
    assert engine.value == {"a": 1}
    assert [snap.content for snap in engine.history.snapshots()] == ['{"a": 1}']
    assert adapter.has_pending is False
    assert adapter.process_timeouts() is False
    assert any(line.startswith("change ->") for line in captured["log"])


def test_adapter_reports_errors_in_status_and_markers() -> None:
    clock = FakeClock()
    adapter, captured = make_adapter(make_engine(), clock)

    adapter.handle_text_change('{"a": }')
    clock.advance(1.0)
    adapter.process_timeouts()

    assert captured["status"][-1].startswith("Ln 1, Col 7: ")
    (marker,) = captured["markers"][-1]
    assert marker.line == 1
    assert marker.end_column == len('{"a": }') + 1
    assert captured["tree"][-1] == ()


def test_flush_commits_immediately() -> None:
    engine = make_engine()
    adapter, _ = make_adapter(engine, FakeClock())

    adapter.handle_text_change("[1]")

    assert adapter.flush() is True
    assert engine.value == [1]
    assert adapter.flush() is False


def test_cancel_drops_pending_text() -> None:
    clock = FakeClock()
    engine = make_engine("[]")
    adapter, _ = make_adapter(engine, clock)

    adapter.handle_text_change("[1]")
    adapter.cancel()
    clock.advance(5)

    assert adapter.process_timeouts() is False
    assert engine.text == "[]"


def test_structural_edit_flushes_pending_typing() -> None:
    engine = make_engine()
    adapter, captured = make_adapter(engine, FakeClock())

    adapter.handle_text_change('{"a": 1}')
    result = adapter.run(lambda e: e.add_node((), 2, key="b"))

    assert result.applied is True
    assert engine.value == {"a": 1, "b": 2}
    assert captured["text"][-1] == engine.text
    assert len(engine.history) == 2


def test_failed_edit_reports_status_only() -> None:
    engine = make_engine('{"a": 1}')
    adapter, captured = make_adapter(engine, FakeClock())
    texts_before = len(captured["text"])

    result = adapter.run(lambda e: e.delete_node(("missing",)))

    assert result.applied is False
    assert len(captured["text"]) == texts_before
    assert captured["status"][-1].startswith("delete_node: ")


def test_undo_and_redo_refresh_host() -> None:
    engine = make_engine("[1]")
    engine.set_content("[1, 2]")
    adapter, captured = make_adapter(engine, FakeClock())

    assert adapter.undo() is True
    assert captured["text"][-1] == "[1]"
    assert adapter.redo() is True
    assert captured["text"][-1] == "[1, 2]"
    assert adapter.redo() is False


def test_replace_all_and_search_update_status() -> None:
    engine = make_engine('{"name": "ada"}')
    adapter, captured = make_adapter(engine, FakeClock())

    assert adapter.replace_all("ada", "grace") == 1
    assert captured["status"][-1] == "1 replacement(s)"
    assert engine.value == {"name": "grace"}

    assert adapter.search("NAME") == [("name",)]
    assert captured["status"][-1] == "1 match(es)"


def test_format_and_toggle_node() -> None:
    engine = make_engine('{"a":{"b":1}}')
    adapter, captured = make_adapter(engine, FakeClock())

    assert adapter.format().applied is True
    assert captured["text"][-1] == '{\n  "a": {\n    "b": 1\n  }\n}'

    assert adapter.toggle_node(("a",)) is True
    assert captured["tree"][-1][0].expanded is True


def test_dispose_cancels_pending() -> None:
    adapter, captured = make_adapter(make_engine(), FakeClock())

    adapter.handle_text_change("1")
    adapter.dispose()

    assert adapter.has_pending is False
    assert captured["log"][-1].startswith("dispose")


def test_adapter_is_a_document_sync() -> None:
    clock = FakeClock()
    engine = make_engine('{"a": 1}')
    adapter, _ = make_adapter(engine, clock)

    assert isinstance(adapter, DocumentSync)
    adapter.push_host_edit('{"a": 2}')
    assert adapter.pull_document().text == '{"a": 1}'

    clock.advance(1.0)
    adapter.process_timeouts()

    mirror = adapter.pull_document()
    assert mirror.text == '{"a": 2}'
    assert mirror.attributes["codec"] == "json"


def test_minify_refreshes_host_text() -> None:
    engine = make_engine('{\n  "a": [1, 2]\n}')
    adapter, captured = make_adapter(engine, FakeClock())

    assert adapter.minify().applied is True
    assert captured["text"][-1] == '{"a":[1,2]}'
