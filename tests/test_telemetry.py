from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterator, List, Tuple

import pytest

from toon_engine.runtime import telemetry
from toon_engine.runtime.telemetry import PRESETS, LogSettings


def test_log_settings_from_env() -> None:
    settings = LogSettings.from_env(
        {
            "TOON_ENGINE_LOG_LEVEL": "debug",
            "TOON_ENGINE_DISABLE_CONSOLE": "1",
            "TOON_ENGINE_LOG_FILE": "engine.log",
            "TOON_ENGINE_LOG_BUFFERED": "yes",
        }
    )

    assert settings.level == "DEBUG"
    assert settings.console is False
    assert settings.log_file == "engine.log"
    assert settings.buffer_size == 2048


def test_log_settings_defaults() -> None:
    settings = LogSettings.from_env({})

    assert settings == LogSettings()


def test_quiet_preset_keeps_console_off() -> None:
    quiet = PRESETS["quiet"](LogSettings(log_file="tui.log"))

    assert quiet.console is False
    assert quiet.level == "ERROR"
    assert quiet.log_file == "tui.log"


def test_production_preset_always_writes_a_file() -> None:
    production = PRESETS["production"](LogSettings())

    assert production.log_file == "toon_engine.log"
    assert production.console is False


def test_configure_rejects_unknown_preset() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(preset="verbose")


def test_log_settings_ignore_bad_buffer_size() -> None:
    settings = LogSettings.from_env(
        {"TOON_ENGINE_LOG_BUFFERED": "1", "TOON_ENGINE_LOG_BUFFER_SIZE": "big"}
    )

    assert settings.buffer_size == 2048


class RecordingLogger:
    def __init__(self) -> None:
        self.context: Dict[str, str] = {}

    def add_context(self, key: str, value: str) -> None:
        self.context[key] = value

    def remove_context(self, key: str) -> None:
        self.context.pop(key, None)

    @contextmanager
    def track_component(self, name: str) -> Iterator[None]:
        yield

    @contextmanager
    def profile(self, name: str) -> Iterator[None]:
        yield

    def error_with(self, message: str, pairs: List[Tuple[str, str]]) -> None:
        pass


def test_nested_spans_restore_outer_context(monkeypatch: pytest.MonkeyPatch) -> None:
    log = RecordingLogger()
    monkeypatch.setattr(telemetry, "get_logger", lambda name=None: log)

    with telemetry.span("outer", metadata={"document": "a", "label": "format"}):
        with telemetry.span("inner", metadata={"document": "b"}):
            assert log.context == {"document": "b", "label": "format"}
        assert log.context == {"document": "a", "label": "format"}

    assert log.context == {}
