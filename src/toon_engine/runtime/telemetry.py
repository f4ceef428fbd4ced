"""Structured logging and span profiling on top of telelog.

Nothing else in the package imports telelog; engine code calls:

``configure(...)`` -- swap the active telelog configuration (or a preset)
``get_logger(name)`` -- cached, configured ``telelog.Logger``
``record_event(name, ...)`` -- one ``event::<name>`` line with a key/value payload
``span(name, ...)`` -- profile a block and optionally track it as a component

Environment knobs share the ``TOON_ENGINE_`` prefix used by
:class:`toon_engine.config.EngineSettings`.
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple, cast

import telelog  # type: ignore[import]

from toon_engine.config import ENV_PREFIX

tl = cast(Any, telelog)

DEFAULT_LOGGER_NAME = "toon_engine"

_LOGGERS: Dict[str, Any] = {}
_CONFIG: Optional[Any] = None
# Context values each logger currently carries, keyed by logger identity.
_CONTEXT: Dict[int, Dict[str, str]] = {}

Pairs = List[Tuple[str, str]]


def _text(value: Any) -> str:
    if isinstance(value, (dict, list, tuple, set, frozenset)):
        return repr(value)
    return value if isinstance(value, str) else str(value)


def _pairs(payload: Mapping[str, Any]) -> Pairs:
    return [(str(key), _text(value)) for key, value in payload.items()]


@dataclass(frozen=True, slots=True)
class LogSettings:
    """Logging switches read from ``TOON_ENGINE_*`` variables."""

    level: str = "INFO"
    console: bool = True
    color: bool = True
    json: bool = False
    log_file: str = ""
    buffer_size: Optional[int] = None
    logger_name: str = DEFAULT_LOGGER_NAME

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "LogSettings":
        source = os.environ if env is None else env

        def read(key: str) -> Optional[str]:
            return source.get(f"{ENV_PREFIX}{key}")

        def flag(key: str) -> bool:
            return (read(key) or "").lower() in {"1", "true", "yes", "on"}

        def number(key: str, fallback: int) -> int:
            try:
                return int(read(key) or fallback)
            except ValueError:
                return fallback

        buffer_size: Optional[int] = None
        if flag("LOG_BUFFERED"):
            buffer_size = number("LOG_BUFFER_SIZE", 2048)
        return cls(
            level=(read("LOG_LEVEL") or "INFO").upper(),
            console=not flag("DISABLE_CONSOLE"),
            color=not flag("NO_COLOR"),
            json=flag("LOG_JSON"),
            log_file=read("LOG_FILE") or "",
            buffer_size=buffer_size,
            logger_name=read("LOGGER") or DEFAULT_LOGGER_NAME,
        )


def build_config(settings: LogSettings) -> Any:
    config = tl.Config()
    config.with_min_level(settings.level)
    config.with_console_output(settings.console)
    if settings.console:
        config.with_colored_output(settings.color)
    if settings.json:
        config.with_json_format(True)
    if settings.log_file:
        config.with_file_output(settings.log_file)
    if settings.buffer_size is not None:
        config.with_buffering(True)
        config.with_buffer_size(settings.buffer_size)
    config.with_profiling(True)
    return config


def _development(settings: LogSettings) -> LogSettings:
    return LogSettings(
        level="DEBUG", console=True, color=True, logger_name=settings.logger_name
    )


def _production(settings: LogSettings) -> LogSettings:
    return LogSettings(
        level="INFO",
        console=False,
        log_file=settings.log_file or "toon_engine.log",
        buffer_size=settings.buffer_size or 2048,
        logger_name=settings.logger_name,
    )


def _quiet(settings: LogSettings) -> LogSettings:
    # The TUI owns the terminal, so only a log file may receive output.
    return LogSettings(
        level="ERROR",
        console=False,
        log_file=settings.log_file,
        logger_name=settings.logger_name,
    )


PRESETS: Dict[str, Callable[[LogSettings], LogSettings]] = {
    "development": _development,
    "production": _production,
    "quiet": _quiet,
}


def configure(*, config: Optional[Any] = None, preset: Optional[str] = None) -> None:
    """Adopt a telelog configuration and drop cached loggers.

    Pass either an explicit ``telelog.Config`` or the name of one of
    :data:`PRESETS`; with neither, settings come from the environment.
    """

    global _CONFIG
    if config is not None and preset:
        raise ValueError("Provide either `config` or `preset`, not both.")
    if config is None:
        settings = LogSettings.from_env()
        if preset:
            try:
                settings = PRESETS[preset.lower()](settings)
            except KeyError:
                raise ValueError(f"Unknown preset '{preset}'.") from None
        config = build_config(settings)
    else:
        config.with_profiling(True)
    _CONFIG = config
    _LOGGERS.clear()
    _CONTEXT.clear()


def get_logger(name: Optional[str] = None) -> Any:
    """Return the cached ``telelog.Logger`` for ``name``."""

    if _CONFIG is None:
        configure()
    logger_name = name or LogSettings.from_env().logger_name
    logger = _LOGGERS.get(logger_name)
    if logger is None:
        logger = tl.Logger.with_config(logger_name, _CONFIG)
        _LOGGERS[logger_name] = logger
    return logger


def _emit(logger: Any, level: str, message: str, payload: Mapping[str, Any]) -> None:
    name = str(level).lower()
    structured = getattr(logger, f"{name}_with", None)
    if structured is not None:
        structured(message, _pairs(payload))
        return
    plain = getattr(logger, name, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    plain(f"{message} {dict(payload)}")


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Log ``event::<name>`` with ``data`` as key/value pairs."""

    _emit(get_logger(logger_name), level, f"event::{name}", {"event": name, **(data or {})})


@dataclass
class SpanHandle:
    """Yielded by :func:`span`; metadata added here rides on failure reports."""

    logger: Any
    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _text(value)

    def fail(self, reason: str) -> None:
        payload: Dict[str, Any] = {"span": self.span_name, **self.metadata}
        if self.component_name:
            payload["component"] = self.component_name
        payload["reason"] = reason
        _emit(self.logger, "error", "span::fail", payload)


def _push_context(log: Any, key: str, value: str) -> Callable[[], None]:
    """Set ``key`` on ``log`` and return a callback restoring the prior value."""

    active = _CONTEXT.setdefault(id(log), {})
    previous = active.get(key)
    active[key] = value
    log.add_context(key, value)

    def restore() -> None:
        if previous is None:
            active.pop(key, None)
            log.remove_context(key)
        else:
            active[key] = previous
            log.add_context(key, previous)

    return restore


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile the enclosed block under ``name``.

    ``component=True`` also tracks the block as a telelog component of the
    same name (a string picks another name). ``metadata`` is pushed as logger
    context for the duration of the block.
    """

    log = get_logger(logger_name)
    component_name = name if component is True else (component or None)
    context = {key: _text(value) for key, value in (metadata or {}).items()}
    handle = SpanHandle(
        logger=log, span_name=name, component_name=component_name, metadata=dict(context)
    )

    with ExitStack() as stack:
        for key, value in context.items():
            stack.callback(_push_context(log, key, value))
        if component_name:
            stack.enter_context(log.track_component(component_name))
        stack.enter_context(log.profile(name))
        try:
            yield handle
        except Exception as exc:
            handle.fail(str(exc))
            raise


configure()

__all__ = [
    "LogSettings",
    "PRESETS",
    "SpanHandle",
    "build_config",
    "configure",
    "get_logger",
    "record_event",
    "span",
]
