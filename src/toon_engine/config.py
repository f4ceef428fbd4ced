"""Engine settings and their environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

ENV_PREFIX = "TOON_ENGINE_"

MIN_INDENT = 2
MAX_INDENT = 8


def _env_int(env: Mapping[str, str], key: str, fallback: int) -> int:
    value = env.get(f"{ENV_PREFIX}{key}")
    if value is None:
        return fallback
    try:
        return int(value)
    except ValueError:
        return fallback


def _env_flag(env: Mapping[str, str], key: str, fallback: bool) -> bool:
    raw = env.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return fallback
    return raw.lower() in {"1", "true", "yes", "on"}


def clamp_indent(size: int) -> int:
    return max(MIN_INDENT, min(MAX_INDENT, size))


@dataclass(frozen=True, slots=True)
class EngineSettings:
    """Tunables for the document engine and its editor adapter."""

    history_limit: int = 50
    indent: int = 2
    strict: bool = True
    validation_delay_ms: int = 300
    lint_indent_size: int = 2

    def __post_init__(self) -> None:
        if self.history_limit <= 0:
            raise ValueError("history_limit must be positive")
        if self.validation_delay_ms < 0:
            raise ValueError("validation_delay_ms cannot be negative")
        object.__setattr__(self, "indent", clamp_indent(self.indent))
        object.__setattr__(
            self, "lint_indent_size", clamp_indent(self.lint_indent_size)
        )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "EngineSettings":
        source = os.environ if env is None else env
        defaults = cls()
        return cls(
            history_limit=_env_int(source, "HISTORY_LIMIT", defaults.history_limit),
            indent=_env_int(source, "INDENT", defaults.indent),
            strict=_env_flag(source, "STRICT", defaults.strict),
            validation_delay_ms=_env_int(
                source, "VALIDATION_DELAY_MS", defaults.validation_delay_ms
            ),
            lint_indent_size=_env_int(
                source, "LINT_INDENT_SIZE", defaults.lint_indent_size
            ),
        )

    def with_changes(self, **changes: object) -> "EngineSettings":
        return replace(self, **changes)


__all__ = ["EngineSettings", "clamp_indent", "MIN_INDENT", "MAX_INDENT"]
