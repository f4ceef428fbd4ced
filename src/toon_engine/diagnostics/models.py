"""Editor marker types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Range-based marker; lines and columns are 1-based, end exclusive."""

    severity: Severity
    line: int
    column: int
    end_line: int
    end_column: int
    message: str
    source: str = "toon-validator"


__all__ = ["Diagnostic", "Severity"]
