"""Turn document state into editor markers."""

from __future__ import annotations

from typing import List

from toon_engine.document.document import Document

from .lint import lint
from .models import Diagnostic, Severity


def _line_length(lines: List[str], line: int) -> int:
    if 1 <= line <= len(lines):
        return len(lines[line - 1])
    return 0


def build_markers(
    document: Document, *, indent_size: int = 2, layout_checks: bool = True
) -> List[Diagnostic]:
    """Decode errors first (one marker each), then lint findings.

    Lint only understands TOON layout; pass ``layout_checks=False`` for
    documents in other formats.
    """

    lines = document.raw_text.split("\n")
    markers: List[Diagnostic] = [
        Diagnostic(
            severity=Severity(error.severity),
            line=error.line,
            column=error.column,
            end_line=error.line,
            end_column=_line_length(lines, error.line) + 1,
            message=error.message,
        )
        for error in document.errors
    ]
    if layout_checks:
        markers.extend(lint(document.raw_text, indent_size=indent_size))
    return markers


__all__ = ["build_markers"]
