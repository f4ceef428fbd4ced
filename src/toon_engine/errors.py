"""Exception taxonomy shared by the codec boundary and the document engine."""

from __future__ import annotations

from typing import Optional, Sequence


class ToonEngineError(RuntimeError):
    """Base class for recoverable engine failures."""


class FormatError(ToonEngineError):
    """Raised by a codec when text cannot be decoded.

    ``line`` and ``column`` are 1-based and only set when the codec knows
    them; the engine falls back to scanning ``message`` otherwise.
    """

    def __init__(
        self,
        message: str,
        *,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column


class EncodeFailure(ToonEngineError):
    """Raised by a codec when a value cannot be represented as text."""


class PatternError(ToonEngineError):
    """Raised when a find/replace expression does not compile."""

    def __init__(self, message: str, *, pattern: str) -> None:
        super().__init__(message)
        self.pattern = pattern


class PathResolutionFailure(ToonEngineError):
    """Raised when a structural edit references a path that does not resolve."""

    def __init__(self, message: str, *, path: Sequence[str]) -> None:
        super().__init__(message)
        self.path = tuple(path)


__all__ = [
    "ToonEngineError",
    "FormatError",
    "EncodeFailure",
    "PatternError",
    "PathResolutionFailure",
]
