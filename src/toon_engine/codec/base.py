"""Codec boundary consumed by the document engine."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from toon_engine.errors import EncodeFailure, FormatError


@runtime_checkable
class Codec(Protocol):
    """Text <-> value translation for one structured-text format.

    Implementations are pure and stateless between calls. ``decode`` raises
    :class:`FormatError`; ``encode`` and ``encode_compact`` raise
    :class:`EncodeFailure`. ``encode_compact`` is the smallest text the
    format allows for ``value``.
    """

    name: str

    def decode(self, text: str, *, strict: bool = True) -> Any:
        ...

    def encode(self, value: Any, *, indent: int = 2) -> str:
        ...

    def encode_compact(self, value: Any) -> str:
        ...


__all__ = ["Codec", "EncodeFailure", "FormatError"]
