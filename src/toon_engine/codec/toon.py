"""TOON codec backed by the ``toon-format`` package."""

from __future__ import annotations

import math
from typing import Any

import toon_format  # type: ignore[import]

from toon_engine.errors import EncodeFailure, FormatError


def _check_encodable(value: Any, trail: str = "root") -> None:
    if value is None or isinstance(value, (bool, str, int)):
        return
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise EncodeFailure(f"{trail}: non-finite number {value!r}")
        return
    if isinstance(value, list):
        for index, item in enumerate(value):
            _check_encodable(item, f"{trail}.{index}")
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise EncodeFailure(f"{trail}: key {key!r} is not a string")
            _check_encodable(item, f"{trail}.{key}")
        return
    raise EncodeFailure(f"{trail}: unsupported type {type(value).__name__}")


class ToonCodec:
    """Token-Oriented Object Notation via ``toon_format.decode``/``encode``.

    The library normalises unsupported Python objects instead of rejecting
    them, so values are checked up front to keep encode failures visible.
    """

    name = "toon"

    def __init__(self, *, indent: int = 2) -> None:
        self.indent = indent

    def decode(self, text: str, *, strict: bool = True) -> Any:
        try:
            options = toon_format.DecodeOptions(indent=self.indent, strict=strict)
            return toon_format.decode(text, options)
        except Exception as exc:  # noqa: BLE001
            raise FormatError(str(exc) or type(exc).__name__) from exc

    def encode(self, value: Any, *, indent: int = 2) -> str:
        _check_encodable(value)
        try:
            return toon_format.encode(value, {"indent": indent})
        except Exception as exc:  # noqa: BLE001
            raise EncodeFailure(str(exc) or type(exc).__name__) from exc

    def encode_compact(self, value: Any) -> str:
        # Indentation is structural; the decoder only accepts its own width.
        return self.encode(value, indent=self.indent)


__all__ = ["ToonCodec"]
