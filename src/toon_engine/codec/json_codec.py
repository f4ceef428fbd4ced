"""JSON codec built on the standard library ``json`` module."""

from __future__ import annotations

import json
from typing import Any

from toon_engine.errors import EncodeFailure, FormatError


def _reject_constant(token: str) -> Any:
    raise ValueError(f"Non-standard JSON constant {token}")


class JsonCodec:
    name = "json"

    def decode(self, text: str, *, strict: bool = True) -> Any:
        try:
            if strict:
                return json.loads(text, parse_constant=_reject_constant)
            return json.loads(text, strict=False)
        except json.JSONDecodeError as exc:
            raise FormatError(
                f"{exc.msg} at line {exc.lineno} column {exc.colno}",
                line=exc.lineno,
                column=exc.colno,
            ) from exc
        except ValueError as exc:
            raise FormatError(str(exc)) from exc

    def encode(self, value: Any, *, indent: int = 2) -> str:
        try:
            return json.dumps(value, indent=indent, ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise EncodeFailure(str(exc)) from exc

    def encode_compact(self, value: Any) -> str:
        try:
            return json.dumps(
                value, ensure_ascii=False, allow_nan=False, separators=(",", ":")
            )
        except (TypeError, ValueError) as exc:
            raise EncodeFailure(str(exc)) from exc


__all__ = ["JsonCodec"]
