"""Structured value helpers: type tags, sentinels, and copying."""

from __future__ import annotations

import copy
from enum import Enum
from typing import Any, Dict, List, Tuple, Union

Path = Tuple[str, ...]
StructuredValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]


class _Sentinel:
    __slots__ = ("_name",)

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return self._name

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "_Sentinel":
        return self

    def __deepcopy__(self, memo: Dict[int, Any]) -> "_Sentinel":
        return self


# No parsed tree is available (blank or invalid text).
UNPARSED = _Sentinel("UNPARSED")
# A path lookup did not resolve.
MISSING = _Sentinel("MISSING")


class NodeType(str, Enum):
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"

    @property
    def is_container(self) -> bool:
        return self in (NodeType.ARRAY, NodeType.OBJECT)


def classify(value: Any) -> NodeType:
    """Return the tag for ``value``; ``bool`` is checked before numbers."""

    if value is None:
        return NodeType.NULL
    if isinstance(value, bool):
        return NodeType.BOOLEAN
    if isinstance(value, (int, float)):
        return NodeType.NUMBER
    if isinstance(value, str):
        return NodeType.STRING
    if isinstance(value, list):
        return NodeType.ARRAY
    if isinstance(value, dict):
        return NodeType.OBJECT
    raise TypeError(f"Unsupported structured value type: {type(value)!r}")


def is_container(value: Any) -> bool:
    return isinstance(value, (list, dict))


def clone(value: Any) -> Any:
    return copy.deepcopy(value)


def leaf_text(value: Any) -> str:
    """Render a leaf the way the text format spells it."""

    kind = classify(value)
    if kind is NodeType.NULL:
        return "null"
    if kind is NodeType.BOOLEAN:
        return "true" if value else "false"
    if kind is NodeType.NUMBER or kind is NodeType.STRING:
        return str(value)
    raise TypeError(f"{kind.value} is not a leaf")


__all__ = [
    "MISSING",
    "UNPARSED",
    "NodeType",
    "Path",
    "StructuredValue",
    "classify",
    "clone",
    "is_container",
    "leaf_text",
]
