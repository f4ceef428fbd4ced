"""Pure path addressing over structured values.

A path is a tuple of string segments; object keys are used verbatim and
array positions are base-10 index strings. The empty path is the root.
Nothing here mutates anything other than the container passed in.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence

from .values import MISSING, NodeType, Path, classify, is_container

ROOT_ID = "root"
SEPARATOR = "."


def to_path(segments: Iterable[object]) -> Path:
    return tuple(str(segment) for segment in segments)


def join_path(path: Sequence[str]) -> str:
    """Return the node id for ``path`` (``"root"`` for the empty path)."""

    return SEPARATOR.join(path) if path else ROOT_ID


def split_path(node_id: str) -> Path:
    if not node_id or node_id == ROOT_ID:
        return ()
    return tuple(node_id.split(SEPARATOR))


def parse_index(segment: str) -> Optional[int]:
    if not (segment.isascii() and segment.isdigit()):
        return None
    return int(segment, 10)


def _child(container: Any, segment: str) -> Any:
    kind = classify(container)
    if kind is NodeType.ARRAY:
        index = parse_index(segment)
        if index is None or index >= len(container):
            return MISSING
        return container[index]
    if kind is NodeType.OBJECT:
        return container.get(segment, MISSING)
    return MISSING


def get(value: Any, path: Sequence[str]) -> Any:
    """Return the value at ``path`` or ``MISSING`` when it does not resolve."""

    current = value
    for segment in path:
        if not is_container(current):
            return MISSING
        current = _child(current, segment)
        if current is MISSING:
            return MISSING
    return current


def exists(value: Any, path: Sequence[str]) -> bool:
    return get(value, path) is not MISSING


def parent_of(value: Any, path: Sequence[str]) -> Any:
    """Return the container holding the last segment of ``path``."""

    if not path:
        return MISSING
    parent = get(value, path[:-1])
    return parent if is_container(parent) else MISSING


def set(value: Any, path: Sequence[str], new_value: Any) -> bool:  # noqa: A001
    """Write ``new_value`` at ``path``; ``False`` when the write was dropped.

    Arrays accept an index equal to their length as an append. The root
    cannot be replaced through this function.
    """

    parent = parent_of(value, path)
    if parent is MISSING:
        return False
    segment = path[-1]
    if classify(parent) is NodeType.ARRAY:
        index = parse_index(segment)
        if index is None or index > len(parent):
            return False
        if index == len(parent):
            parent.append(new_value)
        else:
            parent[index] = new_value
        return True
    parent[segment] = new_value
    return True


def delete(value: Any, path: Sequence[str]) -> bool:
    """Remove the entry at ``path``; ``False`` when nothing was removed."""

    parent = parent_of(value, path)
    if parent is MISSING:
        return False
    segment = path[-1]
    if classify(parent) is NodeType.ARRAY:
        index = parse_index(segment)
        if index is None or index >= len(parent):
            return False
        del parent[index]
        return True
    if segment not in parent:
        return False
    del parent[segment]
    return True


def is_ancestor(ancestor: Sequence[str], path: Sequence[str]) -> bool:
    """True when ``ancestor`` equals ``path`` or is one of its prefixes."""

    return len(ancestor) <= len(path) and tuple(path[: len(ancestor)]) == tuple(
        ancestor
    )


__all__ = [
    "ROOT_ID",
    "delete",
    "exists",
    "get",
    "is_ancestor",
    "join_path",
    "parent_of",
    "parse_index",
    "set",
    "split_path",
    "to_path",
]
