"""Display-oriented tree derived from a structured value.

The projection is rebuilt from scratch on every read; node ids are joined
paths, so expansion state survives edits only where the path survives.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Any, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from toon_engine.document.paths import join_path
from toon_engine.document.values import UNPARSED, NodeType, Path, classify


@dataclass(frozen=True, slots=True)
class TreeNode:
    id: str
    label: str
    type: NodeType
    value: Any
    path: Path
    expanded: bool = False
    children: Optional[Tuple["TreeNode", ...]] = None

    @property
    def is_leaf(self) -> bool:
        return self.children is None

    def walk(self) -> Iterator["TreeNode"]:
        yield self
        for child in self.children or ():
            yield from child.walk()


def _entries(value: Any, kind: NodeType) -> Iterator[Tuple[str, str, Any]]:
    if kind is NodeType.ARRAY:
        for index, item in enumerate(value):
            yield str(index), f"[{index}]", item
    elif kind is NodeType.OBJECT:
        for key, item in value.items():
            yield key, key, item


def _make_node(
    value: Any, path: Path, label: str, expanded: AbstractSet[str]
) -> TreeNode:
    kind = classify(value)
    node_id = join_path(path)
    if kind.is_container:
        return TreeNode(
            id=node_id,
            label=label,
            type=kind,
            value=None,
            path=path,
            expanded=node_id in expanded,
            children=project(value, expanded, path),
        )
    return TreeNode(
        id=node_id,
        label=label,
        type=kind,
        value=value,
        path=path,
        expanded=node_id in expanded,
    )


def project(
    value: Any, expanded: AbstractSet[str] = frozenset(), path: Sequence[str] = ()
) -> Tuple[TreeNode, ...]:
    """Return the child nodes of ``value`` located at ``path``.

    Containers yield one node per entry (arrays labelled ``[i]``, objects by
    key). A null yields a single leaf, as does any other scalar root.
    """

    if value is UNPARSED:
        return ()
    base = tuple(path)
    kind = classify(value)
    if kind is NodeType.NULL:
        return (_make_node(None, base, base[-1] if base else "null", expanded),)
    if not kind.is_container:
        return (_make_node(value, base, base[-1] if base else "value", expanded),)
    return tuple(
        _make_node(item, base + (segment,), label, expanded)
        for segment, label, item in _entries(value, kind)
    )


def collect_all_paths(value: Any, path: Sequence[str] = ()) -> List[str]:
    """Ids of every node below ``value`` in traversal order."""

    if value is UNPARSED:
        return []
    kind = classify(value)
    ids: List[str] = []
    for segment, _label, item in _entries(value, kind):
        item_path = tuple(path) + (segment,)
        ids.append(join_path(item_path))
        ids.extend(collect_all_paths(item, item_path))
    return ids


class ExpansionState:
    """Set of expanded node ids kept next to the document."""

    def __init__(self, ids: Iterable[str] = ()) -> None:
        self._ids: Set[str] = set(ids)

    def __contains__(self, path: object) -> bool:
        if isinstance(path, str):
            return path in self._ids
        if isinstance(path, tuple):
            return join_path(path) in self._ids
        return False

    def __len__(self) -> int:
        return len(self._ids)

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(self._ids)

    def toggle(self, path: Sequence[str]) -> bool:
        node_id = join_path(path)
        if node_id in self._ids:
            self._ids.discard(node_id)
            return False
        self._ids.add(node_id)
        return True

    def expand(self, path: Sequence[str]) -> None:
        self._ids.add(join_path(path))

    def collapse(self, path: Sequence[str]) -> None:
        self._ids.discard(join_path(path))

    def expand_all(self, value: Any) -> None:
        self._ids.update(collect_all_paths(value))

    def collapse_all(self) -> None:
        self._ids.clear()


__all__ = ["ExpansionState", "TreeNode", "collect_all_paths", "project"]
