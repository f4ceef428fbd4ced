"""Linear search over keys and leaf values."""

from __future__ import annotations

from typing import Any, List

from toon_engine.document.values import UNPARSED, NodeType, Path, classify, leaf_text


def find(value: Any, query: str) -> List[Path]:
    """Paths whose key or leaf text contains ``query``, ignoring case.

    Results follow traversal order; a path whose key and leaf both match is
    reported once.
    """

    if not query or value is UNPARSED:
        return []
    results: List[Path] = []
    _walk(value, (), query.lower(), results)
    return results


def _walk(value: Any, path: Path, needle: str, results: List[Path]) -> None:
    kind = classify(value)
    if kind is NodeType.ARRAY:
        for index, item in enumerate(value):
            _walk(item, path + (str(index),), needle, results)
    elif kind is NodeType.OBJECT:
        for key, item in value.items():
            item_path = path + (key,)
            if needle in key.lower():
                results.append(item_path)
            _walk(item, item_path, needle, results)
    elif needle in leaf_text(value).lower():
        if not results or results[-1] != path:
            results.append(path)


__all__ = ["find"]
