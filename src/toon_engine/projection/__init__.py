"""Derived read models: tree projection and search."""

from .search import find
from .tree import ExpansionState, TreeNode, collect_all_paths, project
from .view import ViewState

__all__ = [
    "ExpansionState",
    "TreeNode",
    "ViewState",
    "collect_all_paths",
    "find",
    "project",
]
