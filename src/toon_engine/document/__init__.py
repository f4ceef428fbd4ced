"""Document model, path addressing, history, and the state engine."""

from . import paths
from .document import Document, DocumentErrorEntry
from .engine import DocumentEngine, EditResult, MovePosition, Transaction
from .history import History, HistorySnapshot
from .sync import DocumentMirror, DocumentSync
from .values import MISSING, UNPARSED, NodeType, Path, StructuredValue, classify

__all__ = [
    "Document",
    "DocumentEngine",
    "DocumentErrorEntry",
    "DocumentMirror",
    "DocumentSync",
    "EditResult",
    "History",
    "HistorySnapshot",
    "MISSING",
    "MovePosition",
    "NodeType",
    "Path",
    "StructuredValue",
    "Transaction",
    "UNPARSED",
    "classify",
    "paths",
]
