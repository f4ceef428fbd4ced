"""Bounded linear undo/redo history of content snapshots."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import List, Optional, Sequence


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True, slots=True)
class HistorySnapshot:
    content: str
    timestamp: int


class History:
    """Append-only snapshot log with a cursor.

    Recording after an undo prunes the redo branch. Once more than
    ``max_length`` snapshots exist the oldest is dropped and the cursor stays
    put, so it keeps pointing at the newest snapshot.
    """

    def __init__(self, max_length: int = 50) -> None:
        if max_length <= 0:
            raise ValueError("max_length must be positive")
        self.max_length = max_length
        self._snapshots: List[HistorySnapshot] = []
        self._cursor: int = -1

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def current(self) -> Optional[HistorySnapshot]:
        if self._cursor < 0:
            return None
        return self._snapshots[self._cursor]

    def snapshots(self) -> Sequence[HistorySnapshot]:
        return tuple(self._snapshots)

    def record(self, content: str, *, timestamp: Optional[int] = None) -> HistorySnapshot:
        if self._cursor < len(self._snapshots) - 1:
            self._snapshots = self._snapshots[: self._cursor + 1]
        snapshot = HistorySnapshot(
            content=content,
            timestamp=_now_ms() if timestamp is None else timestamp,
        )
        self._snapshots.append(snapshot)
        if len(self._snapshots) > self.max_length:
            self._snapshots.pop(0)
        else:
            self._cursor += 1
        return snapshot

    def can_undo(self) -> bool:
        return self._cursor > 0

    def can_redo(self) -> bool:
        return self._cursor < len(self._snapshots) - 1

    def undo(self) -> Optional[HistorySnapshot]:
        if not self.can_undo():
            return None
        self._cursor -= 1
        return self._snapshots[self._cursor]

    def redo(self) -> Optional[HistorySnapshot]:
        if not self.can_redo():
            return None
        self._cursor += 1
        return self._snapshots[self._cursor]

    def clear(self) -> None:
        self._snapshots = []
        self._cursor = -1


__all__ = ["History", "HistorySnapshot"]
