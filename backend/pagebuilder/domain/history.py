"""
Edit history: a bounded, linear undo/redo stack of document snapshots.

State is a list of snapshots ``S`` and a cursor ``c`` with ``0 <= c < len(S)``.
Committing after an undo discards every snapshot beyond the cursor. When the
stack grows past ``limit`` the oldest snapshot is evicted.
"""
from __future__ import annotations

import copy
import logging
from typing import Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_HISTORY_LIMIT = 50


class EditHistory(Generic[T]):
    def __init__(self, baseline: T, *, limit: int = DEFAULT_HISTORY_LIMIT):
        if limit < 1:
            raise ValueError("History limit must be at least 1")
        self.limit = limit
        self._snapshots: List[T] = [copy.deepcopy(baseline)]
        self._cursor = 0

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def current(self) -> T:
        return copy.deepcopy(self._snapshots[self._cursor])

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._snapshots) - 1

    def reset(self, baseline: T) -> None:
        """Drop all history and start over from ``baseline`` (e.g. after a reload)."""
        self._snapshots = [copy.deepcopy(baseline)]
        self._cursor = 0

    def commit(self, document: T) -> None:
        discarded = len(self._snapshots) - 1 - self._cursor
        del self._snapshots[self._cursor + 1:]
        self._snapshots.append(copy.deepcopy(document))
        self._cursor = len(self._snapshots) - 1

        if discarded:
            logger.debug("history: discarded %d redo entries", discarded)

        overflow = len(self._snapshots) - self.limit
        if overflow > 0:
            del self._snapshots[:overflow]
            self._cursor -= overflow
            logger.debug("history: evicted %d oldest entries", overflow)

    def undo(self) -> Optional[T]:
        """Step back. Returns ``None`` when there is nothing to undo."""
        if not self.can_undo:
            return None
        self._cursor -= 1
        return self.current

    def redo(self) -> Optional[T]:
        """Step forward. Returns ``None`` when there is nothing to redo."""
        if not self.can_redo:
            return None
        self._cursor += 1
        return self.current
