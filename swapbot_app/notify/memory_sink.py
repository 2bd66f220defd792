"""Bounded in-memory notice log."""

import threading
from collections import deque
from typing import Any, Optional

from .base import BaseNoticeSink
from .models import NoticeLevel, OperatorNotice


class MemoryNoticeSink(BaseNoticeSink):
    """Keeps the most recent notices for a log panel; oldest entries drop first."""

    def __init__(self, name: str = "memory", capacity: int = 200):
        super().__init__(name)
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._entries: deque[OperatorNotice] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def emit(self, notice: OperatorNotice) -> None:
        with self._lock:
            self._entries.append(notice)

    def entries(self, level: Optional[NoticeLevel] = None) -> list[OperatorNotice]:
        """Notices in arrival order, optionally filtered by level."""
        with self._lock:
            items = list(self._entries)
        if level is None:
            return items
        return [notice for notice in items if notice.level == level]

    def latest(self) -> Optional[OperatorNotice]:
        with self._lock:
            return self._entries[-1] if self._entries else None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def export(self) -> list[dict[str, Any]]:
        """Notices as plain dictionaries, oldest first."""
        return [notice.to_dict() for notice in self.entries()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
