"""
Bounded operation history, newest entry first.
"""

from collections import deque
from datetime import datetime
from typing import Callable, List


class OperationHistory:
    """Ring buffer of human-readable records of completed actions"""

    def __init__(self, capacity: int = 10, clock: Callable[[], datetime] = datetime.now):
        if capacity < 1:
            raise ValueError("History capacity must be positive")
        self.capacity = capacity
        self._clock = clock
        self._entries: deque = deque(maxlen=capacity)

    def add(self, operation: str) -> str:
        entry = f"{self._clock().strftime('%H:%M:%S')}: {operation}"
        self._entries.appendleft(entry)
        return entry

    @property
    def entries(self) -> List[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(list(self._entries))
