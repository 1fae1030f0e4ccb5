from __future__ import annotations

import threading
import time
from typing import Callable


class DedupeCache:
    """Remembers message ids for a window so redelivered events are dropped."""

    def __init__(self, window_seconds: int, clock: Callable[[], float] = time.time) -> None:
        self.window_seconds = window_seconds
        self.clock = clock
        self.cache: dict[str, float] = {}
        self._lock = threading.Lock()

    def seen_recently(self, key: str) -> bool:
        now = self.clock()
        with self._lock:
            expired = [k for k, ts in self.cache.items() if now - ts > self.window_seconds]
            for item in expired:
                self.cache.pop(item, None)
            if key in self.cache:
                return True
            self.cache[key] = now
            return False
