from __future__ import annotations

import logging
import threading
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable

logger = logging.getLogger("wa_sticker_bot")


class SenderDispatcher:
    """
    Runs handlers on a thread pool, one at a time per key.

    Calls submitted for the same key run in submission order; calls for
    different keys run in parallel, so a slow download only holds up its
    own sender.
    """

    def __init__(self, max_workers: int = 8) -> None:
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="sticker-bot")
        self._lock = threading.Lock()
        self._queues: dict[str, deque[tuple[Callable[..., Any], tuple[Any, ...]]]] = {}

    def submit(self, key: str, fn: Callable[..., Any], *args: Any) -> None:
        with self._lock:
            queue = self._queues.get(key)
            if queue is not None:
                queue.append((fn, args))
                return
            self._queues[key] = deque([(fn, args)])
        try:
            self.executor.submit(self._drain, key)
        except RuntimeError:
            # executor already shut down; nothing will ever drain this queue
            with self._lock:
                self._queues.pop(key, None)
            raise

    def shutdown(self, wait: bool = True) -> None:
        self.executor.shutdown(wait=wait)

    def _drain(self, key: str) -> None:
        while True:
            with self._lock:
                queue = self._queues[key]
                if not queue:
                    del self._queues[key]
                    return
                fn, args = queue.popleft()
            try:
                fn(*args)
            except Exception:  # noqa: BLE001
                logger.exception("handler failed key=%s", key)
