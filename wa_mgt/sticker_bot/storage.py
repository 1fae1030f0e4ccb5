from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from wa_mgt.sticker_bot.models import ContactId, SessionState


class SessionStore:
    """In-memory conversation state per sender, lost on restart."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._states: dict[ContactId, SessionState] = {}
        self._sender_locks: dict[ContactId, tuple[threading.Lock, int]] = {}

    def get(self, sender: ContactId) -> SessionState:
        with self._lock:
            return self._states.get(sender, SessionState.IDLE)

    def set(self, sender: ContactId, state: SessionState) -> None:
        if state is SessionState.IDLE:
            self.clear(sender)
            return
        with self._lock:
            self._states[sender] = state

    def clear(self, sender: ContactId) -> None:
        with self._lock:
            self._states.pop(sender, None)

    def snapshot(self) -> dict[ContactId, SessionState]:
        with self._lock:
            return dict(self._states)

    @contextmanager
    def lock_for(self, sender: ContactId) -> Iterator[None]:
        # Serializes a whole read-modify-write over one sender's state; the
        # entry is dropped once nobody holds or waits for it.
        with self._lock:
            lock, users = self._sender_locks.get(sender, (None, 0))
            if lock is None:
                lock = threading.Lock()
            self._sender_locks[sender] = (lock, users + 1)
        try:
            with lock:
                yield
        finally:
            with self._lock:
                _, users = self._sender_locks[sender]
                if users <= 1:
                    del self._sender_locks[sender]
                else:
                    self._sender_locks[sender] = (lock, users - 1)

    def held_locks(self) -> int:
        with self._lock:
            return len(self._sender_locks)
