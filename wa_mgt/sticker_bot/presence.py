from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable

from wa_mgt.sticker_bot.models import OwnerPresence, OwnerStatus, PresenceEvent

logger = logging.getLogger("wa_sticker_bot")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PresenceTracker:
    def __init__(self, owner_id: str | None, clock: Callable[[], datetime] = utc_now) -> None:
        self.owner_id = owner_id
        self.clock = clock
        self._lock = threading.Lock()
        self._presence = OwnerPresence()

    def observe(self, event: PresenceEvent) -> None:
        if not self.owner_id or event.source != self.owner_id:
            return
        with self._lock:
            if event.unavailable:
                self._presence = OwnerPresence(OwnerStatus.OFFLINE, self._presence.last_online_at)
            else:
                self._presence = OwnerPresence(OwnerStatus.ONLINE, self.clock())
            status = self._presence.status
        logger.info("owner status: %s", status.value)

    def current_status(self) -> OwnerPresence:
        with self._lock:
            return self._presence

    def offline_duration(self, now: datetime | None = None) -> timedelta | None:
        return self.current_status().offline_for(now or self.clock())
