from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Union

ContactId = str
ChatId = str


class OwnerStatus(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class SessionState(str, Enum):
    IDLE = "idle"
    AWAITING_MENU_CHOICE = "awaiting_menu"
    AWAITING_IMAGE = "awaiting_image"


@dataclass(frozen=True)
class OwnerPresence:
    status: OwnerStatus = OwnerStatus.OFFLINE
    last_online_at: datetime | None = None

    def offline_for(self, now: datetime) -> timedelta | None:
        """Time since the owner was last seen online; None if never seen."""
        if self.last_online_at is None:
            return None
        return now - self.last_online_at


@dataclass(frozen=True)
class ImageRef:
    url: str
    direct_path: str
    media_key: bytes
    file_length: int
    mimetype: str | None = None


@dataclass
class IncomingMessage:
    sender: ContactId
    chat: ChatId
    is_group: bool = False
    mentioned: frozenset[str] = frozenset()
    text: str | None = None
    image: ImageRef | None = None
    message_id: str | None = None
    timestamp: float = field(default_factory=time.time)
    raw: dict[str, Any] | None = None


@dataclass(frozen=True)
class PresenceEvent:
    source: ContactId
    unavailable: bool


@dataclass(frozen=True)
class MessageEvent:
    message: IncomingMessage


Event = Union[PresenceEvent, MessageEvent]


@dataclass(frozen=True)
class TextReply:
    text: str


@dataclass(frozen=True)
class StickerReply:
    url: str
    direct_path: str
    media_key: bytes
    file_length: int
    thumbnail: bytes
    mimetype: str = "image/webp"


OutgoingReply = Union[TextReply, StickerReply]
