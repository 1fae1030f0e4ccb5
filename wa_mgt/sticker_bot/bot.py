from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable

from wa_mgt.sticker_bot.config import BotConfig
from wa_mgt.sticker_bot.dispatcher import SenderDispatcher
from wa_mgt.sticker_bot.media_client import MediaClient
from wa_mgt.sticker_bot.models import (
    Event,
    IncomingMessage,
    MessageEvent,
    OutgoingReply,
    PresenceEvent,
)
from wa_mgt.sticker_bot.presence import PresenceTracker, utc_now
from wa_mgt.sticker_bot.rate_limit import DedupeCache
from wa_mgt.sticker_bot.router import MessageRouter
from wa_mgt.sticker_bot.sticker import StickerWorkflow
from wa_mgt.sticker_bot.storage import SessionStore
from wa_mgt.utils.chat_identity import bare_jid

logger = logging.getLogger("wa_sticker_bot")


class StickerBot:
    def __init__(
        self,
        config: BotConfig,
        transport: Any,
        media_client: MediaClient | None = None,
        clock: Callable[[], datetime] = utc_now,
        dispatcher: SenderDispatcher | None = None,
    ) -> None:
        self.config = config
        self.transport = transport
        self.presence = PresenceTracker(config.owner.resolve(), clock=clock)
        self.store = SessionStore()
        self.dedupe = DedupeCache(config.dedupe.window_seconds)
        self.workflow = StickerWorkflow(
            self.store,
            media_client or MediaClient(config.sticker),
            transport,
            config.texts,
        )
        self.router = MessageRouter(config, self.presence, self.store, self.workflow, transport)
        self.dispatcher = dispatcher or SenderDispatcher(config.dispatch.max_workers)
        if not self.presence.owner_id:
            logger.warning("owner id not configured, owner will always look offline")

    def handle(self, event: Event) -> None:
        """Entry point for every inbound transport event."""
        if isinstance(event, PresenceEvent):
            self.presence.observe(event)
        elif isinstance(event, MessageEvent):
            if self._accept(event.message):
                self.dispatcher.submit(event.message.sender, self.router.route, event.message)
        else:
            raise TypeError(f"unsupported event: {type(event).__name__}")

    def handle_sync(self, event: Event) -> list[OutgoingReply]:
        if isinstance(event, PresenceEvent):
            self.presence.observe(event)
            return []
        if isinstance(event, MessageEvent):
            if not self._accept(event.message):
                return []
            return self.router.route(event.message)
        raise TypeError(f"unsupported event: {type(event).__name__}")

    def close(self) -> None:
        self.dispatcher.shutdown(wait=True)

    def _accept(self, msg: IncomingMessage) -> bool:
        if self._is_self_message(msg):
            logger.debug("skip self message: %s", msg.message_id)
            return False
        if msg.message_id and self.dedupe.seen_recently(msg.message_id):
            logger.info("dedupe hit: %s", msg.message_id)
            return False
        return True

    def _is_self_message(self, msg: IncomingMessage) -> bool:
        own_id = bare_jid(self.router.own_id())
        if not own_id:
            return False
        return bare_jid(msg.sender) == own_id
