from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

from wa_mgt.sticker_bot.config import BotConfig
from wa_mgt.sticker_bot.errors import SendError
from wa_mgt.sticker_bot.models import (
    ChatId,
    IncomingMessage,
    OutgoingReply,
    OwnerPresence,
    OwnerStatus,
    SessionState,
    TextReply,
)
from wa_mgt.sticker_bot.presence import PresenceTracker
from wa_mgt.sticker_bot.sticker import StickerWorkflow
from wa_mgt.sticker_bot.storage import SessionStore
from wa_mgt.utils.chat_identity import bare_jid, detect_chat_type, is_group_chat

logger = logging.getLogger("wa_sticker_bot")


class MessageRouter:
    def __init__(
        self,
        config: BotConfig,
        presence: PresenceTracker,
        store: SessionStore,
        workflow: StickerWorkflow,
        transport: Any,
    ) -> None:
        self.config = config
        self.presence = presence
        self.store = store
        self.workflow = workflow
        self.transport = transport
        self.patience_threshold = timedelta(hours=config.presence.patience_threshold_hours)

    def route(self, msg: IncomingMessage) -> list[OutgoingReply]:
        if self._is_group(msg) and not self._is_mentioned(msg):
            logger.debug("group message without mention skipped chat=%s", msg.chat)
            return []

        texts = self.config.texts
        replies: list[OutgoingReply] = []
        with self.store.lock_for(msg.sender):
            state = self.store.get(msg.sender)
            logger.info(
                "message received scope=%s sender=%s state=%s",
                "group" if msg.is_group else detect_chat_type(msg.chat),
                msg.sender,
                state.value,
            )

            if self.config.greeting.every_message or state is SessionState.IDLE:
                self._send(msg.chat, TextReply(self.compose_greeting()), replies)

            if state is SessionState.IDLE:
                self.store.set(msg.sender, SessionState.AWAITING_MENU_CHOICE)
            elif state is SessionState.AWAITING_MENU_CHOICE:
                if msg.text == texts.menu_sticker_choice:
                    self._send(msg.chat, TextReply(texts.send_photo), replies)
                    self.store.set(msg.sender, SessionState.AWAITING_IMAGE)
            elif state is SessionState.AWAITING_IMAGE and msg.image is not None:
                replies.extend(self.workflow.run(msg.sender, msg.chat, msg.image))
        return replies

    def compose_greeting(self, now: datetime | None = None) -> str:
        texts = self.config.texts
        presence = self.presence.current_status()
        if presence.status is OwnerStatus.ONLINE:
            return texts.online
        if self.owner_away_too_long(now, presence):
            hours = f"{self.config.presence.patience_threshold_hours:g}"
            return texts.offline + texts.patience_suffix.replace("{hours}", hours)
        return texts.offline

    def owner_away_too_long(self, now: datetime | None = None, presence: OwnerPresence | None = None) -> bool:
        presence = presence or self.presence.current_status()
        duration = presence.offline_for(now or self.presence.clock())
        if duration is None:
            return True
        return duration > self.patience_threshold

    def own_id(self) -> str | None:
        return self.config.self_user_id or self.transport.own_id()

    def _is_group(self, msg: IncomingMessage) -> bool:
        return msg.is_group or is_group_chat(msg.chat)

    def _is_mentioned(self, msg: IncomingMessage) -> bool:
        own_id = bare_jid(self.own_id())
        if not own_id:
            return False
        return any(bare_jid(jid) == own_id for jid in msg.mentioned)

    def _send(self, chat: ChatId, reply: TextReply, replies: list[OutgoingReply]) -> None:
        try:
            self.transport.send_message(chat, reply)
        except SendError as exc:
            logger.error("error sending message chat=%s: %s", chat, exc)
            return
        replies.append(reply)
