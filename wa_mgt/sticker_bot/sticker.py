from __future__ import annotations

import logging
from typing import Any

from wa_mgt.sticker_bot.config import TextsConfig
from wa_mgt.sticker_bot.errors import MalformedImageError, SendError, StickerError
from wa_mgt.sticker_bot.media_client import MediaClient
from wa_mgt.sticker_bot.models import (
    ChatId,
    ContactId,
    ImageRef,
    OutgoingReply,
    StickerReply,
    TextReply,
)
from wa_mgt.sticker_bot.storage import SessionStore

logger = logging.getLogger("wa_sticker_bot")


class StickerWorkflow:
    def __init__(
        self,
        store: SessionStore,
        media_client: MediaClient,
        transport: Any,
        texts: TextsConfig,
    ) -> None:
        self.store = store
        self.media_client = media_client
        self.transport = transport
        self.texts = texts

    def convert(self, image: ImageRef) -> StickerReply:
        """Download the image and repackage it as a sticker message.

        The media fields point at the original upload; the downloaded bytes
        only serve as the thumbnail.
        """
        if not image.url:
            raise MalformedImageError("image message has no url")
        if not image.media_key:
            raise MalformedImageError("image message has no media key")
        if image.file_length < 0:
            raise MalformedImageError(f"invalid file length: {image.file_length}")

        data = self.media_client.download(image.url)
        return StickerReply(
            url=image.url,
            direct_path=image.direct_path,
            media_key=image.media_key,
            file_length=image.file_length,
            thumbnail=data,
        )

    def run(self, sender: ContactId, chat: ChatId, image: ImageRef) -> list[OutgoingReply]:
        sent: list[OutgoingReply] = []
        try:
            try:
                sticker = self.convert(image)
                self.transport.send_message(chat, sticker)
                sent.append(sticker)
                logger.info("sticker sent chat=%s sender=%s", chat, sender)
                return sent
            except StickerError as exc:
                logger.warning("sticker build failed sender=%s: %s", sender, exc)
            except SendError as exc:
                logger.warning("sticker send failed chat=%s: %s", chat, exc)

            fallback = TextReply(self.texts.sticker_failed)
            try:
                self.transport.send_message(chat, fallback)
                sent.append(fallback)
            except SendError as exc:
                logger.error("failure notice not delivered chat=%s: %s", chat, exc)
            return sent
        finally:
            self.store.clear(sender)
