from __future__ import annotations

import base64
import binascii
import logging
import time
from typing import Any, Iterable

from wa_mgt.sticker_bot.errors import SendError
from wa_mgt.sticker_bot.models import (
    ChatId,
    Event,
    ImageRef,
    IncomingMessage,
    MessageEvent,
    OutgoingReply,
    PresenceEvent,
    StickerReply,
    TextReply,
)
from wa_mgt.utils.chat_identity import is_group_chat

logger = logging.getLogger("wa_sticker_bot")


class WhatsAppAdapter:
    """
    Converts WhatsApp client events into the bot models and sends replies.

    The wrapped client is expected to expose ``poll_events()``,
    ``send_message(chat, payload)`` and ``get_own_id()``; payload field names
    follow the whatsmeow protobuf names in snake_case. Adjust parse_raw if
    your bridge emits a different shape.
    """

    def __init__(self, client: Any) -> None:
        self.client = client

    def own_id(self) -> str | None:
        return self.client.get_own_id()

    def poll_events(self) -> Iterable[dict[str, Any]]:
        return self.client.poll_events()

    def send_message(self, chat: ChatId, reply: OutgoingReply) -> None:
        payload = self.serialize(reply)
        try:
            self.client.send_message(chat, payload)
        except Exception as exc:  # noqa: BLE001
            raise SendError(f"send to {chat} failed: {exc}") from exc

    @staticmethod
    def serialize(reply: OutgoingReply) -> dict[str, Any]:
        if isinstance(reply, TextReply):
            return {"conversation": reply.text}
        if isinstance(reply, StickerReply):
            return {
                "sticker_message": {
                    "url": reply.url,
                    "direct_path": reply.direct_path,
                    "media_key": base64.b64encode(reply.media_key).decode("ascii"),
                    "mimetype": reply.mimetype,
                    "file_length": reply.file_length,
                    "png_thumbnail": base64.b64encode(reply.thumbnail).decode("ascii"),
                }
            }
        raise TypeError(f"unsupported reply: {type(reply).__name__}")

    def parse_raw(self, raw: dict[str, Any]) -> Event | None:
        kind = raw.get("type")
        if kind == "presence":
            return PresenceEvent(
                source=str(raw.get("from") or ""),
                unavailable=bool(raw.get("unavailable")),
            )
        if kind == "message":
            return MessageEvent(self._parse_message(raw))
        logger.debug("ignored event type: %s", kind)
        return None

    def _parse_message(self, raw: dict[str, Any]) -> IncomingMessage:
        chat = str(raw.get("chat") or "")
        body = _as_dict(raw.get("message"))
        extended = _as_dict(body.get("extended_text"))
        image_body = body.get("image_message")
        if image_body is not None and not isinstance(image_body, dict):
            logger.warning("unusable image payload in message %s", raw.get("id"))
            image_body = {}

        text = body.get("conversation")
        if not isinstance(text, str):
            text = extended.get("text") if isinstance(extended.get("text"), str) else None

        context_info = _as_dict(extended.get("context_info")) or _as_dict((image_body or {}).get("context_info"))
        mentioned_jid = context_info.get("mentioned_jid")
        if not isinstance(mentioned_jid, (list, tuple)):
            mentioned_jid = []

        return IncomingMessage(
            sender=str(raw.get("sender") or chat),
            chat=chat,
            is_group=bool(raw.get("is_group", is_group_chat(chat))),
            mentioned=frozenset(str(jid) for jid in mentioned_jid),
            text=text,
            image=self._parse_image(image_body) if image_body is not None else None,
            message_id=str(raw.get("id")) if raw.get("id") else None,
            timestamp=_parse_timestamp(raw.get("timestamp")),
            raw=raw,
        )

    def _parse_image(self, image_body: dict[str, Any]) -> ImageRef:
        media_key = image_body.get("media_key") or b""
        if isinstance(media_key, str):
            try:
                media_key = base64.b64decode(media_key, validate=True)
            except (binascii.Error, ValueError):
                logger.warning("image message carries an undecodable media key")
                media_key = b""
        elif not isinstance(media_key, bytes):
            media_key = b""
        try:
            file_length = int(image_body.get("file_length") or 0)
        except (TypeError, ValueError):
            file_length = -1
        return ImageRef(
            url=str(image_body.get("url") or ""),
            direct_path=str(image_body.get("direct_path") or ""),
            media_key=bytes(media_key),
            file_length=file_length,
            mimetype=image_body.get("mimetype"),
        )


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _parse_timestamp(value: Any) -> float:
    try:
        return float(value) if value else time.time()
    except (TypeError, ValueError):
        logger.warning("bad message timestamp %r, using receive time", value)
        return time.time()
