from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from wa_mgt.sticker_bot.bot import StickerBot
from wa_mgt.sticker_bot.config import BotConfig, OwnerConfig
from wa_mgt.sticker_bot.errors import DownloadError, SendError
from wa_mgt.sticker_bot.models import ImageRef, IncomingMessage, MessageEvent

OWNER = "6281111111111@s.whatsapp.net"
BOT_ID = "6289999999999@s.whatsapp.net"
ALICE = "6282222222222@s.whatsapp.net"
BOB = "6283333333333@s.whatsapp.net"
GROUP = "120363000000000000@g.us"

IMAGE = ImageRef(
    url="https://mmg.whatsapp.net/v/t62/abc",
    direct_path="/v/t62/abc",
    media_key=b"\x01\x02\x03",
    file_length=2048,
    mimetype="image/jpeg",
)


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class FakeTransport:
    def __init__(self, own: str | None = BOT_ID) -> None:
        self.own = own
        self.sent: list[tuple[str, object]] = []
        self.fail_types: set[type] = set()

    def own_id(self) -> str | None:
        return self.own

    def send_message(self, chat, reply) -> None:
        if type(reply) in self.fail_types:
            raise SendError(f"rejected {type(reply).__name__}")
        self.sent.append((chat, reply))


class FakeMediaClient:
    def __init__(self, data: bytes = b"raw-image-bytes") -> None:
        self.data = data
        self.error: Exception | None = None
        self.urls: list[str] = []

    def download(self, url: str) -> bytes:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.data


def direct(sender: str = ALICE, text: str | None = "hi", image: ImageRef | None = None, **kwargs) -> IncomingMessage:
    return IncomingMessage(sender=sender, chat=sender, text=text, image=image, **kwargs)


def in_group(sender: str = ALICE, text: str | None = "hi", mentioned=(), **kwargs) -> IncomingMessage:
    return IncomingMessage(
        sender=sender,
        chat=GROUP,
        is_group=True,
        mentioned=frozenset(mentioned),
        text=text,
        **kwargs,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def media() -> FakeMediaClient:
    return FakeMediaClient()


@pytest.fixture
def config() -> BotConfig:
    return BotConfig(owner=OwnerConfig(owner_id=OWNER))


@pytest.fixture
def bot(config, transport, media, clock):
    instance = StickerBot(config, transport, media_client=media, clock=clock)
    yield instance
    instance.close()


@pytest.fixture
def download_failure(media) -> FakeMediaClient:
    media.error = DownloadError("connection reset")
    return media


def send(bot: StickerBot, msg: IncomingMessage):
    return bot.handle_sync(MessageEvent(msg))
