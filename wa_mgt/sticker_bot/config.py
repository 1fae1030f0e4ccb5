from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class OwnerConfig:
    owner_id: str | None = None
    owner_id_env: str = "OWNER_JID"

    def resolve(self) -> str | None:
        return self.owner_id or os.getenv(self.owner_id_env) or None


@dataclass
class PresenceConfig:
    patience_threshold_hours: float = 3.0


@dataclass
class GreetingConfig:
    every_message: bool = True  # False: greet only while the sender is idle


@dataclass
class TextsConfig:
    online: str = "👤 Owner sedang online.\n📋 Menu:\n1. Buat stiker"
    offline: str = "👤 Owner sedang offline. Silakan tunggu ya~"
    patience_suffix: str = "\n⚠️ Owner sudah offline lebih dari {hours} jam, mohon bersabar."  # {hours}: presence.patience_threshold_hours
    menu_sticker_choice: str = "1"
    send_photo: str = "📸 Silakan kirim foto untuk diubah jadi stiker"
    sticker_failed: str = "❌ Gagal bikin stiker, coba lagi!"


@dataclass
class StickerConfig:
    download_timeout_seconds: float = 30.0
    max_download_bytes: int | None = 10 * 1024 * 1024


@dataclass
class DedupeConfig:
    window_seconds: int = 60


@dataclass
class DispatchConfig:
    max_workers: int = 8


@dataclass
class HealthConfig:
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 3000
    body: str = "Bot is running"


@dataclass
class BotConfig:
    owner: OwnerConfig = field(default_factory=OwnerConfig)
    presence: PresenceConfig = field(default_factory=PresenceConfig)
    greeting: GreetingConfig = field(default_factory=GreetingConfig)
    texts: TextsConfig = field(default_factory=TextsConfig)
    sticker: StickerConfig = field(default_factory=StickerConfig)
    dedupe: DedupeConfig = field(default_factory=DedupeConfig)
    dispatch: DispatchConfig = field(default_factory=DispatchConfig)
    health: HealthConfig = field(default_factory=HealthConfig)
    self_user_id: str | None = None
    client_factory: str | None = None  # "package.module:callable"


_DEFAULT_CONFIG_PATH = Path(__file__).with_name("config.json")


def load_config(path: str | None = None) -> BotConfig:
    config_path = Path(path or os.getenv("WA_STICKER_BOT_CONFIG", _DEFAULT_CONFIG_PATH))
    if not config_path.exists():
        return BotConfig(client_factory=os.getenv("WA_STICKER_BOT_CLIENT"))

    data = json.loads(config_path.read_text(encoding="utf-8"))

    return BotConfig(
        owner=OwnerConfig(**data.get("owner", {})),
        presence=PresenceConfig(**data.get("presence", {})),
        greeting=GreetingConfig(**data.get("greeting", {})),
        texts=TextsConfig(**data.get("texts", {})),
        sticker=StickerConfig(**data.get("sticker", {})),
        dedupe=DedupeConfig(**data.get("dedupe", {})),
        dispatch=DispatchConfig(**data.get("dispatch", {})),
        health=HealthConfig(**data.get("health", {})),
        self_user_id=data.get("self_user_id"),
        client_factory=data.get("client_factory") or os.getenv("WA_STICKER_BOT_CLIENT"),
    )
