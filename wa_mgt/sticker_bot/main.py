from __future__ import annotations

import importlib
import logging
import time
from typing import Any

from wa_mgt.sticker_bot.bot import StickerBot
from wa_mgt.sticker_bot.config import load_config
from wa_mgt.sticker_bot.health import HealthServer
from wa_mgt.sticker_bot.whatsapp_adapter import WhatsAppAdapter

logger = logging.getLogger("wa_sticker_bot")


def load_client(factory_path: str) -> Any:
    module_name, _, attr = factory_path.partition(":")
    if not module_name or not attr:
        raise ValueError(f"client factory must look like 'module:callable', got {factory_path!r}")
    factory = getattr(importlib.import_module(module_name), attr)
    return factory()


def poll_once(adapter: WhatsAppAdapter, bot: StickerBot) -> int:
    """Feed one batch of raw events to the bot; returns how many were handled."""
    handled = 0
    for raw in adapter.poll_events():
        try:
            event = adapter.parse_raw(raw)
            if event is not None:
                bot.handle(event)
                handled += 1
        except Exception:  # noqa: BLE001
            logger.exception("bad event: %r", raw)
    return handled


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    config = load_config()
    if not config.client_factory:
        raise SystemExit("no WhatsApp client configured (client_factory / WA_STICKER_BOT_CLIENT)")

    adapter = WhatsAppAdapter(load_client(config.client_factory))
    bot = StickerBot(config, adapter)

    health = HealthServer(config.health)
    if config.health.enabled:
        health.start()

    try:
        while True:
            poll_once(adapter, bot)
            time.sleep(0.5)
    except KeyboardInterrupt:
        logger.info("shutting down")
    finally:
        bot.close()
        health.stop()


if __name__ == "__main__":
    main()
