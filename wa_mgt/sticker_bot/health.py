from __future__ import annotations

import asyncio
import logging
import threading

from aiohttp import web

from wa_mgt.sticker_bot.config import HealthConfig

logger = logging.getLogger("wa_sticker_bot")


def create_app(config: HealthConfig) -> web.Application:
    async def health(request: web.Request) -> web.Response:
        return web.Response(text=config.body)

    app = web.Application()
    app.router.add_get("/health", health)
    return app


class HealthServer:
    """Serves the liveness endpoint from a background thread."""

    def __init__(self, config: HealthConfig) -> None:
        self.config = config
        self._loop: asyncio.AbstractEventLoop | None = None
        self._runner: web.AppRunner | None = None
        self._thread: threading.Thread | None = None
        self._ready = threading.Event()
        self._error: BaseException | None = None

    def start(self, timeout: float = 10.0) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._ready.clear()
        self._error = None
        self._thread = threading.Thread(target=self._serve, name="health-server", daemon=True)
        self._thread.start()
        if not self._ready.wait(timeout):
            raise RuntimeError("health server did not start in time")
        if self._error is not None:
            raise RuntimeError(f"health server failed to start: {self._error}") from self._error

    def stop(self) -> None:
        if not self._loop or not self._thread:
            return
        asyncio.run_coroutine_threadsafe(self._shutdown(), self._loop).result(timeout=10)
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=10)
        self._thread = None

    def _serve(self) -> None:
        loop = asyncio.new_event_loop()
        self._loop = loop
        asyncio.set_event_loop(loop)
        try:
            loop.run_until_complete(self._startup())
        except OSError as exc:
            logger.error("health server bind failed: %s", exc)
            self._error = exc
            loop.run_until_complete(self._shutdown())
            self._loop = None
            self._ready.set()
            loop.close()
            return
        logger.info("health endpoint listening on %s:%s", self.config.host, self.config.port)
        self._ready.set()
        try:
            loop.run_forever()
        finally:
            loop.close()

    async def _startup(self) -> None:
        self._runner = web.AppRunner(create_app(self.config))
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.config.host, self.config.port)
        await site.start()

    async def _shutdown(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
