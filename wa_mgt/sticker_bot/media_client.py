from __future__ import annotations

import requests

from wa_mgt.sticker_bot.config import StickerConfig
from wa_mgt.sticker_bot.errors import DownloadError

CHUNK_SIZE = 64 * 1024


class MediaClient:
    def __init__(self, config: StickerConfig) -> None:
        self.config = config

    def download(self, url: str) -> bytes:
        limit = self.config.max_download_bytes
        try:
            response = requests.get(url, timeout=self.config.download_timeout_seconds, stream=True)
        except requests.RequestException as exc:
            raise DownloadError(f"download failed: {exc}") from exc

        try:
            response.raise_for_status()
            declared = response.headers.get("Content-Length")
            if limit is not None and declared and declared.isdigit() and int(declared) > limit:
                raise DownloadError(f"image too large: {declared} > {limit} bytes")

            chunks: list[bytes] = []
            received = 0
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                received += len(chunk)
                if limit is not None and received > limit:
                    raise DownloadError(f"image too large: more than {limit} bytes")
                chunks.append(chunk)
            return b"".join(chunks)
        except requests.RequestException as exc:
            raise DownloadError(f"download failed: {exc}") from exc
        finally:
            response.close()
