from __future__ import annotations


class BotError(Exception):
    """Base class for recoverable sticker bot failures."""


class SendError(BotError):
    """The transport rejected an outbound message."""


class StickerError(BotError):
    pass


class DownloadError(StickerError):
    """The image could not be fetched or the fetch timed out."""


class MalformedImageError(StickerError):
    """The message carries an image payload that cannot be used."""
