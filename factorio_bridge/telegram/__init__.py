"""Telegram side of the bridge: Bot API client, sender and listener."""

from .client import TelegramClient, TelegramError
from .listener import ChatListener
from .sender import ChatSender

__all__ = [
    "ChatListener",
    "ChatSender",
    "TelegramClient",
    "TelegramError",
]
