"""Event type definitions."""

from enum import Enum


class EventType(str, Enum):
    """All event types that travel over the bus."""

    # Factorio log -> Telegram
    GAME_MESSAGE = "game.message"

    # Telegram -> Factorio console
    CHAT_MESSAGE = "chat.message"
    CHAT_COMMAND = "chat.command"
