"""
Event system for the Factorio bridge.

Typed domain events and the bounded bus that carries them from the log
monitor and the chat listener to the router.
"""

from .base import (
    BaseEvent,
    ChatCommandEvent,
    ChatMessageEvent,
    DomainEvent,
    GameMessageEvent,
)
from .bus import BusClosedError, EventBus
from .types import EventType

__all__ = [
    "BaseEvent",
    "BusClosedError",
    "ChatCommandEvent",
    "ChatMessageEvent",
    "DomainEvent",
    "EventBus",
    "EventType",
    "GameMessageEvent",
]
