"""Domain events passed from the producers to the router."""

from datetime import datetime, timezone
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .types import EventType


class BaseEvent(BaseModel):
    """Base class for all events."""

    model_config = ConfigDict(frozen=True)

    event_type: EventType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class GameMessageEvent(BaseEvent):
    """A line from the game log, rendered as a chat message."""

    event_type: Literal[EventType.GAME_MESSAGE] = EventType.GAME_MESSAGE
    text: str = Field(..., description="Message text to post in the chat")
    silent: bool = Field(
        default=False, description="Post without a notification (joins and leaves)"
    )


class ChatMessageEvent(BaseEvent):
    """A plain chat message, qualified with its sender's name."""

    event_type: Literal[EventType.CHAT_MESSAGE] = EventType.CHAT_MESSAGE
    text: str = Field(..., description="Sender-qualified message text")


class ChatCommandEvent(BaseEvent):
    """A chat message starting with the command prefix."""

    event_type: Literal[EventType.CHAT_COMMAND] = EventType.CHAT_COMMAND
    reply_to_message_id: int = Field(
        ..., description="Id of the chat message the console output replies to"
    )
    command: str = Field(..., description="Console command, prefix included")


DomainEvent = Annotated[
    Union[GameMessageEvent, ChatMessageEvent, ChatCommandEvent],
    Field(discriminator="event_type"),
]
