"""Inbound Telegram messages turned into bus events."""

from typing import AsyncIterator, Optional, Protocol

from ..events import ChatCommandEvent, ChatMessageEvent, EventBus
from ..logger import logger
from .models import Message

IMAGE_PLACEHOLDER = "[IMG]"


class MessageSource(Protocol):
    def iter_messages(self) -> AsyncIterator[Message]: ...


class ChatListener:
    """Listens to one Telegram chat and publishes its messages on the bus."""

    def __init__(
        self,
        source: MessageSource,
        chat_id: int,
        bus: EventBus,
        command_prefix: str = "/",
    ):
        """Initialize chat listener.

        Args:
            source: Stream of inbound Telegram messages
            chat_id: The only chat whose messages are relayed
            bus: Event bus the chat events are published on
            command_prefix: Messages starting with it are console commands
        """
        self.source = source
        self.chat_id = chat_id
        self.bus = bus
        self.command_prefix = command_prefix

    async def run(self) -> None:
        """Relay messages until the source fails or the task is cancelled.

        Raises:
            BusClosedError: The bus was closed under the listener
        """
        logger.info(f"Starting Telegram listener for chat {self.chat_id}")

        async for message in self.source.iter_messages():
            event = self.to_event(message)
            if event is not None:
                await self.bus.publish(event)

    def to_event(
        self, message: Message
    ) -> Optional[ChatMessageEvent | ChatCommandEvent]:
        """Convert a message into a bus event, or None if it is not relayed."""
        if message.chat.id != self.chat_id:
            logger.debug(f"Ignoring message from foreign chat {message.chat.id}")
            return None

        sender = message.from_user.first_name if message.from_user else ""
        if not sender:
            logger.warning(
                f"Skipping message {message.message_id}: sender name unavailable"
            )
            return None

        if message.text is None:
            if message.photo:
                return ChatMessageEvent(text=f"{sender}: {IMAGE_PLACEHOLDER}")
            logger.debug(f"Ignoring non-text message {message.message_id}")
            return None

        if message.text.startswith(self.command_prefix):
            return ChatCommandEvent(
                reply_to_message_id=message.message_id, command=message.text
            )

        return ChatMessageEvent(text=f"{sender}: {message.text}")
