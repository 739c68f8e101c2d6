"""Event router - the single consumer of the event bus.

Every event is dispatched to exactly one sink and awaited before the next
event is taken, so sink calls never overlap. Sink failures are logged and the
event is dropped; nothing is retried.
"""

import logging
from typing import Optional, Protocol, assert_never

from .events import (
    ChatCommandEvent,
    ChatMessageEvent,
    DomainEvent,
    EventBus,
    GameMessageEvent,
)
from .logger import log_exception, logger


class ChatSink(Protocol):
    async def send_message(self, text: str, silent: bool = False) -> None: ...

    async def reply_message(self, message_id: int, text: str) -> None: ...


class CommandSink(Protocol):
    async def send_command(self, command: str) -> str: ...


class EventRouter:
    """Routes game events to the chat and chat events to the game console."""

    def __init__(self, bus: EventBus, chat: ChatSink, console: CommandSink):
        self.bus = bus
        self.chat = chat
        self.console = console

    async def run(self) -> None:
        """Drain the bus until it is closed and empty."""
        logger.info("Starting event router")

        async for event in self.bus:
            logger.info(f"Event: {event!r}")
            await self.dispatch(event)

        logger.info("Event bus closed, router stopped")

    async def dispatch(self, event: DomainEvent) -> None:
        match event:
            case GameMessageEvent():
                await self._send_to_chat(event.text, event.silent)
            case ChatMessageEvent():
                # Plain chat text is run as a console command verbatim; Factorio
                # prints anything that is not a /command into the game chat.
                await self._send_command(event.text)
            case ChatCommandEvent():
                response = await self._send_command(event.command)
                if response is not None:
                    await self._reply_in_chat(event.reply_to_message_id, response)
            case _:
                assert_never(event)

    @log_exception("Failed to send message to Telegram", level=logging.WARNING)
    async def _send_to_chat(self, text: str, silent: bool) -> None:
        await self.chat.send_message(text, silent)

    @log_exception("Failed to send command to Factorio", level=logging.WARNING)
    async def _send_command(self, command: str) -> Optional[str]:
        return await self.console.send_command(command)

    @log_exception("Failed to send reply to Telegram", level=logging.WARNING)
    async def _reply_in_chat(self, message_id: int, text: str) -> None:
        await self.chat.reply_message(message_id, text)
