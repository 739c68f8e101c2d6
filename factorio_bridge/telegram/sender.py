"""Chat sink used by the router."""

from ..logger import logger
from .client import TelegramClient


class ChatSender:
    """Posts messages into the one configured Telegram chat."""

    def __init__(self, client: TelegramClient, chat_id: int):
        self.client = client
        self.chat_id = chat_id

    async def send_message(self, text: str, silent: bool = False) -> None:
        await self.client.send_message(self.chat_id, text, disable_notification=silent)
        logger.debug(f"Sent message to chat {self.chat_id} (silent={silent})")

    async def reply_message(self, message_id: int, text: str) -> None:
        await self.client.reply_message(self.chat_id, message_id, text)
        logger.debug(f"Replied to message {message_id} in chat {self.chat_id}")
