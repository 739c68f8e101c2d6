"""
Telegram Bot API client.

Only what the bridge needs: long-poll ``getUpdates`` and
``sendMessage`` (plain or as a reply).
"""

from types import TracebackType
from typing import Any, AsyncIterator, List, Optional

import httpx
from pydantic import ValidationError

from ..logger import logger
from .models import Message, Update

DEFAULT_API_URL = "https://api.telegram.org"


class TelegramError(Exception):
    """A Bot API call failed."""


class TelegramClient:
    """Async Bot API client bound to one bot token."""

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        poll_timeout: int = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.poll_timeout = poll_timeout
        self._client = httpx.AsyncClient(
            base_url=f"{api_url.rstrip('/')}/bot{token}/",
            # Long polls hold the read open for poll_timeout seconds
            timeout=httpx.Timeout(10.0, read=poll_timeout + 10.0),
            transport=transport,
        )

    async def __aenter__(self) -> "TelegramClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _call(self, method: str, payload: dict[str, Any]) -> Any:
        response = await self._client.post(method, json=payload)

        try:
            data = response.json()
        except ValueError as e:
            raise TelegramError(
                f"{method} returned HTTP {response.status_code} with a non-JSON body"
            ) from e

        if not response.is_success or not data.get("ok"):
            description = data.get("description", f"HTTP {response.status_code}")
            raise TelegramError(f"{method} failed: {description}")

        return data.get("result")

    async def get_updates(self, offset: Optional[int] = None) -> List[Update]:
        """Long-poll for new message updates.

        Updates that do not validate are logged and skipped.
        """
        payload: dict[str, Any] = {
            "timeout": self.poll_timeout,
            "allowed_updates": ["message"],
        }
        if offset is not None:
            payload["offset"] = offset

        updates = []
        for raw in await self._call("getUpdates", payload) or []:
            try:
                updates.append(Update.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Skipping malformed update {raw.get('update_id')}: {e}")
                if isinstance(raw.get("update_id"), int):
                    updates.append(Update(update_id=raw["update_id"]))
        return updates

    async def iter_messages(self) -> AsyncIterator[Message]:
        """Yield inbound messages forever, confirming each update as it is read."""
        offset: Optional[int] = None
        while True:
            for update in await self.get_updates(offset):
                offset = update.update_id + 1
                if update.message is not None:
                    yield update.message

    async def send_message(
        self, chat_id: int, text: str, disable_notification: bool = False
    ) -> Message:
        result = await self._call(
            "sendMessage",
            {
                "chat_id": chat_id,
                "text": text,
                "disable_notification": disable_notification,
            },
        )
        return Message.model_validate(result)

    async def reply_message(self, chat_id: int, message_id: int, text: str) -> Message:
        """Send text as a reply, or as a plain message if the original is gone."""
        result = await self._call(
            "sendMessage",
            {
                "chat_id": chat_id,
                "text": text,
                "reply_parameters": {
                    "message_id": message_id,
                    "allow_sending_without_reply": True,
                },
            },
        )
        return Message.model_validate(result)
