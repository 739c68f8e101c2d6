"""Subset of the Telegram Bot API types the bridge reads."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    id: int
    is_bot: bool = False
    first_name: str = ""
    username: Optional[str] = None


class Chat(BaseModel):
    id: int
    type: str = "private"
    title: Optional[str] = None


class PhotoSize(BaseModel):
    file_id: str
    width: int = 0
    height: int = 0


class Message(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message_id: int
    chat: Chat
    from_user: Optional[User] = Field(default=None, alias="from")
    text: Optional[str] = None
    caption: Optional[str] = None
    photo: Optional[List[PhotoSize]] = None


class Update(BaseModel):
    update_id: int
    message: Optional[Message] = None
