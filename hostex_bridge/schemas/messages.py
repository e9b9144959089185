from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


class Conversation(BaseModel):
    """A guest/host message thread as listed by Hostex."""

    id: str
    reservation_code: Optional[str] = None
    guest_name: str = ""
    property_id: str = ""
    channel: Optional[str] = None
    last_message_at: Optional[str] = None
    unread_count: int = 0


class Message(BaseModel):
    """A single message inside a conversation."""

    id: str
    conversation_id: str
    content: str = ""
    sent_by: Literal["host", "guest"]
    sent_at: datetime
    message_type: Literal["text", "image"] = "text"
    image_url: Optional[str] = None

    @field_validator("sent_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class ConversationPage(BaseModel):
    """One page of the conversation listing plus the server-reported total."""

    data: list[Conversation] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 100
    request_id: Optional[str] = None


class ConversationDetails(BaseModel):
    """A conversation with its full message list."""

    conversation: Conversation
    messages: list[Message] = Field(default_factory=list)
