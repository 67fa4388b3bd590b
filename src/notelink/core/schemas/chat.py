"""
Chat schemas.

Contracts for sending direct messages, reading conversation history and the
user picker of the chat screen. The same message schema is the payload of the
``chat-message`` socket event.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class ChatSendRequest(BaseModel):
    """A message to send. The sender is the authenticated user."""

    recipient_id: uuid.UUID = Field(alias="recipientId", description="Recipient user ID")
    text: str = Field(min_length=1, description="Message body")

    model_config = {"populate_by_name": True}

    @field_validator('text')
    @classmethod
    def text_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Message text must not be blank')
        return v


class ChatMessageResponse(BaseModel):
    """A persisted message, as returned to clients and emitted live."""

    id: uuid.UUID
    sender_id: uuid.UUID
    recipient_id: uuid.UUID
    text: str
    created_at: datetime = Field(description="Server-assigned timestamp")
    read: bool
    read_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, message) -> "ChatMessageResponse":
        return cls(
            id=message.id,
            sender_id=message.sender_id,
            recipient_id=message.recipient_id,
            text=message.body,
            created_at=message.created_at,
            read=message.read,
            read_at=message.read_at,
        )


class ChatHistoryResponse(BaseModel):
    """Messages between two users, oldest first."""

    items: List[ChatMessageResponse]
    with_user_id: uuid.UUID
    has_more: bool = Field(description="Older messages exist before the first item")


class MarkReadResponse(BaseModel):
    updated: int = Field(description="Messages switched to read")


class ChatUser(BaseModel):
    """Entry of the chat user picker."""

    id: uuid.UUID
    username: str
    email: Optional[str] = None
    full_name: Optional[str] = None

    class Config:
        from_attributes = True


class PresenceResponse(BaseModel):
    user_id: uuid.UUID
    online: bool = Field(description="Has at least one live connection on this node")
