"""Notification schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class NotificationSender(BaseModel):
    id: uuid.UUID
    username: str
    full_name: Optional[str] = None


class NotificationResponse(BaseModel):
    """A notification, as listed and as emitted with ``new_notification``."""

    id: uuid.UUID
    type: str = Field(description="note_shared or new_message")
    sender: NotificationSender
    reference_id: uuid.UUID = Field(description="Note or message the notification is about")
    reference_type: str = Field(description="note or message")
    content: Optional[str] = None
    read: bool
    created_at: datetime

    @classmethod
    def from_model(cls, notification) -> "NotificationResponse":
        sender = notification.sender
        return cls(
            id=notification.id,
            type=notification.type,
            sender=NotificationSender(
                id=sender.id, username=sender.username, full_name=sender.full_name
            ),
            reference_id=notification.reference_id,
            reference_type=notification.reference_type,
            content=notification.content,
            read=notification.read,
            created_at=notification.created_at,
        )


class UnreadCountResponse(BaseModel):
    count: int
