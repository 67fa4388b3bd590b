# Direct chat messages
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel, utcnow
from .types import GUID, UTCDateTime


class ChatMessage(BaseModel):
    """One message between two users.

    Written once at send time; afterwards only the read flag changes.
    """

    __tablename__ = "chat_messages"

    sender_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    recipient_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    body: Mapped[str] = mapped_column(Text, nullable=False)

    read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    read_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    __table_args__ = (
        Index("idx_chat_messages_pair_created", "sender_id", "recipient_id", "created_at"),
        Index("idx_chat_messages_recipient_read", "recipient_id", "read"),
    )

    def __repr__(self) -> str:
        return f"<ChatMessage(sender={self.sender_id}, recipient={self.recipient_id}, read={self.read})>"

    def mark_read(self, when: Optional[datetime] = None) -> bool:
        """unread -> read. Returns False if it was already read."""
        if self.read:
            return False
        self.read = True
        self.read_at = when or utcnow()
        return True
