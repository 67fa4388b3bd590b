# In-app notifications
import uuid
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel
from .types import GUID
from .user import User


class NotificationType(str, Enum):
    NOTE_SHARED = "note_shared"
    NEW_MESSAGE = "new_message"


class ReferenceType(str, Enum):
    NOTE = "note"
    MESSAGE = "message"


class Notification(BaseModel):
    """Something that happened to a user while they may have been away."""

    __tablename__ = "notifications"

    recipient_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    sender_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    reference_id: Mapped[uuid.UUID] = mapped_column(GUID(), nullable=False)
    reference_type: Mapped[str] = mapped_column(String(20), nullable=False)
    content: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    sender: Mapped[User] = relationship("User", foreign_keys=[sender_id], lazy="selectin")

    __table_args__ = (
        Index("idx_notifications_recipient_created", "recipient_id", "created_at"),
        Index("idx_notifications_recipient_read", "recipient_id", "read"),
    )

    def __repr__(self) -> str:
        return f"<Notification(type={self.type}, recipient={self.recipient_id}, read={self.read})>"
