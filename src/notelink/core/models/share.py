# Note sharing between users
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel, utcnow
from .types import GUID, UTCDateTime

if TYPE_CHECKING:
    from .note import Note
    from .user import User


class Share(BaseModel):
    """Read access to a note granted by its owner."""

    __tablename__ = "shares"

    note_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("notes.id", ondelete="CASCADE"), nullable=False
    )
    shared_by_user_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    shared_with_user_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    shared_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, nullable=False)
    share_message: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    note: Mapped["Note"] = relationship("Note", back_populates="shares", lazy="selectin")
    shared_by_user: Mapped["User"] = relationship(
        "User", foreign_keys=[shared_by_user_id], lazy="selectin"
    )
    shared_with_user: Mapped["User"] = relationship(
        "User", foreign_keys=[shared_with_user_id], lazy="selectin"
    )

    __table_args__ = (
        UniqueConstraint("note_id", "shared_with_user_id", name="uq_shares_note_recipient"),
        CheckConstraint(
            "share_message IS NULL OR length(share_message) <= 500", name="ck_shares_message_len"
        ),
        Index("idx_shares_shared_by", "shared_by_user_id"),
        Index("idx_shares_shared_with", "shared_with_user_id"),
    )

    def __repr__(self) -> str:
        return f"<Share(note_id={self.note_id}, shared_with={self.shared_with_user_id})>"
