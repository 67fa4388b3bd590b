# Note model for user content
import uuid
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel
from .types import GUID

if TYPE_CHECKING:
    from .share import Share
    from .user import User


class Note(BaseModel):
    """Course note uploaded by a user."""

    __tablename__ = "notes"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    course_code: Mapped[str] = mapped_column(String(30), nullable=False)
    instructor: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    owner_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    owner: Mapped["User"] = relationship(
        "User",
        back_populates="notes",
        lazy="selectin",
    )

    shares: Mapped[List["Share"]] = relationship(
        "Share",
        back_populates="note",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("length(title) <= 200", name="ck_notes_title_len"),
        CheckConstraint("length(course_code) <= 30", name="ck_notes_course_code_len"),
        Index("idx_notes_owner_id", "owner_id"),
        Index("idx_notes_course_code", "course_code"),
    )

    def __repr__(self) -> str:
        return f"<Note(title='{self.title}', course_code='{self.course_code}')>"

    def shared_user_ids(self) -> List[uuid.UUID]:
        """IDs of users this note is shared with."""
        return [share.shared_with_user_id for share in self.shares]
