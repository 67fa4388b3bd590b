"""Chat message repository.

Messages are append-only: rows are inserted once and afterwards only the
read flag is updated. Nothing here deletes messages.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import utcnow
from ..models.message import ChatMessage


def _conversation(user_a: UUID, user_b: UUID):
    return or_(
        and_(ChatMessage.sender_id == user_a, ChatMessage.recipient_id == user_b),
        and_(ChatMessage.sender_id == user_b, ChatMessage.recipient_id == user_a),
    )


class MessageRepository:
    """Repository for chat message database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def save(self, sender_id: UUID, recipient_id: UUID, body: str, created_at: datetime) -> ChatMessage:
        """Insert and commit a message; returns it with id and timestamp set."""
        message = ChatMessage(
            sender_id=sender_id,
            recipient_id=recipient_id,
            body=body,
            created_at=created_at,
            updated_at=created_at,
        )
        self.session.add(message)
        await self.session.commit()
        await self.session.refresh(message)
        return message

    async def latest_timestamp(self, sender_id: UUID, recipient_id: UUID) -> Optional[datetime]:
        """Timestamp of the newest message sent from sender to recipient."""
        stmt = select(func.max(ChatMessage.created_at)).where(
            and_(ChatMessage.sender_id == sender_id, ChatMessage.recipient_id == recipient_id)
        )
        return (await self.session.execute(stmt)).scalar()

    async def get_conversation(
        self,
        user_a: UUID,
        user_b: UUID,
        limit: int = 200,
        before: Optional[datetime] = None,
    ) -> tuple[List[ChatMessage], bool]:
        """Messages between two users, oldest first.

        Returns at most ``limit`` of the newest messages older than ``before``
        and whether even older ones exist.
        """
        condition = _conversation(user_a, user_b)
        if before is not None:
            condition = and_(condition, ChatMessage.created_at < before)

        stmt = (
            select(ChatMessage)
            .where(condition)
            .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
            .limit(limit + 1)
            # read flags may have changed through bulk updates
            .execution_options(populate_existing=True)
        )
        rows = list((await self.session.execute(stmt)).scalars())
        has_more = len(rows) > limit
        rows = rows[:limit]
        rows.reverse()
        return rows, has_more

    async def mark_conversation_read(self, reader_id: UUID, other_id: UUID) -> int:
        """Mark every unread message from ``other_id`` to ``reader_id`` as read."""
        stmt = (
            update(ChatMessage)
            .where(
                and_(
                    ChatMessage.sender_id == other_id,
                    ChatMessage.recipient_id == reader_id,
                    ChatMessage.read.is_(False),
                )
            )
            .values(read=True, read_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount or 0
