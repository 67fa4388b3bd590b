"""Notification repository for database operations."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.notification import Notification


class NotificationRepository:
    """Repository for notification database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_notification(self, data: dict) -> Notification:
        notification = Notification(**data)
        self.session.add(notification)
        await self.session.commit()
        await self.session.refresh(notification)
        return notification

    async def list_for_user(self, user_id: UUID, limit: int = 30) -> List[Notification]:
        """Latest notifications for a user, newest first."""
        stmt = (
            select(Notification)
            .where(Notification.recipient_id == user_id)
            .order_by(desc(Notification.created_at))
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars())

    async def count_unread(self, user_id: UUID) -> int:
        stmt = select(func.count(Notification.id)).where(
            and_(Notification.recipient_id == user_id, Notification.read.is_(False))
        )
        return (await self.session.execute(stmt)).scalar() or 0

    async def mark_read(self, notification_id: UUID, user_id: UUID) -> Optional[Notification]:
        """Mark one notification read if it belongs to the user."""
        stmt = select(Notification).where(
            and_(Notification.id == notification_id, Notification.recipient_id == user_id)
        )
        notification = (await self.session.execute(stmt)).scalar_one_or_none()
        if notification is None:
            return None
        notification.read = True
        await self.session.commit()
        await self.session.refresh(notification)
        return notification

    async def mark_all_read(self, user_id: UUID) -> int:
        stmt = (
            update(Notification)
            .where(and_(Notification.recipient_id == user_id, Notification.read.is_(False)))
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount or 0
