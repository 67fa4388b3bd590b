"""Notification service implementation."""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...realtime import NEW_NOTIFICATION, EventDispatcher
from ..repositories.notification_repository import NotificationRepository
from ..schemas.notifications import NotificationResponse
from .interfaces import INotificationService

logger = logging.getLogger(__name__)

NOTIFICATION_LIST_LIMIT = 30


class NotificationService(INotificationService):
    """Stores notifications and pushes them to connected recipients."""

    def __init__(self, session: AsyncSession, dispatcher: Optional[EventDispatcher] = None):
        self.session = session
        self.notification_repo = NotificationRepository(session)
        self.dispatcher = dispatcher

    async def notify(
        self,
        recipient_id: UUID,
        sender_id: UUID,
        type: str,
        reference_id: UUID,
        reference_type: str,
        content: Optional[str] = None,
    ) -> NotificationResponse:
        notification = await self.notification_repo.create_notification(
            {
                "recipient_id": recipient_id,
                "sender_id": sender_id,
                "type": type,
                "reference_id": reference_id,
                "reference_type": reference_type,
                "content": content,
            }
        )
        response = NotificationResponse.from_model(notification)
        logger.debug(
            "Notification created",
            extra={"notification_type": type, "recipient_id": str(recipient_id)},
        )

        if self.dispatcher is not None:
            await self.dispatcher.dispatch(recipient_id, NEW_NOTIFICATION, response)
        return response

    async def list_notifications(self, user_id: UUID) -> List[NotificationResponse]:
        notifications = await self.notification_repo.list_for_user(
            user_id, limit=NOTIFICATION_LIST_LIMIT
        )
        return [NotificationResponse.from_model(n) for n in notifications]

    async def unread_count(self, user_id: UUID) -> int:
        return await self.notification_repo.count_unread(user_id)

    async def mark_read(self, user_id: UUID, notification_id: UUID) -> NotificationResponse:
        notification = await self.notification_repo.mark_read(notification_id, user_id)
        if notification is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found"
            )
        return NotificationResponse.from_model(notification)

    async def mark_all_read(self, user_id: UUID) -> int:
        return await self.notification_repo.mark_all_read(user_id)
