"""Notification API endpoints."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.schemas.common import MessageResponse
from ..core.schemas.notifications import NotificationResponse, UnreadCountResponse
from ..core.services import NotificationService
from ..database import get_db_session
from ..middleware.auth import get_current_user_id

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/", response_model=List[NotificationResponse])
async def list_notifications(
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Latest notifications, newest first."""
    return await NotificationService(session).list_notifications(current_user_id)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    count = await NotificationService(session).unread_count(current_user_id)
    return UnreadCountResponse(count=count)


@router.put("/read-all", response_model=MessageResponse)
async def mark_all_read(
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    await NotificationService(session).mark_all_read(current_user_id)
    return MessageResponse(message="All notifications marked as read")


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    return await NotificationService(session).mark_read(current_user_id, notification_id)
