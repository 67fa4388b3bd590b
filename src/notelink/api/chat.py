"""Chat API endpoints."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.schemas.chat import (
    ChatHistoryResponse,
    ChatMessageResponse,
    ChatSendRequest,
    ChatUser,
    MarkReadResponse,
    PresenceResponse,
)
from ..core.services import ChatService
from ..database import get_db_session
from ..middleware.auth import get_current_user_id
from ..realtime import EventDispatcher, MessagePersistenceError, get_event_dispatcher

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/messages", response_model=ChatMessageResponse, status_code=201)
async def send_message(
    request: ChatSendRequest,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
    dispatcher: EventDispatcher = Depends(get_event_dispatcher),
):
    """Send a direct message. Same path as the ``send-message`` socket event."""
    chat_service = ChatService(session, dispatcher)
    try:
        return await chat_service.send_message(current_user_id, request)
    except MessagePersistenceError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Message could not be stored, please retry",
        )


@router.get("/history/{user_id}", response_model=ChatHistoryResponse)
async def get_history(
    user_id: UUID,
    limit: Optional[int] = Query(None, ge=1),
    before: Optional[datetime] = Query(None),
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Conversation with another user, oldest first."""
    chat_service = ChatService(session)
    return await chat_service.get_history(current_user_id, user_id, limit=limit, before=before)


@router.post("/mark-read/{user_id}", response_model=MarkReadResponse)
async def mark_read(
    user_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Mark messages received from ``user_id`` as read."""
    updated = await ChatService(session).mark_read(current_user_id, user_id)
    return MarkReadResponse(updated=updated)


@router.get("/users", response_model=List[ChatUser])
async def list_chat_users(
    search: Optional[str] = Query(None, max_length=100),
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Users available to chat with."""
    return await ChatService(session).list_chat_users(current_user_id, search)


@router.get("/presence/{user_id}", response_model=PresenceResponse)
async def presence(
    user_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    dispatcher: EventDispatcher = Depends(get_event_dispatcher),
):
    return PresenceResponse(user_id=user_id, online=dispatcher.is_online(user_id))
