"""Sharing API endpoints."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.schemas.sharing import ShareListResponse, ShareRequest, ShareResponse
from ..core.services import SharingService
from ..database import get_db_session
from ..middleware.auth import get_current_user_id
from ..realtime import EventDispatcher, get_event_dispatcher

router = APIRouter(prefix="/sharing", tags=["sharing"])


@router.post("/", response_model=List[ShareResponse], status_code=201)
async def share_note(
    request: ShareRequest,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
    dispatcher: EventDispatcher = Depends(get_event_dispatcher),
):
    """Share a note with other users."""
    sharing_service = SharingService(session, dispatcher)
    return await sharing_service.share_note(current_user_id, request)


@router.delete("/{share_id}", status_code=204)
async def revoke_share(
    share_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Revoke a note share."""
    sharing_service = SharingService(session)
    await sharing_service.revoke_share(current_user_id, share_id)


@router.get("/", response_model=ShareListResponse)
async def list_shares(
    type: str = Query("given", pattern="^(given|received)$"),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """List shares (given or received)."""
    sharing_service = SharingService(session)
    return await sharing_service.list_shares(current_user_id, type, page=page, per_page=per_page)
