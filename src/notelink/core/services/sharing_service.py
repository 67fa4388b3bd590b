"""Sharing service implementation."""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...realtime import NOTE_SHARED, EventDispatcher
from ..models.notification import NotificationType, ReferenceType
from ..models.share import Share
from ..repositories.note_repository import NoteRepository
from ..repositories.share_repository import ShareRepository
from ..repositories.user_repository import UserRepository
from ..schemas.sharing import ShareListResponse, ShareRequest, ShareResponse
from .interfaces import ISharingService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)


class SharingService(ISharingService):
    """Sharing service implementation."""

    def __init__(self, session: AsyncSession, dispatcher: Optional[EventDispatcher] = None):
        self.session = session
        self.share_repo = ShareRepository(session)
        self.user_repo = UserRepository(session)
        self.note_repo = NoteRepository(session)
        self.dispatcher = dispatcher
        self.notifications = NotificationService(session, dispatcher)

    async def share_note(self, user_id: UUID, request: ShareRequest) -> List[ShareResponse]:
        """Share an owned note.

        Every username is checked before anything is written. Users the note
        is already shared with keep their existing share and are not
        notified again.
        """
        note = await self.note_repo.get_by_id_and_user(request.note_id, user_id)
        if not note:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Note not found or not owned by user"
            )

        targets = []
        for username in request.shared_with_usernames:
            target_user = await self.user_repo.get_by_username(username)
            if not target_user:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND, detail=f"User '{username}' not found"
                )
            if target_user.id == user_id:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Cannot share note with yourself",
                )
            targets.append(target_user)

        share_responses = []
        for target_user in targets:
            existing_share = await self.share_repo.get_existing_share(note.id, target_user.id)
            if existing_share:
                share_responses.append(self._share_to_response(existing_share))
                continue

            share = await self.share_repo.create_share(
                {
                    "note_id": note.id,
                    "shared_by_user_id": user_id,
                    "shared_with_user_id": target_user.id,
                    "share_message": request.message,
                }
            )
            share_responses.append(self._share_to_response(share))
            logger.info(
                "Note shared",
                extra={"note_id": str(note.id), "user_id": str(user_id), "recipient_id": str(target_user.id)},
            )

            if self.dispatcher is not None:
                await self.dispatcher.dispatch(target_user.id, NOTE_SHARED, {"noteId": str(note.id)})
            await self.notifications.notify(
                recipient_id=target_user.id,
                sender_id=user_id,
                type=NotificationType.NOTE_SHARED.value,
                reference_id=note.id,
                reference_type=ReferenceType.NOTE.value,
                content=request.message or f"shared a note with you: {note.title}",
            )

        return share_responses

    async def revoke_share(self, user_id: UUID, share_id: UUID) -> bool:
        """Remove a share.

        Either side may do this: the sharer revokes access, the recipient drops
        the note from their list.
        """
        share = await self.share_repo.get_user_share(share_id, user_id)
        if not share:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Share not found")
        await self.share_repo.delete_share(share)
        return True

    async def list_shares(
        self, user_id: UUID, share_type: str, page: int = 1, per_page: int = 20
    ) -> ShareListResponse:
        if share_type not in ("given", "received"):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="type must be 'given' or 'received'",
            )
        shares, total = await self.share_repo.list_shares(
            user_id, given=share_type == "given", page=page, per_page=per_page
        )
        items = [self._share_to_response(share) for share in shares]
        return ShareListResponse.create(items=items, total=total, page=page, per_page=per_page)

    def _share_to_response(self, share: Share) -> ShareResponse:
        """Convert share model to response."""
        return ShareResponse(
            id=share.id,
            note_id=share.note_id,
            note_title=share.note.title,
            shared_by_user_id=share.shared_by_user_id,
            shared_with_user_id=share.shared_with_user_id,
            shared_with_username=share.shared_with_user.username,
            message=share.share_message,
            shared_at=share.shared_at,
        )
