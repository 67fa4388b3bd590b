"""Note service implementation."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...realtime import NOTE_DELETED, EventDispatcher
from ..models.note import Note
from ..repositories.note_repository import NoteRepository
from ..repositories.share_repository import ShareRepository
from ..schemas.notes import NoteCreate, NoteListItem, NoteListResponse, NoteResponse, OwnerInfo
from .interfaces import INoteService

logger = logging.getLogger(__name__)


class NoteService(INoteService):
    """Note service implementation."""

    def __init__(self, session: AsyncSession, dispatcher: Optional[EventDispatcher] = None):
        self.session = session
        self.note_repo = NoteRepository(session)
        # Used to check access when the note is shared with the user
        self.share_repo = ShareRepository(session)
        self.dispatcher = dispatcher

    async def create_note(self, user_id: UUID, request: NoteCreate) -> NoteResponse:
        """Create new note."""
        note = await self.note_repo.create_note(
            {
                "title": request.title,
                "course_code": request.course_code,
                "description": request.description,
                "instructor": request.instructor,
                "content": request.content,
                "owner_id": user_id,
            }
        )
        return self._note_to_response(note, user_id)

    async def get_note(self, note_id: UUID, user_id: UUID) -> NoteResponse:
        """Get note if the user owns it or it was shared with them."""
        note = await self.note_repo.get_by_id(note_id)
        if not note:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found")

        if note.owner_id != user_id and not await self.share_repo.is_shared_with(note_id, user_id):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")

        return self._note_to_response(note, user_id)

    async def list_notes(self, user_id: UUID, page: int = 1, per_page: int = 20) -> NoteListResponse:
        notes, total = await self.note_repo.list_accessible_notes(user_id, page, per_page)
        items = [
            NoteListItem(
                id=note.id,
                title=note.title,
                course_code=note.course_code,
                description=note.description,
                owner_username=note.owner.username,
                is_owned=note.owner_id == user_id,
                created_at=note.created_at,
            )
            for note in notes
        ]
        return NoteListResponse.create(items=items, total=total, page=page, per_page=per_page)

    async def delete_note(self, note_id: UUID, user_id: UUID) -> bool:
        """Delete an owned note and push ``note-deleted`` to its recipients."""
        note = await self.note_repo.get_by_id_and_user(note_id, user_id)
        if not note:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Note not found or not owned by user"
            )

        recipients = note.shared_user_ids()
        await self.note_repo.delete_note(note)
        logger.info(
            "Note deleted",
            extra={"note_id": str(note_id), "user_id": str(user_id), "shared_with": len(recipients)},
        )

        if self.dispatcher is not None:
            for recipient_id in recipients:
                await self.dispatcher.dispatch(recipient_id, NOTE_DELETED, {"noteId": str(note_id)})
        return True

    def _note_to_response(self, note: Note, current_user_id: UUID) -> NoteResponse:
        is_owned = note.owner_id == current_user_id
        owner = note.owner
        return NoteResponse(
            id=note.id,
            title=note.title,
            course_code=note.course_code,
            description=note.description,
            instructor=note.instructor,
            content=note.content,
            owner=OwnerInfo(id=owner.id, username=owner.username, full_name=owner.full_name),
            is_owned=is_owned,
            # Recipients are only visible to the owner
            shared_with=note.shared_user_ids() if is_owned else [],
            created_at=note.created_at,
            updated_at=note.updated_at,
        )
