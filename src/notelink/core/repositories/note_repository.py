"""Note repository for database operations."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.note import Note
from ..models.share import Share


class NoteRepository:
    """Repository for note database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_note(self, note_data: dict) -> Note:
        """Create new note."""
        note = Note(**note_data)
        self.session.add(note)
        await self.session.commit()
        await self.session.refresh(note)
        return note

    async def get_by_id(self, note_id: UUID) -> Optional[Note]:
        """Get note by ID."""
        stmt = select(Note).where(Note.id == note_id).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id_and_user(self, note_id: UUID, user_id: UUID) -> Optional[Note]:
        """Get note by ID if owned by user."""
        stmt = (
            select(Note)
            .where(and_(Note.id == note_id, Note.owner_id == user_id))
            # shares may have been added since the note was first loaded
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def delete_note(self, note: Note) -> None:
        """Delete a note; its shares go with it."""
        await self.session.delete(note)
        await self.session.commit()

    def _accessible_filter(self, user_id: UUID):
        shared_ids = select(Share.note_id).where(Share.shared_with_user_id == user_id)
        return or_(Note.owner_id == user_id, Note.id.in_(shared_ids))

    async def list_accessible_notes(
        self, user_id: UUID, page: int = 1, per_page: int = 20
    ) -> tuple[List[Note], int]:
        """Notes owned by the user or shared with them, newest first."""
        offset = (page - 1) * per_page
        condition = self._accessible_filter(user_id)

        count_stmt = select(func.count(Note.id)).where(condition)
        total_count = (await self.session.execute(count_stmt)).scalar() or 0

        stmt = (
            select(Note)
            .where(condition)
            .order_by(desc(Note.created_at))
            .offset(offset)
            .limit(per_page)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars()), total_count
