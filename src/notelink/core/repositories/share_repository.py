"""Share repository for database operations."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.share import Share


class ShareRepository:
    """Repository for share database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_share(self, share_data: dict) -> Share:
        """Create new share."""
        share = Share(**share_data)
        self.session.add(share)
        await self.session.commit()
        await self.session.refresh(share)
        return share

    async def get_existing_share(self, note_id: UUID, shared_with_user_id: UUID) -> Optional[Share]:
        """Get the share of a note with a given user, if any."""
        stmt = select(Share).where(
            and_(Share.note_id == note_id, Share.shared_with_user_id == shared_with_user_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_user_share(self, share_id: UUID, user_id: UUID) -> Optional[Share]:
        """Get share if the user gave it or received it."""
        stmt = select(Share).where(
            Share.id == share_id,
            or_(Share.shared_by_user_id == user_id, Share.shared_with_user_id == user_id),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def delete_share(self, share: Share) -> None:
        await self.session.delete(share)
        await self.session.commit()

    async def is_shared_with(self, note_id: UUID, user_id: UUID) -> bool:
        return await self.get_existing_share(note_id, user_id) is not None

    async def list_shares(
        self, user_id: UUID, given: bool, page: int = 1, per_page: int = 20
    ) -> tuple[List[Share], int]:
        """List shares created by (given) or received by the user."""
        offset = (page - 1) * per_page
        column = Share.shared_by_user_id if given else Share.shared_with_user_id

        count_stmt = select(func.count(Share.id)).where(column == user_id)
        total_count = (await self.session.execute(count_stmt)).scalar() or 0

        stmt = (
            select(Share)
            .where(column == user_id)
            .order_by(desc(Share.created_at))
            .offset(offset)
            .limit(per_page)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars()), total_count
