"""Discussion thread persistence."""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import delete, select

from bookmarkd.models.discussion import DiscussionThread
from bookmarkd.repositories.base import Repository


class ThreadRepository(Repository[DiscussionThread]):
    model = DiscussionThread

    async def list_for_club(
        self,
        club_id: int,
        *,
        book_id: Optional[int] = None,
        book_google_id: Optional[str] = None,
    ) -> Sequence[DiscussionThread]:
        """Pinned threads first, then newest first."""
        query = select(DiscussionThread).where(DiscussionThread.club_id == club_id)
        if book_id is not None:
            query = query.where(DiscussionThread.book_id == book_id)
        if book_google_id is not None:
            query = query.where(DiscussionThread.book_google_id == book_google_id)
        query = query.order_by(
            DiscussionThread.is_pinned.desc(),
            DiscussionThread.created_at.desc(),
            DiscussionThread.id.desc(),
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    async def remove_for_club(self, club_id: int) -> None:
        await self.session.execute(
            delete(DiscussionThread).where(DiscussionThread.club_id == club_id)
        )
