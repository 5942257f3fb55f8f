"""Notification persistence."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import delete, func, select, update

from bookmarkd.models.notification import Notification
from bookmarkd.repositories.base import Repository


class NotificationRepository(Repository[Notification]):
    model = Notification

    async def list_for_user(self, user_id: int, limit: int = 50) -> Sequence[Notification]:
        result = await self.session.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
        )
        return result.scalars().all()

    async def count_unread(self, user_id: int) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == user_id, Notification.read.is_(False))
        )
        return result.scalar() or 0

    async def mark_all_read(self, user_id: int) -> int:
        result = await self.session.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.read.is_(False))
            .values(read=True)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.flush()
        return result.rowcount or 0

    async def remove_for_review(self, review_id: int) -> None:
        await self.session.execute(delete(Notification).where(Notification.review_id == review_id))

    async def remove_for_comment(self, comment_id: int) -> None:
        await self.session.execute(delete(Notification).where(Notification.comment_id == comment_id))

    async def remove_for_club(self, club_id: int) -> None:
        await self.session.execute(delete(Notification).where(Notification.club_id == club_id))

    async def remove_for_thread(self, thread_id: int) -> None:
        await self.session.execute(
            delete(Notification).where(Notification.discussion_thread_id == thread_id)
        )

    async def exists(self, user_id: int, from_user_id: int, type) -> bool:
        result = await self.session.execute(
            select(Notification.id)
            .where(
                Notification.user_id == user_id,
                Notification.from_user_id == from_user_id,
                Notification.type == type,
            )
            .limit(1)
        )
        return result.first() is not None
