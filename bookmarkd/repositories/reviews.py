"""Review, Like and Comment persistence."""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import delete, func, select

from bookmarkd.models.review import Comment, Like, Review
from bookmarkd.repositories.base import Repository


class ReviewRepository(Repository[Review]):
    model = Review

    async def list_recent(self) -> Sequence[Review]:
        result = await self.session.execute(
            select(Review).order_by(Review.created_at.desc(), Review.id.desc())
        )
        return result.scalars().all()

    async def list_for_user(self, user_id: int) -> Sequence[Review]:
        result = await self.session.execute(
            select(Review)
            .where(Review.user_id == user_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
        )
        return result.scalars().all()

    async def list_for_book(self, book_id: int) -> Sequence[Review]:
        result = await self.session.execute(
            select(Review)
            .where(Review.book_id == book_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
        )
        return result.scalars().all()

    async def latest_by_authors(self, author_ids: Sequence[int], limit: int) -> Sequence[Review]:
        if not author_ids:
            return []
        result = await self.session.execute(
            select(Review)
            .where(Review.user_id.in_(author_ids))
            .order_by(Review.created_at.desc(), Review.id.desc())
            .limit(limit)
        )
        return result.scalars().all()


class LikeRepository(Repository[Like]):
    model = Like

    async def find(self, user_id: int, review_id: int) -> Optional[Like]:
        result = await self.session.execute(
            select(Like).where(Like.user_id == user_id, Like.review_id == review_id)
        )
        return result.scalar_one_or_none()

    async def remove(self, user_id: int, review_id: int) -> int:
        result = await self.session.execute(
            delete(Like).where(Like.user_id == user_id, Like.review_id == review_id)
        )
        await self.session.flush()
        return result.rowcount or 0

    async def list_for_review(self, review_id: int) -> Sequence[Like]:
        result = await self.session.execute(
            select(Like).where(Like.review_id == review_id).order_by(Like.created_at, Like.id)
        )
        return result.scalars().all()

    async def count_for_review(self, review_id: int) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(Like).where(Like.review_id == review_id)
        )
        return result.scalar() or 0

    async def remove_for_review(self, review_id: int) -> None:
        await self.session.execute(delete(Like).where(Like.review_id == review_id))


class CommentRepository(Repository[Comment]):
    model = Comment

    async def list_for_review(self, review_id: int) -> Sequence[Comment]:
        result = await self.session.execute(
            select(Comment)
            .where(Comment.review_id == review_id)
            .order_by(Comment.created_at, Comment.id)
        )
        return result.scalars().all()

    async def count_for_review(self, review_id: int) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(Comment).where(Comment.review_id == review_id)
        )
        return result.scalar() or 0

    async def remove_for_review(self, review_id: int) -> None:
        await self.session.execute(delete(Comment).where(Comment.review_id == review_id))
