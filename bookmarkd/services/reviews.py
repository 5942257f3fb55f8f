"""Review authoring. Like and comment edges live in ``social``."""

from __future__ import annotations

from typing import Optional, Sequence

import structlog

from bookmarkd.auth.context import Viewer
from bookmarkd.auth.guard import require_viewer, require_viewer_is
from bookmarkd.database import utcnow
from bookmarkd.exceptions import Forbidden, NotFound
from bookmarkd.models.notification import NotificationType
from bookmarkd.models.review import Review
from bookmarkd.repositories.notifications import NotificationRepository
from bookmarkd.repositories.reviews import CommentRepository, LikeRepository, ReviewRepository
from bookmarkd.repositories.users import FollowRepository
from bookmarkd.schemas.base import validate_input
from bookmarkd.schemas.review import ReviewCreate, ReviewUpdate
from bookmarkd.services.base import Service
from bookmarkd.services.books import BookService
from bookmarkd.services.notifications import NotificationService

logger = structlog.get_logger()


class ReviewService(Service):
    def __init__(self, session):
        super().__init__(session)
        self.reviews = ReviewRepository(session)

    async def get(self, review_id: int) -> Review:
        review = await self.reviews.get(review_id)
        if review is None:
            raise NotFound.entity("Review", review_id)
        return review

    async def list_reviews(self) -> Sequence[Review]:
        return await self.reviews.list_recent()

    async def for_user(self, user_id: int) -> Sequence[Review]:
        return await self.reviews.list_for_user(user_id)

    async def for_book(self, book_id: int) -> Sequence[Review]:
        return await self.reviews.list_for_book(book_id)

    async def add_review(
        self,
        viewer: Optional[Viewer],
        user_id: int,
        book_google_id: str,
        stars: float,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Review:
        require_viewer_is(viewer, user_id)
        data = validate_input(ReviewCreate, stars=stars, title=title, description=description)
        book = await BookService(self.session).find_or_create(book_google_id)

        review = await self.reviews.add(
            Review(
                book_id=book.id,
                user_id=user_id,
                stars=data.stars,
                title=data.title,
                description=data.description,
                created_at=utcnow(),
            )
        )

        followers = await FollowRepository(self.session).follower_ids(user_id)
        await NotificationService(self.session).notify_many(
            followers,
            actor_id=user_id,
            type=NotificationType.REVIEW,
            review_id=review.id,
            book_id=book.id,
        )
        await self.commit()
        logger.info("review_created", review_id=review.id, user_id=user_id, book_id=book.id)
        return review

    async def _authored(self, viewer: Optional[Viewer], review_id: int) -> Review:
        viewer = require_viewer(viewer)
        review = await self.get(review_id)
        if review.user_id != viewer.id:
            raise Forbidden("Only the author can change this review.")
        return review

    async def update_review(
        self,
        viewer: Optional[Viewer],
        review_id: int,
        *,
        stars: Optional[float] = None,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Review:
        data = validate_input(ReviewUpdate, stars=stars, title=title, description=description)
        review = await self._authored(viewer, review_id)
        for field, value in data.model_dump(exclude_none=True).items():
            setattr(review, field, value)
        await self.commit()
        return review

    async def delete_review(self, viewer: Optional[Viewer], review_id: int) -> Review:
        review = await self._authored(viewer, review_id)
        await NotificationRepository(self.session).remove_for_review(review.id)
        await CommentRepository(self.session).remove_for_review(review.id)
        await LikeRepository(self.session).remove_for_review(review.id)
        await self.reviews.delete(review)
        await self.commit()
        logger.info("review_deleted", review_id=review_id)
        return review
