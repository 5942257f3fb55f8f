"""Follow, like and comment edges and the notifications they trigger.

Counts are always computed from the edge tables at read time. Re-applying an
edge that already exists (duplicate like or follow) is a silent no-op.
"""

from __future__ import annotations

from typing import Optional, Sequence

import structlog
from sqlalchemy.exc import IntegrityError

from bookmarkd.auth.context import Viewer
from bookmarkd.auth.guard import require_viewer, require_viewer_is
from bookmarkd.database import utcnow
from bookmarkd.exceptions import Forbidden, InvalidState, NotFound
from bookmarkd.models.follow import Follow
from bookmarkd.models.notification import NotificationType
from bookmarkd.models.review import Comment, Like, Review
from bookmarkd.models.user import User
from bookmarkd.repositories.notifications import NotificationRepository
from bookmarkd.repositories.reviews import CommentRepository, LikeRepository
from bookmarkd.repositories.users import FollowRepository, UserRepository
from bookmarkd.schemas.base import validate_input
from bookmarkd.schemas.review import CommentCreate
from bookmarkd.services.base import Service
from bookmarkd.services.notifications import NotificationService
from bookmarkd.services.reviews import ReviewService

logger = structlog.get_logger()


class SocialGraphService(Service):
    def __init__(self, session):
        super().__init__(session)
        self.likes = LikeRepository(session)
        self.comments = CommentRepository(session)
        self.follows = FollowRepository(session)
        self.users = UserRepository(session)
        self.notifications = NotificationService(session)

    # ── Likes ──

    async def like(self, viewer: Optional[Viewer], review_id: int, user_id: int) -> Review:
        require_viewer_is(viewer, user_id)
        review = await ReviewService(self.session).get(review_id)

        if await self.likes.find(user_id, review_id) is not None:
            return review

        try:
            async with self.session.begin_nested():
                await self.likes.add(Like(user_id=user_id, review_id=review_id, created_at=utcnow()))
        except IntegrityError:
            # A concurrent request won the race; the like exists either way.
            return review

        await self.notifications.notify(
            recipient_id=review.user_id,
            actor_id=user_id,
            type=NotificationType.LIKE,
            review_id=review.id,
        )
        await self.commit()
        logger.info("review_liked", review_id=review_id, user_id=user_id)
        return review

    async def unlike(self, viewer: Optional[Viewer], review_id: int, user_id: int) -> Review:
        require_viewer_is(viewer, user_id)
        review = await ReviewService(self.session).get(review_id)
        if await self.likes.remove(user_id, review_id):
            await self.commit()
            logger.info("review_unliked", review_id=review_id, user_id=user_id)
        return review

    async def likes_for(self, review_id: int) -> Sequence[Like]:
        return await self.likes.list_for_review(review_id)

    async def like_count(self, review_id: int) -> int:
        return await self.likes.count_for_review(review_id)

    async def is_liked(self, viewer: Optional[Viewer], review_id: int) -> bool:
        if viewer is None:
            return False
        return await self.likes.find(viewer.id, review_id) is not None

    # ── Comments ──

    async def add_comment(
        self, viewer: Optional[Viewer], review_id: int, user_id: int, text: str
    ) -> Comment:
        require_viewer_is(viewer, user_id)
        data = validate_input(CommentCreate, text=(text or "").strip())
        review = await ReviewService(self.session).get(review_id)

        comment = await self.comments.add(
            Comment(user_id=user_id, review_id=review.id, text=data.text, created_at=utcnow())
        )
        await self.notifications.notify(
            recipient_id=review.user_id,
            actor_id=user_id,
            type=NotificationType.COMMENT,
            review_id=review.id,
            comment_id=comment.id,
        )
        await self.commit()
        logger.info("comment_created", comment_id=comment.id, review_id=review_id, user_id=user_id)
        return comment

    async def delete_comment(self, viewer: Optional[Viewer], comment_id: int) -> Comment:
        viewer = require_viewer(viewer)
        comment = await self.comments.get(comment_id)
        if comment is None:
            raise NotFound.entity("Comment", comment_id)
        if comment.user_id != viewer.id:
            raise Forbidden("Only the author can delete this comment.")

        await NotificationRepository(self.session).remove_for_comment(comment.id)
        await self.comments.delete(comment)
        await self.commit()
        logger.info("comment_deleted", comment_id=comment_id)
        return comment

    async def comments_for(self, review_id: int) -> Sequence[Comment]:
        return await self.comments.list_for_review(review_id)

    async def comment_count(self, review_id: int) -> int:
        return await self.comments.count_for_review(review_id)

    # ── Follows ──

    async def _user(self, user_id: int) -> User:
        user = await self.users.get(user_id)
        if user is None:
            raise NotFound.entity("User", user_id)
        return user

    async def follow(self, viewer: Optional[Viewer], follower_id: int, following_id: int) -> User:
        """Returns the followed user."""
        require_viewer_is(viewer, follower_id)
        if follower_id == following_id:
            raise InvalidState("You cannot follow yourself.")
        target = await self._user(following_id)

        if await self.follows.find(follower_id, following_id) is not None:
            return target

        try:
            async with self.session.begin_nested():
                await self.follows.add(
                    Follow(follower_id=follower_id, following_id=following_id, created_at=utcnow())
                )
        except IntegrityError:
            return target

        await self.notifications.notify_once(
            recipient_id=following_id,
            actor_id=follower_id,
            type=NotificationType.FOLLOW,
        )
        await self.commit()
        logger.info("user_followed", follower_id=follower_id, following_id=following_id)
        return target

    async def unfollow(self, viewer: Optional[Viewer], follower_id: int, following_id: int) -> User:
        require_viewer_is(viewer, follower_id)
        target = await self._user(following_id)
        if await self.follows.remove(follower_id, following_id):
            await self.commit()
            logger.info("user_unfollowed", follower_id=follower_id, following_id=following_id)
        return target

    async def followers_of(self, user_id: int) -> Sequence[User]:
        return await self.users.get_many(await self.follows.follower_ids(user_id))

    async def following_of(self, user_id: int) -> Sequence[User]:
        return await self.users.get_many(await self.follows.following_ids(user_id))

    async def follower_count(self, user_id: int) -> int:
        return await self.follows.count_followers(user_id)

    async def following_count(self, user_id: int) -> int:
        return await self.follows.count_following(user_id)

    async def is_following(self, viewer: Optional[Viewer], user_id: int) -> bool:
        if viewer is None or viewer.id == user_id:
            return False
        return await self.follows.find(viewer.id, user_id) is not None
