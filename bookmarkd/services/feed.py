"""Fan-out-on-read activity feed built from the viewer's follow graph."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import structlog

from bookmarkd.auth.context import Viewer
from bookmarkd.auth.guard import require_viewer_is
from bookmarkd.config import get_settings
from bookmarkd.models.review import Review
from bookmarkd.repositories.reviews import ReviewRepository
from bookmarkd.repositories.users import FollowRepository
from bookmarkd.services.base import Service

logger = structlog.get_logger()


@dataclass
class Activity:
    type: str
    user_id: int
    created_at: datetime
    review: Optional[Review] = None


def _sort_key(activity: Activity) -> tuple[datetime, int]:
    created_at = activity.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    review_id = activity.review.id if activity.review is not None else 0
    return created_at, review_id


class ActivityFeedService(Service):
    def __init__(self, session):
        super().__init__(session)
        self.follows = FollowRepository(session)
        self.reviews = ReviewRepository(session)

    async def activity_feed(self, viewer: Optional[Viewer], user_id: int) -> list[Activity]:
        require_viewer_is(viewer, user_id)
        settings = get_settings()

        authors = set(await self.follows.following_ids(user_id))
        authors.add(user_id)
        reviews = await self.reviews.latest_by_authors(
            sorted(authors), limit=settings.feed_review_window
        )

        activities = [
            Activity(type="review", user_id=r.user_id, created_at=r.created_at, review=r)
            for r in reviews
        ]
        activities.sort(key=_sort_key, reverse=True)

        logger.debug("activity_feed_built", user_id=user_id, sources=len(authors), items=len(activities))
        return activities[: settings.feed_size]
