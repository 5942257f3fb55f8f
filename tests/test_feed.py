"""Activity feed assembly."""

from __future__ import annotations

import pytest

from bookmarkd.exceptions import Forbidden, Unauthenticated
from bookmarkd.services.feed import ActivityFeedService
from bookmarkd.services.reviews import ReviewService
from bookmarkd.services.social import SocialGraphService


class TestActivityFeed:
    @pytest.mark.asyncio
    async def test_followed_reviews_visible_only_to_followers(self, session, alice, bob, carol, viewer):
        await SocialGraphService(session).follow(viewer(alice), alice.id, bob.id)
        review = await ReviewService(session).add_review(viewer(bob), bob.id, "abc123", 5, "Wow")

        feed = ActivityFeedService(session)
        alice_feed = await feed.activity_feed(viewer(alice), alice.id)
        assert [(a.type, a.user_id, a.review.id) for a in alice_feed] == [("review", bob.id, review.id)]
        assert await feed.activity_feed(viewer(carol), carol.id) == []

    @pytest.mark.asyncio
    async def test_includes_own_reviews_newest_first(self, session, alice, bob, viewer):
        reviews = ReviewService(session)
        await SocialGraphService(session).follow(viewer(alice), alice.id, bob.id)
        first = await reviews.add_review(viewer(alice), alice.id, "abc123", 4)
        second = await reviews.add_review(viewer(bob), bob.id, "xyz789", 2)

        feed = await ActivityFeedService(session).activity_feed(viewer(alice), alice.id)
        assert [a.review.id for a in feed] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_limited_to_thirty_items(self, session, alice, bob, viewer):
        await SocialGraphService(session).follow(viewer(alice), alice.id, bob.id)
        reviews = ReviewService(session)
        for n in range(35):
            await reviews.add_review(viewer(bob), bob.id, f"book{n}", 3)

        feed = await ActivityFeedService(session).activity_feed(viewer(alice), alice.id)
        assert len(feed) == 30

    @pytest.mark.asyncio
    async def test_requires_own_identity(self, session, alice, bob, viewer):
        feed = ActivityFeedService(session)
        with pytest.raises(Unauthenticated):
            await feed.activity_feed(None, alice.id)
        with pytest.raises(Forbidden):
            await feed.activity_feed(viewer(bob), alice.id)
