"""Root query type."""

from typing import Optional

import strawberry

from bookmarkd.api.context import to_int
from bookmarkd.api.types import (
    ActivityType,
    BookType,
    ClubInvitationType,
    ClubJoinRequestType,
    ClubType,
    DiscussionThreadType,
    NotificationItemType,
    ReviewType,
    UserType,
)
from bookmarkd.services.books import BookService
from bookmarkd.services.club_access import ClubAccessService
from bookmarkd.services.clubs import ClubService
from bookmarkd.services.discussions import DiscussionService
from bookmarkd.services.feed import ActivityFeedService
from bookmarkd.services.notifications import NotificationService
from bookmarkd.services.reviews import ReviewService
from bookmarkd.services.users import UserService


@strawberry.type
class Query:
    @strawberry.field(description="The authenticated viewer, or null when anonymous.")
    async def me(self, info: strawberry.Info) -> Optional[UserType]:
        viewer = info.context.viewer
        if viewer is None:
            return None
        async with info.context.using(UserService) as users:
            user = await users.find(viewer.id)
        return UserType.from_model(user) if user is not None else None

    # ── Users ──

    @strawberry.field
    async def users(self, info: strawberry.Info) -> list[UserType]:
        async with info.context.using(UserService) as users:
            rows = await users.list_users()
        return [UserType.from_model(u) for u in rows]

    @strawberry.field
    async def user(self, info: strawberry.Info, id: strawberry.ID) -> UserType:
        async with info.context.using(UserService) as users:
            return UserType.from_model(await users.get(to_int(id, "User")))

    # ── Books ──

    @strawberry.field
    async def books(self, info: strawberry.Info) -> list[BookType]:
        async with info.context.using(BookService) as books:
            rows = await books.list_books()
        return [BookType.from_model(b) for b in rows]

    @strawberry.field
    async def book(self, info: strawberry.Info, id: strawberry.ID) -> BookType:
        async with info.context.using(BookService) as books:
            return BookType.from_model(await books.get(to_int(id, "Book")))

    @strawberry.field
    async def book_google(self, info: strawberry.Info, google_id: str) -> Optional[BookType]:
        async with info.context.using(BookService) as books:
            book = await books.get_by_google_id(google_id)
        return BookType.from_model(book) if book is not None else None

    # ── Reviews ──

    @strawberry.field
    async def reviews(self, info: strawberry.Info) -> list[ReviewType]:
        async with info.context.using(ReviewService) as reviews:
            rows = await reviews.list_reviews()
        return [ReviewType.from_model(r) for r in rows]

    @strawberry.field
    async def review(self, info: strawberry.Info, id: strawberry.ID) -> ReviewType:
        async with info.context.using(ReviewService) as reviews:
            return ReviewType.from_model(await reviews.get(to_int(id, "Review")))

    # ── Clubs ──

    @strawberry.field
    async def clubs(self, info: strawberry.Info) -> list[ClubType]:
        async with info.context.using(ClubService) as clubs:
            rows = await clubs.list_clubs()
        return [ClubType.from_model(c) for c in rows]

    @strawberry.field
    async def club(self, info: strawberry.Info, id: strawberry.ID) -> ClubType:
        async with info.context.using(ClubService) as clubs:
            return ClubType.from_model(await clubs.get(to_int(id, "Club")))

    @strawberry.field
    async def club_threads(
        self,
        info: strawberry.Info,
        club_id: strawberry.ID,
        book_google_id: Optional[str] = None,
    ) -> list[DiscussionThreadType]:
        async with info.context.using(DiscussionService) as discussions:
            rows = await discussions.list_threads(to_int(club_id, "Club"), book_google_id)
        return [DiscussionThreadType.from_model(t) for t in rows]

    @strawberry.field
    async def discussion_thread(self, info: strawberry.Info, id: strawberry.ID) -> DiscussionThreadType:
        async with info.context.using(DiscussionService) as discussions:
            thread = await discussions.get(to_int(id, "Discussion thread"))
        return DiscussionThreadType.from_model(thread)

    @strawberry.field
    async def club_invitations(
        self, info: strawberry.Info, user_id: strawberry.ID
    ) -> list[ClubInvitationType]:
        async with info.context.using(ClubAccessService) as access:
            rows = await access.invitations_for(info.context.viewer, to_int(user_id, "User"))
        return [ClubInvitationType.from_model(i) for i in rows]

    @strawberry.field
    async def club_join_requests(
        self, info: strawberry.Info, club_id: strawberry.ID
    ) -> list[ClubJoinRequestType]:
        async with info.context.using(ClubAccessService) as access:
            rows = await access.pending_requests(info.context.viewer, to_int(club_id, "Club"))
        return [ClubJoinRequestType.from_model(r) for r in rows]

    @strawberry.field
    async def my_club_join_requests(
        self, info: strawberry.Info, user_id: strawberry.ID
    ) -> list[ClubJoinRequestType]:
        async with info.context.using(ClubAccessService) as access:
            rows = await access.requests_for(info.context.viewer, to_int(user_id, "User"))
        return [ClubJoinRequestType.from_model(r) for r in rows]

    # ── Activity & notifications ──

    @strawberry.field
    async def activity_feed(self, info: strawberry.Info, user_id: strawberry.ID) -> list[ActivityType]:
        async with info.context.using(ActivityFeedService) as feed:
            activities = await feed.activity_feed(info.context.viewer, to_int(user_id, "User"))
        return [ActivityType.from_activity(a) for a in activities]

    @strawberry.field
    async def notifications(
        self, info: strawberry.Info, user_id: strawberry.ID
    ) -> list[NotificationItemType]:
        async with info.context.using(NotificationService) as notifications:
            rows = await notifications.list_for_user(info.context.viewer, to_int(user_id, "User"))
        return [NotificationItemType.from_model(n) for n in rows]

    @strawberry.field
    async def unread_notification_count(self, info: strawberry.Info, user_id: strawberry.ID) -> int:
        async with info.context.using(NotificationService) as notifications:
            return await notifications.unread_count(info.context.viewer, to_int(user_id, "User"))
